"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class IdentifierScheme(StrEnum):
    """Agency identifier spaces that may carry a candidate key."""

    MOH = "moh"
    MSD = "msd"
    IRD = "ird"
    DIA = "dia"
    ACC = "acc"
    MOE = "moe"
    HLFS = "hlfs"
    GSS = "gss"
    CENSUS = "census"
    CUSTOMS = "customs"
    NHI = "nhi"


class ResolutionStatus(StrEnum):
    """Outcome of resolving one link row before the acceptance policy runs."""

    UNLINKABLE = "unlinkable"
    LINKED = "linked"
    CONFLICTING = "conflicting"


class RejectionReason(StrEnum):
    """Why a link row was excluded from downstream processing."""

    UNLINKABLE = "unlinkable"
    CONFLICTING_LINK = "conflicting_link"
    AMBIGUOUS_KEY = "ambiguous_key"
    POLICY = "policy"
