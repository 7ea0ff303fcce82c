"""Exact-key identity linkage.

Stages, in order:
1) drop exact-duplicate link rows
2) index candidate keys across schemes (one global pass)
3) resolve every distinct key through the bulk identity lookup
4) classify each row and apply the acceptance policy
"""

from __future__ import annotations

from .index import CandidateKeyIndex
from .policy import (
    ACCEPTANCE_POLICIES,
    AcceptancePolicy,
    acceptance_policy_named,
    default_acceptance_policy,
    lenient_acceptance_policy,
    strict_acceptance_policy,
)
from .resolve import ResolutionReport, deduplicate_rows, describe_match, resolve_identities

__all__ = [
    "ACCEPTANCE_POLICIES",
    "AcceptancePolicy",
    "CandidateKeyIndex",
    "ResolutionReport",
    "acceptance_policy_named",
    "deduplicate_rows",
    "default_acceptance_policy",
    "describe_match",
    "lenient_acceptance_policy",
    "resolve_identities",
    "strict_acceptance_policy",
]
