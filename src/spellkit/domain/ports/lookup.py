"""Authoritative identity lookup port."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from spellkit.domain.model import CandidateKey, EntityId


@runtime_checkable
class IdentityLookup(Protocol):
    """Bulk ``(scheme, raw_value) -> EntityId`` lookup.

    Implementations receive every distinct key of a run in one call and return
    the keys that resolve; unknown keys are simply absent from the mapping.
    """

    def resolve_many(self, keys: Iterable[CandidateKey]) -> Mapping[CandidateKey, EntityId]: ...


__all__ = ["IdentityLookup"]
