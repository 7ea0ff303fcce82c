"""In-process identity lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from spellkit.domain.model import CandidateKey, EntityId, Scheme


class PointLookup(Protocol):
    def __call__(self, scheme: Scheme, raw_value: str) -> EntityId | None: ...


class InMemoryIdentityLookup:
    """Lookup over a fixed ``CandidateKey -> EntityId`` mapping."""

    def __init__(self, entries: Mapping[CandidateKey, EntityId] | None = None) -> None:
        self._entries: dict[CandidateKey, EntityId] = dict(entries or {})
        self.calls = 0

    def add(self, key: CandidateKey, entity_id: EntityId) -> None:
        self._entries[key] = entity_id

    def resolve_many(self, keys: Iterable[CandidateKey]) -> dict[CandidateKey, EntityId]:
        self.calls += 1
        return {key: self._entries[key] for key in set(keys) if key in self._entries}


class FunctionLookup:
    """Adapt a plain ``lookup(scheme, raw_value)`` callable to the bulk port.

    Each distinct key is looked up once per call to :meth:`resolve_many`.
    """

    def __init__(self, lookup: PointLookup) -> None:
        self._lookup = lookup

    def resolve_many(self, keys: Iterable[CandidateKey]) -> dict[CandidateKey, EntityId]:
        resolved: dict[CandidateKey, EntityId] = {}
        for key in sorted(set(keys)):
            entity_id = self._lookup(key.scheme, key.raw_value)
            if entity_id is not None:
                resolved[key] = entity_id
        return resolved
