"""Candidate-key co-occurrence index.

For every key, the index records the distinct values of every *other* scheme
seen on the same rows. A key whose fan-out to any other scheme exceeds one is
ambiguous: elsewhere in the input it is paired with more than one identity.
The index is built in a single pass with hashed grouping and never compares
rows pairwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from spellkit.domain.model import CandidateKey, RawLinkRow, Scheme


type CoOccurrences = dict[CandidateKey, dict[Scheme, set[str]]]


@dataclass(slots=True)
class CandidateKeyIndex:
    _co_occurrences: CoOccurrences = field(
        default_factory=dict["CandidateKey", "dict[Scheme, set[str]]"], repr=False
    )

    @classmethod
    def build(cls, rows: Iterable[RawLinkRow]) -> CandidateKeyIndex:
        index = cls()
        for row in rows:
            index.add(row)
        return index

    def add(self, row: RawLinkRow) -> None:
        for key in row.keys:
            partners = self._co_occurrences.setdefault(key, {})
            for other in row.keys:
                if other.scheme == key.scheme:
                    continue
                partners.setdefault(other.scheme, set()).add(other.raw_value)

    @property
    def keys(self) -> tuple[CandidateKey, ...]:
        return tuple(sorted(self._co_occurrences))

    def fan_out(self, key: CandidateKey, other_scheme: Scheme) -> int:
        return len(self._co_occurrences.get(key, {}).get(other_scheme, ()))

    def max_fan_out(self, key: CandidateKey) -> int:
        partners = self._co_occurrences.get(key)
        if not partners:
            return 0
        return max(len(values) for values in partners.values())

    def is_ambiguous(self, key: CandidateKey) -> bool:
        return self.max_fan_out(key) > 1

    def ambiguous_keys(self) -> tuple[CandidateKey, ...]:
        return tuple(key for key in self.keys if self.is_ambiguous(key))

    def conflict_flag(self, row: RawLinkRow) -> bool:
        return any(self.is_ambiguous(key) for key in row.keys)

    def fan_out_counts(self, scheme: Scheme) -> dict[str, dict[Scheme, int]]:
        """Return ``raw_value -> {other scheme: distinct partner count}`` for ``scheme``."""

        counts: dict[str, dict[Scheme, int]] = {}
        for key in self.keys:
            if key.scheme != scheme:
                continue
            partners = self._co_occurrences[key]
            counts[key.raw_value] = {
                other: len(values) for other, values in sorted(partners.items())
            }
        return counts
