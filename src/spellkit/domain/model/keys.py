"""Candidate keys and the raw rows that carry them.

A candidate key is an identifier from one agency's ID space. It may or may not
resolve to a canonical entity. Rows are immutable and hashable so exact
duplicates can be dropped with plain set semantics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from spellkit.domain.model.enums import IdentifierScheme

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable


type Scheme = str | IdentifierScheme  # identifies the agency ID space of a key
type EntityId = str
type PayloadItem = tuple[str, Hashable]


def normalize_scheme(scheme: Scheme) -> Scheme:
    """Return the known ``IdentifierScheme`` member for ``scheme``, else the plain string.

    Enum members and plain strings hash differently, so keys are always stored
    in one canonical form.
    """

    try:
        return IdentifierScheme(scheme)
    except ValueError:
        return str(scheme)


@dataclass(frozen=True, slots=True, order=True)
class CandidateKey:
    scheme: Scheme
    raw_value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "scheme", normalize_scheme(self.scheme))
        if not str(self.scheme).strip():
            raise ValueError("Candidate key scheme must not be blank")
        if not self.raw_value.strip():
            raise ValueError(f"Candidate key value must not be blank (scheme={self.scheme})")

    def __str__(self) -> str:
        return f"{self.scheme}:{self.raw_value}"


@dataclass(frozen=True, slots=True)
class RawLinkRow:
    """One input record bearing at most one candidate key per scheme.

    Keys and payload items are stored sorted, so two rows built from the same
    values in a different order compare (and hash) equal.
    """

    keys: tuple[CandidateKey, ...]
    payload: tuple[PayloadItem, ...] = ()

    def __post_init__(self) -> None:
        ordered_keys = tuple(sorted(self.keys))
        schemes = [key.scheme for key in ordered_keys]
        if len(set(schemes)) != len(schemes):
            repeated = sorted({str(scheme) for scheme in schemes if schemes.count(scheme) > 1})
            raise ValueError(f"Link row carries more than one key for: {', '.join(repeated)}")
        object.__setattr__(self, "keys", ordered_keys)
        object.__setattr__(self, "payload", tuple(sorted(self.payload, key=lambda item: item[0])))

    @classmethod
    def of(cls, keys: Iterable[CandidateKey], **payload: Hashable) -> RawLinkRow:
        return cls(keys=tuple(keys), payload=tuple(payload.items()))

    @property
    def schemes(self) -> tuple[Scheme, ...]:
        return tuple(key.scheme for key in self.keys)

    @property
    def payload_dict(self) -> dict[str, Hashable]:
        return dict(self.payload)

    def key_for(self, scheme: Scheme) -> CandidateKey | None:
        for key in self.keys:
            if key.scheme == scheme:
                return key
        return None
