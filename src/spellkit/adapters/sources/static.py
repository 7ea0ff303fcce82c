"""Source adapter over observations built elsewhere."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from spellkit.domain.model import CanonicalObservation


class IterableSourceAdapter:
    def __init__(self, name: str, observations: Iterable[CanonicalObservation]) -> None:
        self._name = name
        self._observations = tuple(observations)

    @property
    def name(self) -> str:
        return self._name

    def observations(self) -> tuple[CanonicalObservation, ...]:
        return self._observations
