"""Spells: closed date intervals with one effective value."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from spellkit.domain.model.keys import EntityId
    from spellkit.domain.model.observations import Ordinal

OPEN_FINISH_DATE: Final[date] = date(9999, 12, 31)


@dataclass(frozen=True, slots=True, kw_only=True)
class Spell:
    entity_id: EntityId
    attribute_type: str
    value: Ordinal
    source: str
    start_date: date
    finish_date: date

    def is_open(self, *, sentinel: date = OPEN_FINISH_DATE) -> bool:
        return self.finish_date == sentinel

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.finish_date

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.finish_date

    def duration_days(self, *, sentinel: date = OPEN_FINISH_DATE) -> int | None:
        """Inclusive length in days; None for the open-ended spell."""

        if self.is_open(sentinel=sentinel):
            return None
        return (self.finish_date - self.start_date).days + 1
