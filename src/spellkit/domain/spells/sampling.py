"""Reading values back out of a spell table."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from spellkit.domain.model import EntityId, Ordinal, Spell


class SpellTable:
    """Spells indexed per ``(entity_id, attribute_type)``, sorted by start date."""

    def __init__(self, spells: Iterable[Spell]) -> None:
        partitions: dict[tuple[EntityId, str], list[Spell]] = {}
        for spell in spells:
            partitions.setdefault((spell.entity_id, spell.attribute_type), []).append(spell)
        self._spells: dict[tuple[EntityId, str], tuple[Spell, ...]] = {
            key: tuple(sorted(partitions[key], key=lambda spell: spell.start_date))
            for key in sorted(partitions)
        }
        self._starts = {
            key: [spell.start_date for spell in spells] for key, spells in self._spells.items()
        }

    def __iter__(self) -> Iterator[Spell]:
        for spells in self._spells.values():
            yield from spells

    def __len__(self) -> int:
        return sum(len(spells) for spells in self._spells.values())

    def entities(self) -> tuple[EntityId, ...]:
        return tuple(sorted({entity_id for entity_id, _ in self._spells}))

    def attribute_types(self) -> tuple[str, ...]:
        return tuple(sorted({attribute_type for _, attribute_type in self._spells}))

    def spells_for(self, entity_id: EntityId, attribute_type: str) -> tuple[Spell, ...]:
        return self._spells.get((entity_id, attribute_type), ())

    def for_attribute(self, attribute_type: str) -> tuple[Spell, ...]:
        """All spells of one attribute, like a per-measure view of the table."""

        return tuple(
            spell
            for (_, spell_attribute), spells in self._spells.items()
            if spell_attribute == attribute_type
            for spell in spells
        )

    def value_at(self, entity_id: EntityId, attribute_type: str, day: date) -> Spell | None:
        """Return the spell covering ``day``, or None before the first observation."""

        key = (entity_id, attribute_type)
        spells = self._spells.get(key, ())
        position = bisect_right(self._starts.get(key, []), day)
        for spell in reversed(spells[:position]):
            if spell.covers(day):
                return spell
            if spell.start_date <= spell.finish_date:
                # a well-formed spell that ends before ``day``; nothing earlier can cover it
                return None
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class PeriodValue:
    entity_id: EntityId
    attribute_type: str
    period_start: date
    period_end: date
    value: Ordinal


def quarter_bounds(day: date) -> tuple[date, date]:
    """First and last day of the calendar quarter holding ``day``."""

    first_month = 3 * ((day.month - 1) // 3) + 1
    start = date(day.year, first_month, 1)
    if first_month == 10:
        end = date(day.year, 12, 31)
    else:
        end = date(day.year, first_month + 3, 1) - timedelta(days=1)
    return start, end


def iter_quarters(first: date, last: date) -> Iterator[tuple[date, date]]:
    """Yield every calendar quarter from the one holding ``first`` to the one holding ``last``."""

    if first > last:
        raise ValueError("Quarter range start must not be after its end")
    start, end = quarter_bounds(first)
    while start <= last:
        yield start, end
        start, end = quarter_bounds(end + timedelta(days=1))


def highest_per_period(
    table: SpellTable,
    periods: Sequence[tuple[date, date]],
    *,
    attribute_type: str | None = None,
) -> tuple[PeriodValue, ...]:
    """Highest value among the spells overlapping each period.

    Periods no spell overlaps are left out, so an entity only appears from
    the period of its first observation onwards.
    """

    attributes = (attribute_type,) if attribute_type is not None else table.attribute_types()
    values: list[PeriodValue] = []
    for entity_id in table.entities():
        for attribute in attributes:
            spells = [
                spell
                for spell in table.spells_for(entity_id, attribute)
                if spell.start_date <= spell.finish_date
            ]
            if not spells:
                continue
            for period_start, period_end in periods:
                overlapping = [
                    spell.value for spell in spells if spell.overlaps(period_start, period_end)
                ]
                if overlapping:
                    values.append(
                        PeriodValue(
                            entity_id=entity_id,
                            attribute_type=attribute,
                            period_start=period_start,
                            period_end=period_end,
                            value=max(overlapping),
                        )
                    )
    return tuple(values)
