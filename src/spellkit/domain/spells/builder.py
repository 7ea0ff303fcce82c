"""Spell construction from point measurements.

Measurements are partitioned by ``(entity_id, attribute_type)``, sorted by
``(event_date, source rank, source)`` and scanned pairwise: each spell
finishes the day before its successor starts, and the last one stays open.
Adjacent spells carrying the same value are never merged, so a change of
source always starts a new spell.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from itertools import groupby
from typing import TYPE_CHECKING, Final

from spellkit.domain.model import OPEN_FINISH_DATE, Spell

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import date

    from spellkit.domain.model import AggregatedObservation, EntityId, Measurement, Ordinal

log = logging.getLogger(__name__)

ONE_DAY: Final[timedelta] = timedelta(days=1)

type SourceRank = Callable[[str], tuple[int, str]]


class CollisionPolicy(StrEnum):
    """What to do when one entity/attribute has several measurements on one date."""

    KEEP = "keep"
    COLLAPSE = "collapse"


@dataclass(frozen=True, slots=True, kw_only=True)
class SameDateCollision:
    entity_id: EntityId
    attribute_type: str
    event_date: date
    sources: tuple[str, ...]
    values: tuple[Ordinal, ...]


@dataclass(frozen=True, slots=True)
class SpellBuildResult:
    spells: tuple[Spell, ...]
    collisions: tuple[SameDateCollision, ...] = ()
    beyond_open_finish: tuple[Measurement, ...] = ()


def source_ranking(source_order: Sequence[str] | None = None) -> SourceRank:
    """Rank listed sources by position; unlisted ones follow, lexicographically."""

    ranks = {name: position for position, name in enumerate(source_order or ())}
    unlisted = len(ranks)

    def rank(source: str) -> tuple[int, str]:
        return (ranks.get(source, unlisted), source)

    return rank


def measurements_for(
    aggregated: Iterable[AggregatedObservation],
    *,
    include_sub_measures: bool = True,
) -> tuple[Measurement, ...]:
    """Long-form measurements: the family value plus each non-null sub-measure."""

    return tuple(
        measurement
        for observation in aggregated
        for measurement in observation.measurements(include_sub_measures=include_sub_measures)
    )


def build_spells(
    measurements: Iterable[Measurement],
    *,
    source_order: Sequence[str] | None = None,
    collision_policy: CollisionPolicy = CollisionPolicy.KEEP,
    open_finish: date = OPEN_FINISH_DATE,
) -> SpellBuildResult:
    """Build gap-free spells per ``(entity_id, attribute_type)``.

    Same-date measurements are reported as collisions. With
    ``CollisionPolicy.KEEP`` every one of them still yields a spell, the
    earlier ones ending before they start; ``CollisionPolicy.COLLAPSE`` keeps
    the highest value per date, ties going to the better-ranked source.
    Measurements dated on or after ``open_finish`` cannot start a spell; they
    are skipped and returned in ``beyond_open_finish``.
    """

    rank = source_ranking(source_order)
    partitions: dict[tuple[EntityId, str], list[Measurement]] = {}
    beyond_open_finish: list[Measurement] = []
    for measurement in measurements:
        if measurement.event_date >= open_finish:
            log.warning(
                "Skipping %s measurement for entity %s dated %s, not before open finish %s",
                measurement.attribute_type,
                measurement.entity_id,
                measurement.event_date.isoformat(),
                open_finish.isoformat(),
            )
            beyond_open_finish.append(measurement)
            continue
        partitions.setdefault((measurement.entity_id, measurement.attribute_type), []).append(
            measurement
        )

    spells: list[Spell] = []
    collisions: list[SameDateCollision] = []
    for partition_key in sorted(partitions):
        ordered = sorted(
            partitions[partition_key],
            key=lambda m: (m.event_date, rank(m.source), m.value),
        )
        found = _find_collisions(ordered)
        for collision in found:
            log.warning(
                "Same-date collision for entity %s, attribute %s on %s: sources %s, values %s",
                collision.entity_id,
                collision.attribute_type,
                collision.event_date.isoformat(),
                ", ".join(collision.sources),
                ", ".join(str(value) for value in collision.values),
            )
        collisions.extend(found)
        if found and collision_policy is CollisionPolicy.COLLAPSE:
            ordered = _collapse_same_dates(ordered, rank)
        spells.extend(_scan(ordered, open_finish=open_finish))

    log.info(
        "Built %d spells across %d entity/attribute partitions "
        "(%d same-date collisions, %d measurements beyond open finish)",
        len(spells),
        len(partitions),
        len(collisions),
        len(beyond_open_finish),
    )
    return SpellBuildResult(
        spells=tuple(spells),
        collisions=tuple(collisions),
        beyond_open_finish=tuple(beyond_open_finish),
    )


def _by_date(ordered: Sequence[Measurement]) -> Iterable[tuple[date, list[Measurement]]]:
    for event_date, group in groupby(ordered, key=lambda measurement: measurement.event_date):
        yield event_date, list(group)


def _find_collisions(ordered: Sequence[Measurement]) -> list[SameDateCollision]:
    collisions: list[SameDateCollision] = []
    for event_date, group in _by_date(ordered):
        if len(group) < 2:
            continue
        first = group[0]
        collisions.append(
            SameDateCollision(
                entity_id=first.entity_id,
                attribute_type=first.attribute_type,
                event_date=event_date,
                sources=tuple(measurement.source for measurement in group),
                values=tuple(measurement.value for measurement in group),
            )
        )
    return collisions


def _collapse_same_dates(ordered: Sequence[Measurement], rank: SourceRank) -> list[Measurement]:
    return [
        min(group, key=lambda measurement: (-measurement.value, rank(measurement.source)))
        for _, group in _by_date(ordered)
    ]


def _scan(ordered: Sequence[Measurement], *, open_finish: date) -> Iterable[Spell]:
    successors: list[Measurement | None] = [*ordered[1:], None]
    for current, successor in zip(ordered, successors, strict=True):
        finish = open_finish if successor is None else successor.event_date - ONE_DAY
        yield Spell(
            entity_id=current.entity_id,
            attribute_type=current.attribute_type,
            value=current.value,
            source=current.source,
            start_date=current.event_date,
            finish_date=finish,
        )
