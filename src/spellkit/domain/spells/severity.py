"""Severity aggregation across the sub-measures of one observation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from spellkit.domain.model import AggregatedObservation

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from spellkit.domain.model import Observation, Ordinal

log = logging.getLogger(__name__)

DEFAULT_FAMILY: Final[str] = "any"


def aggregate_severity(values: Iterable[Ordinal | None]) -> Ordinal | None:
    """Worst non-null sub-value, or None when every sub-value is null."""

    present = [value for value in values if value is not None]
    return max(present) if present else None


def any_at_or_above(values: Iterable[Ordinal | None], threshold: Ordinal) -> int:
    """1 when any non-null sub-value reaches ``threshold``, else 0."""

    return int(any(value is not None and value >= threshold for value in values))


def aggregate_observations(
    observations: Iterable[Observation],
    *,
    family: str = DEFAULT_FAMILY,
    measures: Sequence[str] | None = None,
    drop_unknown: bool = True,
) -> tuple[AggregatedObservation, ...]:
    """Collapse each observation's sub-measures into one ``family`` value.

    With ``measures`` given only those attributes count towards the overall
    value (missing ones read as null); otherwise every attribute except
    ``family`` does. Observations whose sub-measures are all null are dropped
    unless ``drop_unknown`` is False.
    """

    aggregated: list[AggregatedObservation] = []
    dropped = 0
    for observation in observations:
        names = measures if measures is not None else sorted(observation.values)
        sub_values = {name: observation.value(name) for name in names if name != family}
        overall = aggregate_severity(sub_values.values())
        if overall is None and drop_unknown:
            dropped += 1
            continue
        aggregated.append(
            AggregatedObservation(
                entity_id=observation.entity_id,
                source=observation.source,
                event_date=observation.event_date,
                family=family,
                overall_value=overall,
                values=sub_values,
            )
        )
    log.info(
        "Aggregated %d observations into family %r (%d with no known value dropped)",
        len(aggregated),
        family,
        dropped,
    )
    return tuple(aggregated)
