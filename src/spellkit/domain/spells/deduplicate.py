"""Observation deduplication.

Responsibilities of this stage:
- group observations by ``(entity_id, source, event_date)``
- combine each attribute within a group with a per-attribute combiner
- reject malformed observations one by one and keep going

Deduplicating an already-deduplicated set is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from spellkit.domain.errors import MalformedObservationError
from spellkit.domain.model import Observation, check_ordinal_values

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import date

    from spellkit.domain.model import EntityId, Ordinal, OrdinalScale

log = logging.getLogger(__name__)


class Combiner(Protocol):
    """Combine the values one attribute takes within a duplicate group."""

    def __call__(self, values: Sequence[Ordinal | None]) -> Ordinal | None: ...


def max_ignoring_null(values: Sequence[Ordinal | None]) -> Ordinal | None:
    """Worst (highest) ordinal; null only when every value is null."""

    present = [value for value in values if value is not None]
    return max(present) if present else None


def min_ignoring_null(values: Sequence[Ordinal | None]) -> Ordinal | None:
    present = [value for value in values if value is not None]
    return min(present) if present else None


def first_non_null(values: Sequence[Ordinal | None]) -> Ordinal | None:
    for value in values:
        if value is not None:
            return value
    return None


@dataclass(frozen=True, slots=True)
class RejectedObservation:
    observation: Observation
    reason: str


@dataclass(frozen=True, slots=True)
class DeduplicationResult:
    """Deduplicated observations sorted by ``(entity_id, source, event_date)``."""

    observations: tuple[Observation, ...]
    collapsed: int = 0
    rejected: tuple[RejectedObservation, ...] = ()


def deduplicate_observations(
    observations: Iterable[Observation],
    *,
    combiners: Mapping[str, Combiner] | None = None,
    default_combiner: Combiner = max_ignoring_null,
    scales: Mapping[str, OrdinalScale] | None = None,
    default_scale: OrdinalScale | None = None,
) -> DeduplicationResult:
    groups: dict[tuple[EntityId, str, date], list[Observation]] = {}
    rejected: list[RejectedObservation] = []
    for observation in observations:
        try:
            _check_observation(observation, scales=scales or {}, default_scale=default_scale)
        except MalformedObservationError as exc:
            log.warning("Rejected malformed observation: %s", exc)
            rejected.append(RejectedObservation(observation=observation, reason=str(exc)))
            continue
        groups.setdefault(observation.group_key, []).append(observation)

    merged = tuple(
        _combine_group(groups[group_key], combiners=combiners or {}, default=default_combiner)
        for group_key in sorted(groups)
    )
    kept = sum(len(group) for group in groups.values())
    result = DeduplicationResult(
        observations=merged,
        collapsed=kept - len(merged),
        rejected=tuple(rejected),
    )
    log.info(
        "Deduplicated %d observations into %d (%d rejected as malformed)",
        kept + len(rejected),
        len(merged),
        len(rejected),
    )
    return result


def _check_observation(
    observation: Observation,
    *,
    scales: Mapping[str, OrdinalScale],
    default_scale: OrdinalScale | None,
) -> None:
    check_ordinal_values(observation)
    for attribute in observation.values:
        scale = scales.get(attribute, default_scale)
        if scale is not None:
            scale.check(observation, attribute)


def _combine_group(
    group: Sequence[Observation],
    *,
    combiners: Mapping[str, Combiner],
    default: Combiner,
) -> Observation:
    if len(group) == 1:
        return group[0]
    attributes = sorted({attribute for observation in group for attribute in observation.values})
    values = {
        attribute: combiners.get(attribute, default)(
            [observation.value(attribute) for observation in group]
        )
        for attribute in attributes
    }
    first = group[0]
    return Observation(
        entity_id=first.entity_id,
        source=first.source,
        event_date=first.event_date,
        values=values,
    )
