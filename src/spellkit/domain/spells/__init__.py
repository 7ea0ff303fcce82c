"""From resolved observations to spells.

Stages, in order:
1) deduplicate observations per ``(entity_id, source, event_date)``
2) aggregate sub-measures into one overall severity value
3) expand into long-form measurements
4) build non-overlapping spells per ``(entity_id, attribute_type)``
"""

from __future__ import annotations

from .builder import (
    CollisionPolicy,
    SameDateCollision,
    SpellBuildResult,
    build_spells,
    measurements_for,
    source_ranking,
)
from .deduplicate import (
    Combiner,
    DeduplicationResult,
    RejectedObservation,
    deduplicate_observations,
    first_non_null,
    max_ignoring_null,
    min_ignoring_null,
)
from .sampling import PeriodValue, SpellTable, highest_per_period, iter_quarters, quarter_bounds
from .severity import aggregate_observations, aggregate_severity, any_at_or_above

__all__ = [
    "CollisionPolicy",
    "Combiner",
    "DeduplicationResult",
    "PeriodValue",
    "RejectedObservation",
    "SameDateCollision",
    "SpellBuildResult",
    "SpellTable",
    "aggregate_observations",
    "aggregate_severity",
    "any_at_or_above",
    "build_spells",
    "deduplicate_observations",
    "first_non_null",
    "highest_per_period",
    "iter_quarters",
    "max_ignoring_null",
    "measurements_for",
    "min_ignoring_null",
    "quarter_bounds",
    "source_ranking",
]
