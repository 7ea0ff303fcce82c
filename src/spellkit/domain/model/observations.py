"""Observation records flowing from source adapters to the spell builder."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Final

from spellkit.domain.errors import MalformedObservationError
from spellkit.domain.model.keys import RawLinkRow

if TYPE_CHECKING:
    from collections.abc import Iterator

    from spellkit.domain.model.keys import CandidateKey, EntityId


type Ordinal = int
type ValueMap = Mapping[str, Ordinal | None]

FUNCTIONAL_DOMAINS: Final[tuple[str, ...]] = (
    "hearing",
    "seeing",
    "walking",
    "remembering",
    "washing",
    "communication",
)

_SOURCE: Final[str] = "source"
_EVENT_DATE: Final[str] = "event_date"
_VALUES: Final[str] = "values"


def _frozen_values(values: ValueMap) -> tuple[tuple[str, Ordinal | None], ...]:
    return tuple(sorted(values.items()))


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalObservation:
    """The unit every source adapter emits.

    ``event_date`` may be a documented proxy (for example a census night or a
    mid-period date) when the true date is unknown.
    """

    keys: tuple[CandidateKey, ...]
    source: str
    event_date: date
    values: ValueMap = field(default_factory=dict["str", "Ordinal | None"], hash=False)

    def to_link_row(self) -> RawLinkRow:
        return RawLinkRow.of(
            self.keys,
            source=self.source,
            event_date=self.event_date,
            values=_frozen_values(self.values),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class Observation:
    """A point-in-time observation attached to a resolved entity."""

    entity_id: EntityId
    source: str
    event_date: date
    values: ValueMap = field(default_factory=dict["str", "Ordinal | None"], hash=False)

    @property
    def group_key(self) -> tuple[EntityId, str, date]:
        return (self.entity_id, self.source, self.event_date)

    def value(self, attribute: str) -> Ordinal | None:
        return self.values.get(attribute)

    @classmethod
    def from_link_row(cls, row: RawLinkRow, entity_id: EntityId) -> Observation:
        payload = row.payload_dict
        missing = [name for name in (_SOURCE, _EVENT_DATE, _VALUES) if name not in payload]
        if missing:
            raise ValueError(f"Link row payload lacks observation fields: {', '.join(missing)}")
        source = payload[_SOURCE]
        event_date = payload[_EVENT_DATE]
        values = payload[_VALUES]
        if not isinstance(source, str) or not isinstance(event_date, date):
            raise TypeError("Link row payload carries an invalid source or event date")
        if not isinstance(values, tuple):
            raise TypeError("Link row payload values must be a tuple of (attribute, value) pairs")
        return cls(
            entity_id=entity_id,
            source=source,
            event_date=event_date,
            values=dict(values),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class Measurement:
    """Long-form observation of one attribute; the spell builder's input row."""

    entity_id: EntityId
    attribute_type: str
    source: str
    event_date: date
    value: Ordinal


@dataclass(frozen=True, slots=True, kw_only=True)
class AggregatedObservation:
    """One record per (entity, source, date) carrying the overall family value.

    ``values`` keeps the sub-measures so spells can be built per sub-measure as
    well as for ``family``.
    """

    entity_id: EntityId
    source: str
    event_date: date
    family: str
    overall_value: Ordinal | None
    values: ValueMap = field(default_factory=dict["str", "Ordinal | None"], hash=False)

    def measurements(self, *, include_sub_measures: bool = True) -> tuple[Measurement, ...]:
        return tuple(self._iter_measurements(include_sub_measures=include_sub_measures))

    def _iter_measurements(self, *, include_sub_measures: bool) -> Iterator[Measurement]:
        if include_sub_measures:
            for attribute, value in sorted(self.values.items()):
                if value is None:
                    continue
                yield self._measurement(attribute, value)
        if self.overall_value is not None:
            yield self._measurement(self.family, self.overall_value)

    def _measurement(self, attribute_type: str, value: Ordinal) -> Measurement:
        return Measurement(
            entity_id=self.entity_id,
            attribute_type=attribute_type,
            source=self.source,
            event_date=self.event_date,
            value=value,
        )


@dataclass(frozen=True, slots=True)
class OrdinalScale:
    """Inclusive range of ordinal values accepted for an attribute."""

    low: Ordinal
    high: Ordinal

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(
                f"Ordinal scale low bound exceeds high bound: {self.low} > {self.high}"
            )

    def contains(self, value: object) -> bool:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return self.low <= value <= self.high

    def check(self, observation: Observation, attribute: str) -> None:
        value = observation.value(attribute)
        if value is None:
            return
        if not self.contains(value):
            raise MalformedObservationError(observation, attribute=attribute, value=value)


def _is_ordinal(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_ordinal_values(observation: Observation) -> None:
    """Reject values that are neither null nor an integer ordinal."""

    for attribute, value in observation.values.items():
        if value is not None and not _is_ordinal(value):
            raise MalformedObservationError(observation, attribute=attribute, value=value)
