"""Builders for link rows, observations and measurements used across tests."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from spellkit.domain.model import (
    CandidateKey,
    CanonicalObservation,
    Measurement,
    Observation,
    RawLinkRow,
)

if TYPE_CHECKING:
    from spellkit.domain.model import Ordinal

CENSUS_NIGHT = date(2018, 3, 6)


def make_key(scheme: str, raw_value: str) -> CandidateKey:
    return CandidateKey(scheme, raw_value)


def make_row(*pairs: tuple[str, str], **payload: str) -> RawLinkRow:
    return RawLinkRow.of((make_key(scheme, value) for scheme, value in pairs), **payload)


def make_observation(
    entity_id: str = "X",
    *,
    source: str = "CEN",
    event_date: date = CENSUS_NIGHT,
    **values: Ordinal | None,
) -> Observation:
    return Observation(entity_id=entity_id, source=source, event_date=event_date, values=values)


def make_canonical(
    *pairs: tuple[str, str],
    source: str = "CEN",
    event_date: date = CENSUS_NIGHT,
    **values: Ordinal | None,
) -> CanonicalObservation:
    return CanonicalObservation(
        keys=tuple(make_key(scheme, value) for scheme, value in pairs),
        source=source,
        event_date=event_date,
        values=values,
    )


def make_measurement(
    event_date: date,
    value: Ordinal,
    *,
    entity_id: str = "X",
    attribute_type: str = "seeing",
    source: str = "CEN",
) -> Measurement:
    return Measurement(
        entity_id=entity_id,
        attribute_type=attribute_type,
        source=source,
        event_date=event_date,
        value=value,
    )
