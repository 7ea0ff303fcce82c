from __future__ import annotations

import logging
from datetime import date

import pytest

from spellkit.domain.model import OrdinalScale
from spellkit.domain.spells import (
    deduplicate_observations,
    first_non_null,
    max_ignoring_null,
    min_ignoring_null,
)
from tests.helpers.records import make_observation


def test_same_entity_source_and_date_collapse_to_the_worst_value() -> None:
    result = deduplicate_observations(
        [make_observation(seeing=1), make_observation(seeing=2)]
    )

    (observation,) = result.observations
    assert observation.value("seeing") == 2
    assert result.collapsed == 1


def test_nulls_are_ignored_unless_every_value_is_null() -> None:
    result = deduplicate_observations(
        [
            make_observation(seeing=None, hearing=None),
            make_observation(seeing=1, hearing=None),
        ]
    )

    (observation,) = result.observations
    assert observation.values == {"hearing": None, "seeing": 1}


def test_attributes_missing_from_some_duplicates_are_combined() -> None:
    result = deduplicate_observations(
        [make_observation(seeing=1), make_observation(walking=3)]
    )

    assert result.observations[0].values == {"seeing": 1, "walking": 3}


def test_different_sources_or_dates_stay_separate() -> None:
    result = deduplicate_observations(
        [
            make_observation(source="HLFS", seeing=1),
            make_observation(seeing=1),
            make_observation(event_date=date(2019, 1, 1), seeing=1),
            make_observation("A", seeing=0),
        ]
    )

    assert [obs.group_key for obs in result.observations] == [
        ("A", "CEN", date(2018, 3, 6)),
        ("X", "CEN", date(2018, 3, 6)),
        ("X", "CEN", date(2019, 1, 1)),
        ("X", "HLFS", date(2018, 3, 6)),
    ]
    assert result.collapsed == 0


def test_deduplicating_twice_is_a_no_op() -> None:
    once = deduplicate_observations(
        [
            make_observation(seeing=1, hearing=None),
            make_observation(seeing=2, hearing=1),
            make_observation("Y", seeing=0),
        ]
    )

    twice = deduplicate_observations(once.observations)

    assert twice.observations == once.observations
    assert twice.collapsed == 0


def test_combiners_can_be_chosen_per_attribute() -> None:
    result = deduplicate_observations(
        [make_observation(seeing=1, hearing=3), make_observation(seeing=2, hearing=1)],
        combiners={"hearing": min_ignoring_null},
    )

    assert result.observations[0].values == {"hearing": 1, "seeing": 2}


def test_builtin_combiners() -> None:
    assert max_ignoring_null([None, 1, 3]) == 3
    assert min_ignoring_null([None, 1, 3]) == 1
    assert first_non_null([None, 2, 1]) == 2
    assert max_ignoring_null([None, None]) is None


def test_malformed_observations_are_rejected_without_stopping_the_batch(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.WARNING)
    bad = make_observation("BAD", seeing=7)

    result = deduplicate_observations(
        [bad, make_observation(seeing=1)],
        default_scale=OrdinalScale(0, 3),
    )

    assert [obs.entity_id for obs in result.observations] == ["X"]
    assert [rejected.observation for rejected in result.rejected] == [bad]
    assert "seeing" in result.rejected[0].reason
    assert any(record.levelno == logging.WARNING for record in caplog.records)


def test_scales_apply_per_attribute() -> None:
    result = deduplicate_observations(
        [make_observation(seeing=3, walking=9)],
        scales={"seeing": OrdinalScale(0, 3)},
    )

    assert len(result.observations) == 1
    assert result.rejected == ()
