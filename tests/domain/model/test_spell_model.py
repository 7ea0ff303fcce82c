from __future__ import annotations

from datetime import date

from spellkit.domain.model import OPEN_FINISH_DATE, Spell


def _spell(start: date, finish: date) -> Spell:
    return Spell(
        entity_id="X",
        attribute_type="seeing",
        value=1,
        source="CEN",
        start_date=start,
        finish_date=finish,
    )


def test_open_spell_has_no_duration() -> None:
    spell = _spell(date(2018, 3, 6), OPEN_FINISH_DATE)

    assert spell.is_open()
    assert spell.duration_days() is None
    assert spell.covers(date(2030, 1, 1))


def test_closed_spell_duration_is_inclusive() -> None:
    spell = _spell(date(2018, 3, 6), date(2018, 3, 8))

    assert not spell.is_open()
    assert spell.duration_days() == 3
    assert spell.covers(date(2018, 3, 8))
    assert not spell.covers(date(2018, 3, 9))


def test_overlaps_checks_both_bounds() -> None:
    spell = _spell(date(2018, 3, 6), date(2018, 3, 31))

    assert spell.overlaps(date(2018, 1, 1), date(2018, 3, 6))
    assert spell.overlaps(date(2018, 3, 31), date(2018, 6, 30))
    assert not spell.overlaps(date(2018, 4, 1), date(2018, 6, 30))
