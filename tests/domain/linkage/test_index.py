from __future__ import annotations

from spellkit.domain.linkage import CandidateKeyIndex
from spellkit.domain.model import IdentifierScheme
from tests.helpers.records import make_key, make_row


def test_key_paired_with_two_values_of_another_scheme_is_ambiguous() -> None:
    rows = [
        make_row(("moh", "1"), ("msd", "A")),
        make_row(("moh", "1"), ("msd", "B")),
        make_row(("moh", "2"), ("msd", "C")),
    ]

    index = CandidateKeyIndex.build(rows)

    assert index.fan_out(make_key("moh", "1"), "msd") == 2
    assert index.fan_out(make_key("msd", "A"), "moh") == 1
    assert index.is_ambiguous(make_key("moh", "1"))
    assert not index.is_ambiguous(make_key("moh", "2"))
    assert index.ambiguous_keys() == (make_key("moh", "1"),)


def test_conflict_flag_is_set_when_any_key_on_the_row_is_ambiguous() -> None:
    shared = make_row(("moh", "1"), ("msd", "A"))
    other = make_row(("moh", "1"), ("msd", "B"), ("ird", "Z"))
    clean = make_row(("ird", "Y"), ("moe", "M"))

    index = CandidateKeyIndex.build([shared, other, clean])

    assert index.conflict_flag(shared)
    assert index.conflict_flag(other)
    assert not index.conflict_flag(clean)


def test_repeated_pairing_does_not_raise_fan_out() -> None:
    row = make_row(("moh", "1"), ("msd", "A"))

    index = CandidateKeyIndex.build([row, make_row(("moh", "1"), ("msd", "A"), source="S2")])

    assert index.max_fan_out(make_key("moh", "1")) == 1
    assert index.ambiguous_keys() == ()


def test_fan_out_counts_per_scheme() -> None:
    rows = [
        make_row(("moh", "1"), ("msd", "A"), ("ird", "X")),
        make_row(("moh", "1"), ("msd", "B")),
    ]

    counts = CandidateKeyIndex.build(rows).fan_out_counts(IdentifierScheme.MOH)

    assert counts == {"1": {IdentifierScheme.IRD: 1, IdentifierScheme.MSD: 2}}


def test_single_key_rows_have_no_fan_out() -> None:
    index = CandidateKeyIndex.build([make_row(("moh", "1"))])

    assert index.keys == (make_key("moh", "1"),)
    assert index.max_fan_out(make_key("moh", "1")) == 0
    assert index.max_fan_out(make_key("moh", "unknown")) == 0
