from __future__ import annotations

import pytest

from spellkit.domain.model import CandidateKey, IdentifierScheme, RawLinkRow
from tests.helpers.records import make_key, make_row


def test_candidate_key_normalises_known_schemes_to_enum() -> None:
    key = CandidateKey("moh", "123")

    assert key.scheme is IdentifierScheme.MOH
    assert key == CandidateKey(IdentifierScheme.MOH, "123")
    assert hash(key) == hash(CandidateKey(IdentifierScheme.MOH, "123"))


def test_candidate_key_keeps_unknown_schemes_as_strings() -> None:
    key = CandidateKey("school_roll", "A1")

    assert key.scheme == "school_roll"
    assert str(key) == "school_roll:A1"


@pytest.mark.parametrize(("scheme", "raw_value"), [("moh", "  "), (" ", "1")])
def test_candidate_key_rejects_blank_parts(scheme: str, raw_value: str) -> None:
    with pytest.raises(ValueError, match="must not be blank"):
        CandidateKey(scheme, raw_value)


def test_link_row_orders_keys_so_duplicates_compare_equal() -> None:
    first = RawLinkRow.of([make_key("msd", "9"), make_key("moh", "1")], source="CEN")
    second = RawLinkRow.of([make_key("moh", "1"), make_key("msd", "9")], source="CEN")

    assert first == second
    assert len({first, second}) == 1
    assert first.schemes == (IdentifierScheme.MOH, IdentifierScheme.MSD)


def test_link_row_rejects_two_keys_for_one_scheme() -> None:
    with pytest.raises(ValueError, match="moh"):
        make_row(("moh", "1"), ("moh", "2"))


def test_link_row_payload_round_trips_through_dict() -> None:
    row = make_row(("moh", "1"), source="CEN", note="x")

    assert row.payload_dict == {"note": "x", "source": "CEN"}
    assert row.key_for("moh") == make_key("moh", "1")
    assert row.key_for("ird") is None
