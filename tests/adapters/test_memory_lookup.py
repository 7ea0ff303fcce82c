from __future__ import annotations

from spellkit.adapters.memory import FunctionLookup, InMemoryIdentityLookup
from spellkit.domain.model import IdentifierScheme
from spellkit.domain.ports import IdentityLookup
from tests.helpers.records import make_key


def test_in_memory_lookup_omits_unknown_keys() -> None:
    lookup = InMemoryIdentityLookup({make_key("moh", "1"): "E1"})
    lookup.add(make_key("msd", "A"), "E2")

    resolved = lookup.resolve_many(
        [make_key("moh", "1"), make_key("msd", "A"), make_key("ird", "x")]
    )

    assert resolved == {make_key("moh", "1"): "E1", make_key("msd", "A"): "E2"}
    assert isinstance(lookup, IdentityLookup)


def test_function_lookup_calls_each_distinct_key_once() -> None:
    seen: list[tuple[str, str]] = []

    def lookup(scheme: str, raw_value: str) -> str | None:
        seen.append((scheme, raw_value))
        return "E1" if scheme == IdentifierScheme.MOH else None

    bulk = FunctionLookup(lookup)
    resolved = bulk.resolve_many(
        [make_key("moh", "1"), make_key("moh", "1"), make_key("msd", "A")]
    )

    assert resolved == {make_key("moh", "1"): "E1"}
    assert seen == [(IdentifierScheme.MOH, "1"), (IdentifierScheme.MSD, "A")]
