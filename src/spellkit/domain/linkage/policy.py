"""Acceptance policies applied after a row resolved to exactly one entity.

The default policy accepts a row when its keys agree on one entity and either
none of its keys is ambiguous elsewhere in the input, or every key on the row
resolved (a fully corroborated match).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from spellkit.domain.model import ResolutionResult


class AcceptancePolicy(Protocol):
    """Decide whether a classified row may flow downstream."""

    def __call__(self, result: ResolutionResult) -> bool: ...


def default_acceptance_policy(result: ResolutionResult) -> bool:
    if result.distinct_resolved_id_count != 1:
        return False
    return not result.conflict_flag or result.link_failure_count == 0


def strict_acceptance_policy(result: ResolutionResult) -> bool:
    return result.distinct_resolved_id_count == 1 and not result.conflict_flag


def lenient_acceptance_policy(result: ResolutionResult) -> bool:
    return result.distinct_resolved_id_count == 1


ACCEPTANCE_POLICIES: Final[Mapping[str, AcceptancePolicy]] = MappingProxyType(
    {
        "default": default_acceptance_policy,
        "strict": strict_acceptance_policy,
        "lenient": lenient_acceptance_policy,
    }
)


def acceptance_policy_named(name: str) -> AcceptancePolicy:
    try:
        return ACCEPTANCE_POLICIES[name]
    except KeyError as exc:
        known = ", ".join(sorted(ACCEPTANCE_POLICIES))
        raise ValueError(f"Unknown acceptance policy {name!r} (expected one of: {known})") from exc
