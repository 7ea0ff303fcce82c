"""Pipeline defaults read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Final

from spellkit.domain.linkage.policy import ACCEPTANCE_POLICIES
from spellkit.domain.model import OPEN_FINISH_DATE, OrdinalScale
from spellkit.domain.spells.builder import CollisionPolicy
from spellkit.domain.spells.severity import DEFAULT_FAMILY

from .env import optional_env_var
from .errors import ConfigurationError

DEFAULT_ACCEPTANCE_POLICY: Final[str] = "default"
DEFAULT_OVERALL_ATTRIBUTE: Final[str] = DEFAULT_FAMILY


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    acceptance_policy: str = DEFAULT_ACCEPTANCE_POLICY
    source_order: tuple[str, ...] | None = None
    collision_policy: CollisionPolicy = CollisionPolicy.KEEP
    open_finish_date: date = OPEN_FINISH_DATE
    overall_attribute: str = DEFAULT_OVERALL_ATTRIBUTE
    ordinal_range: OrdinalScale | None = None

    def __post_init__(self) -> None:
        if self.acceptance_policy not in ACCEPTANCE_POLICIES:
            known = ", ".join(sorted(ACCEPTANCE_POLICIES))
            raise ConfigurationError(
                f"Unknown acceptance policy {self.acceptance_policy!r} (expected one of: {known})"
            )
        if not self.overall_attribute:
            raise ConfigurationError("Overall attribute name must not be blank")


def _parse_source_order(value: str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    names = tuple(part.strip() for part in value.split(",") if part.strip())
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Source order lists a source more than once: {value}")
    return names or None


def _parse_collision_policy(value: str | None) -> CollisionPolicy:
    if value is None:
        return CollisionPolicy.KEEP
    try:
        return CollisionPolicy(value.lower())
    except ValueError as exc:
        raise ConfigurationError(f"Unknown collision policy: {value}") from exc


def _parse_open_finish_date(value: str | None) -> date:
    if value is None:
        return OPEN_FINISH_DATE
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid open finish date: {value}") from exc


def _parse_ordinal_range(value: str | None) -> OrdinalScale | None:
    if value is None:
        return None
    try:
        low, high = (int(part) for part in value.split(".."))
        return OrdinalScale(low, high)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid ordinal range (expected low..high): {value}") from exc


def get_pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        acceptance_policy=optional_env_var("SPELLKIT_ACCEPTANCE_POLICY")
        or DEFAULT_ACCEPTANCE_POLICY,
        source_order=_parse_source_order(optional_env_var("SPELLKIT_SOURCE_ORDER")),
        collision_policy=_parse_collision_policy(optional_env_var("SPELLKIT_COLLISION_POLICY")),
        open_finish_date=_parse_open_finish_date(optional_env_var("SPELLKIT_OPEN_FINISH_DATE")),
        overall_attribute=optional_env_var("SPELLKIT_OVERALL_ATTRIBUTE")
        or DEFAULT_OVERALL_ATTRIBUTE,
        ordinal_range=_parse_ordinal_range(optional_env_var("SPELLKIT_ORDINAL_RANGE")),
    )
