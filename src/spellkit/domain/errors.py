"""Domain error definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spellkit.domain.model import Observation


class SpellkitError(RuntimeError):
    """Base class for errors raised by spellkit."""


class MalformedObservationError(ValueError):
    """Raised when an observation carries a value outside its ordinal scale."""

    def __init__(self, observation: Observation, *, attribute: str, value: object) -> None:
        self.observation = observation
        self.attribute = attribute
        self.value = value
        super().__init__(
            "Observation value outside its ordinal scale: "
            f"entity={observation.entity_id}, "
            f"source={observation.source}, "
            f"event_date={observation.event_date.isoformat()}, "
            f"attribute={attribute}, "
            f"value={value!r}"
        )
