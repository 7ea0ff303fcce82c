"""Public domain model surface."""

from __future__ import annotations

from spellkit.domain.model.enums import IdentifierScheme, RejectionReason, ResolutionStatus
from spellkit.domain.model.keys import CandidateKey, EntityId, RawLinkRow, Scheme, normalize_scheme
from spellkit.domain.model.observations import (
    FUNCTIONAL_DOMAINS,
    AggregatedObservation,
    CanonicalObservation,
    Measurement,
    Observation,
    Ordinal,
    OrdinalScale,
    ValueMap,
    check_ordinal_values,
)
from spellkit.domain.model.resolution import AuditEntry, ResolutionResult
from spellkit.domain.model.spells import OPEN_FINISH_DATE, Spell

__all__ = [  # noqa: RUF022
    # identity
    "CandidateKey",
    "EntityId",
    "IdentifierScheme",
    "RawLinkRow",
    "Scheme",
    "normalize_scheme",
    # resolution
    "AuditEntry",
    "RejectionReason",
    "ResolutionResult",
    "ResolutionStatus",
    # observations
    "FUNCTIONAL_DOMAINS",
    "AggregatedObservation",
    "CanonicalObservation",
    "Measurement",
    "Observation",
    "Ordinal",
    "OrdinalScale",
    "ValueMap",
    "check_ordinal_values",
    # spells
    "OPEN_FINISH_DATE",
    "Spell",
]
