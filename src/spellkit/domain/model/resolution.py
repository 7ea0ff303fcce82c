"""Per-row identity resolution outcome (the resolution audit record)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from spellkit.domain.model.enums import ResolutionStatus

if TYPE_CHECKING:
    from spellkit.domain.model.enums import RejectionReason
    from spellkit.domain.model.keys import CandidateKey, EntityId, RawLinkRow, Scheme


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolutionResult:
    """Audit record for one link row, kept for accepted and rejected rows alike.

    ``distinct_resolved_id_count`` counts only non-null resolved ids from keys
    present on the row: 0 means no links, 1 agreement, 2 or more disagreement.
    ``candidate_entity_ids`` keeps every distinct id so conflicting links can be
    reviewed by hand.
    """

    row: RawLinkRow
    entity_id: EntityId | None
    status: ResolutionStatus
    conflict_flag: bool
    agency_id_count: int
    link_failure_count: int
    distinct_resolved_id_count: int
    candidate_entity_ids: tuple[EntityId, ...] = ()
    resolved_by_scheme: tuple[tuple[Scheme, EntityId], ...] = ()
    ambiguous_keys: tuple[CandidateKey, ...] = ()
    accepted: bool = False
    rejection_reason: RejectionReason | None = None
    match_quality: str = ""

    @property
    def is_linked(self) -> bool:
        return self.status is ResolutionStatus.LINKED

    @property
    def fully_corroborated(self) -> bool:
        """Every key on the row resolved and all resolved ids agree."""

        return self.is_linked and self.link_failure_count == 0


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditEntry:
    """Flattened, persistable form of a :class:`ResolutionResult`."""

    keys: tuple[CandidateKey, ...]
    entity_id: EntityId | None
    status: ResolutionStatus
    accepted: bool
    conflict_flag: bool
    agency_id_count: int
    link_failure_count: int
    distinct_resolved_id_count: int
    candidate_entity_ids: tuple[EntityId, ...]
    match_quality: str
    rejection_reason: RejectionReason | None = None

    @classmethod
    def from_result(cls, result: ResolutionResult) -> AuditEntry:
        return cls(
            keys=result.row.keys,
            entity_id=result.entity_id,
            status=result.status,
            accepted=result.accepted,
            conflict_flag=result.conflict_flag,
            agency_id_count=result.agency_id_count,
            link_failure_count=result.link_failure_count,
            distinct_resolved_id_count=result.distinct_resolved_id_count,
            candidate_entity_ids=result.candidate_entity_ids,
            match_quality=result.match_quality,
            rejection_reason=result.rejection_reason,
        )
