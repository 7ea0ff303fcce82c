"""Identity resolution over candidate keys.

Responsibilities of this stage:
- drop exact-duplicate link rows once, before anything else
- resolve every distinct candidate key through one bulk lookup call
- classify each row as UNLINKABLE / LINKED / CONFLICTING
- apply the acceptance policy and emit an audit record for every row

Out of scope for this stage:
- fuzzy or probabilistic matching
- persistence of the audit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from spellkit.domain.model import (
    AuditEntry,
    RejectionReason,
    ResolutionResult,
    ResolutionStatus,
)

from .index import CandidateKeyIndex
from .policy import default_acceptance_policy

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from spellkit.domain.model import CandidateKey, EntityId, RawLinkRow
    from spellkit.domain.ports import IdentityLookup

    from .policy import AcceptancePolicy

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ResolutionReport:
    """Resolution results for one run, in first-seen row order."""

    results: tuple[ResolutionResult, ...]
    duplicates_removed: int = 0
    _entity_by_row: dict[RawLinkRow, EntityId] = field(
        default_factory=dict["RawLinkRow", "EntityId"], init=False, repr=False
    )

    def __post_init__(self) -> None:
        for result in self.results:
            if result.accepted and result.entity_id is not None:
                self._entity_by_row[result.row] = result.entity_id

    @property
    def accepted(self) -> tuple[ResolutionResult, ...]:
        return tuple(result for result in self.results if result.accepted)

    @property
    def rejected(self) -> tuple[ResolutionResult, ...]:
        return tuple(result for result in self.results if not result.accepted)

    @property
    def accepted_count(self) -> int:
        return len(self._entity_by_row)

    @property
    def unlinkable(self) -> int:
        return self._count(RejectionReason.UNLINKABLE)

    @property
    def conflicting(self) -> int:
        return self._count(RejectionReason.CONFLICTING_LINK)

    @property
    def rejected_ambiguous(self) -> int:
        return self._count(RejectionReason.AMBIGUOUS_KEY)

    def entity_for(self, row: RawLinkRow) -> EntityId | None:
        """Return the accepted entity for ``row`` (None when rejected or unknown)."""

        return self._entity_by_row.get(row)

    def audit_entries(self) -> tuple[AuditEntry, ...]:
        return tuple(AuditEntry.from_result(result) for result in self.results)

    def _count(self, reason: RejectionReason) -> int:
        return sum(1 for result in self.results if result.rejection_reason is reason)


def deduplicate_rows(rows: Iterable[RawLinkRow]) -> tuple[tuple[RawLinkRow, ...], int]:
    """Drop exact-duplicate rows, keeping first-seen order."""

    materialized = tuple(rows)
    unique = tuple(dict.fromkeys(materialized))
    return unique, len(materialized) - len(unique)


def resolve_identities(
    rows: Iterable[RawLinkRow],
    lookup: IdentityLookup,
    *,
    policy: AcceptancePolicy = default_acceptance_policy,
) -> ResolutionReport:
    """Resolve every row to at most one entity and audit the decision.

    The key index is built over the deduplicated rows before any row is
    classified, since ambiguity is a property of the whole input set.
    """

    unique_rows, duplicates_removed = deduplicate_rows(rows)
    key_index = CandidateKeyIndex.build(unique_rows)
    distinct_keys = sorted({key for row in unique_rows for key in row.keys})
    resolved_keys = lookup.resolve_many(distinct_keys)

    results = tuple(
        _resolve_row(row, resolved_keys=resolved_keys, key_index=key_index, policy=policy)
        for row in unique_rows
    )
    report = ResolutionReport(results=results, duplicates_removed=duplicates_removed)
    log.info(
        "Resolved %d link rows (%d duplicates dropped): "
        "%d accepted, %d unlinkable, %d conflicting, %d ambiguous",
        len(results),
        duplicates_removed,
        report.accepted_count,
        report.unlinkable,
        report.conflicting,
        report.rejected_ambiguous,
    )
    return report


def _resolve_row(
    row: RawLinkRow,
    *,
    resolved_keys: Mapping[CandidateKey, EntityId],
    key_index: CandidateKeyIndex,
    policy: AcceptancePolicy,
) -> ResolutionResult:
    resolved_by_scheme = tuple(
        (key.scheme, resolved_keys[key]) for key in row.keys if key in resolved_keys
    )
    candidate_ids = tuple(sorted({entity_id for _, entity_id in resolved_by_scheme}))
    ambiguous_keys = tuple(key for key in row.keys if key_index.is_ambiguous(key))

    result = ResolutionResult(
        row=row,
        entity_id=candidate_ids[0] if len(candidate_ids) == 1 else None,
        status=_status_for(len(candidate_ids)),
        conflict_flag=bool(ambiguous_keys),
        agency_id_count=len(row.keys),
        link_failure_count=len(row.keys) - len(resolved_by_scheme),
        distinct_resolved_id_count=len(candidate_ids),
        candidate_entity_ids=candidate_ids,
        resolved_by_scheme=resolved_by_scheme,
        ambiguous_keys=ambiguous_keys,
    )
    accepted = result.is_linked and policy(result)
    result = replace(
        result,
        accepted=accepted,
        rejection_reason=None if accepted else _rejection_reason(result),
        match_quality=describe_match(result),
    )
    if not accepted:
        log.debug(
            "Rejected link row %s: %s (%s)",
            ", ".join(str(key) for key in row.keys) or "<no keys>",
            result.rejection_reason,
            result.match_quality,
        )
    return result


def _status_for(distinct_resolved_id_count: int) -> ResolutionStatus:
    if distinct_resolved_id_count == 0:
        return ResolutionStatus.UNLINKABLE
    if distinct_resolved_id_count == 1:
        return ResolutionStatus.LINKED
    return ResolutionStatus.CONFLICTING


def _rejection_reason(result: ResolutionResult) -> RejectionReason:
    if result.status is ResolutionStatus.UNLINKABLE:
        return RejectionReason.UNLINKABLE
    if result.status is ResolutionStatus.CONFLICTING:
        return RejectionReason.CONFLICTING_LINK
    if result.conflict_flag:
        return RejectionReason.AMBIGUOUS_KEY
    return RejectionReason.POLICY


def describe_match(result: ResolutionResult) -> str:
    """Human-readable match quality for manual review of the audit."""

    distinct = result.distinct_resolved_id_count
    if distinct == 0:
        agreement = "no links"
    elif distinct == 1:
        agreement = "agree"
    else:
        agreement = f"disagree ({distinct} entities)"
    label = (
        f"{_counted(result.agency_id_count, 'agency id')}, "
        f"{_counted(result.link_failure_count, 'link failure')}, "
        f"{agreement}"
    )
    if result.conflict_flag:
        label += ", ambiguous keys"
    return label


def _counted(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
