"""Stage composition from source adapters to a persisted spell table.

Every stage is a plain function with its own entry point so an external
orchestrator can call them one by one. ``SpellPipeline`` only wires them
together with shared defaults; it holds no state between runs and every run
recomputes the spell table from scratch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from spellkit.domain.linkage import (
    ResolutionReport,
    acceptance_policy_named,
    default_acceptance_policy,
    resolve_identities,
)
from spellkit.domain.model import OPEN_FINISH_DATE, Observation
from spellkit.domain.spells import (
    CollisionPolicy,
    DeduplicationResult,
    SpellBuildResult,
    SpellTable,
    aggregate_observations,
    build_spells,
    deduplicate_observations,
    max_ignoring_null,
    measurements_for,
)
from spellkit.domain.spells.severity import DEFAULT_FAMILY

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import date

    from spellkit.config.pipeline import PipelineConfig
    from spellkit.domain.linkage import AcceptancePolicy
    from spellkit.domain.model import AggregatedObservation, OrdinalScale, RawLinkRow
    from spellkit.domain.ports import IdentityLookup, PipelineUnitOfWork, SourceAdapter
    from spellkit.domain.spells import Combiner

log = logging.getLogger(__name__)


def collect_link_rows(adapters: Iterable[SourceAdapter]) -> tuple[RawLinkRow, ...]:
    """Drain every adapter into link rows, in adapter order."""

    rows: list[RawLinkRow] = []
    for adapter in adapters:
        before = len(rows)
        rows.extend(observation.to_link_row() for observation in adapter.observations())
        log.info("Collected %d link rows from source %s", len(rows) - before, adapter.name)
    return tuple(rows)


def attach_entities(report: ResolutionReport) -> tuple[Observation, ...]:
    """Rebuild observations for accepted rows, carrying their resolved entity."""

    return tuple(
        Observation.from_link_row(result.row, result.entity_id)
        for result in report.accepted
        if result.entity_id is not None
    )


@dataclass(frozen=True, slots=True)
class PipelineResult:
    resolution: ResolutionReport
    deduplication: DeduplicationResult
    aggregated: tuple[AggregatedObservation, ...]
    spells: SpellBuildResult

    @property
    def spell_table(self) -> SpellTable:
        return SpellTable(self.spells.spells)


@dataclass(frozen=True, slots=True)
class PersistenceResult:
    spells_written: int
    audit_entries_written: int


@dataclass(slots=True, kw_only=True)
class SpellPipeline:
    """Run every stage from raw sources to spells."""

    lookup: IdentityLookup
    policy: AcceptancePolicy = default_acceptance_policy
    source_order: tuple[str, ...] | None = None
    collision_policy: CollisionPolicy = CollisionPolicy.KEEP
    open_finish: date = OPEN_FINISH_DATE
    family: str = DEFAULT_FAMILY
    measures: tuple[str, ...] | None = None
    include_sub_measures: bool = True
    combiners: Mapping[str, Combiner] = field(default_factory=dict["str", "Combiner"])
    default_combiner: Combiner = max_ignoring_null
    scales: Mapping[str, OrdinalScale] = field(default_factory=dict["str", "OrdinalScale"])
    default_scale: OrdinalScale | None = None

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        *,
        lookup: IdentityLookup,
        measures: tuple[str, ...] | None = None,
        scales: Mapping[str, OrdinalScale] | None = None,
        default_scale: OrdinalScale | None = None,
    ) -> SpellPipeline:
        return cls(
            lookup=lookup,
            policy=acceptance_policy_named(config.acceptance_policy),
            source_order=config.source_order,
            collision_policy=config.collision_policy,
            open_finish=config.open_finish_date,
            family=config.overall_attribute,
            measures=measures,
            scales=dict(scales or {}),
            default_scale=default_scale if default_scale is not None else config.ordinal_range,
        )

    def run(self, adapters: Iterable[SourceAdapter]) -> PipelineResult:
        if self.default_scale is None and not self.scales:
            log.warning("No ordinal scale configured; attribute values are not range-checked")
        rows = collect_link_rows(adapters)
        resolution = resolve_identities(rows, self.lookup, policy=self.policy)
        deduplication = deduplicate_observations(
            attach_entities(resolution),
            combiners=self.combiners,
            default_combiner=self.default_combiner,
            scales=self.scales,
            default_scale=self.default_scale,
        )
        aggregated = aggregate_observations(
            deduplication.observations,
            family=self.family,
            measures=self.measures,
        )
        spells = build_spells(
            measurements_for(aggregated, include_sub_measures=self.include_sub_measures),
            source_order=self.source_order,
            collision_policy=self.collision_policy,
            open_finish=self.open_finish,
        )
        return PipelineResult(
            resolution=resolution,
            deduplication=deduplication,
            aggregated=aggregated,
            spells=spells,
        )


def persist_result(result: PipelineResult, unit_of_work: PipelineUnitOfWork) -> PersistenceResult:
    """Replace the stored spell table and resolution audit with ``result``."""

    with unit_of_work as uow:
        spells_written = uow.repositories.spells.replace_all(result.spells.spells)
        audit_written = uow.repositories.audit.replace_all(result.resolution.audit_entries())
        uow.commit()
    log.info("Persisted %d spells and %d audit entries", spells_written, audit_written)
    return PersistenceResult(spells_written=spells_written, audit_entries_written=audit_written)
