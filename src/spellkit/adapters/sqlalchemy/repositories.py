"""Repository implementations backed by SQLAlchemy sessions.

Both artifacts are recomputed on every run, so writes replace the whole
table inside the caller's transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select

from spellkit.adapters.sqlalchemy.mappings import resolution_audit_table, spell_table
from spellkit.domain.model import AuditEntry, Spell

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Row, Select
    from sqlalchemy.orm import Session


class SqlAlchemySpellRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def replace_all(self, spells: Iterable[Spell]) -> int:
        self.session.execute(delete(spell_table))
        rows = [_spell_values(spell) for spell in spells]
        if rows:
            self.session.execute(insert(spell_table), rows)
        return len(rows)

    def list(self) -> tuple[Spell, ...]:
        return self._fetch(self._ordered())

    def for_attribute(self, attribute_type: str) -> tuple[Spell, ...]:
        return self._fetch(self._ordered().where(spell_table.c.attribute_type == attribute_type))

    def _ordered(self) -> Select[Any]:
        columns = spell_table.c
        return select(
            columns.entity_id,
            columns.attribute_type,
            columns.value,
            columns.source,
            columns.start_date,
            columns.finish_date,
        ).order_by(columns.entity_id, columns.attribute_type, columns.start_date, columns.id)

    def _fetch(self, stmt: Select[Any]) -> tuple[Spell, ...]:
        return tuple(_spell_from_row(row) for row in self.session.execute(stmt))


class SqlAlchemyResolutionAuditRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def replace_all(self, entries: Iterable[AuditEntry]) -> int:
        self.session.execute(delete(resolution_audit_table))
        rows = [
            _audit_values(entry, position=position) for position, entry in enumerate(entries)
        ]
        if rows:
            self.session.execute(insert(resolution_audit_table), rows)
        return len(rows)

    def list(self) -> tuple[AuditEntry, ...]:
        stmt = select(resolution_audit_table).order_by(resolution_audit_table.c.position)
        return tuple(_audit_from_row(row) for row in self.session.execute(stmt))


def _spell_values(spell: Spell) -> dict[str, object]:
    return {
        "entity_id": spell.entity_id,
        "attribute_type": spell.attribute_type,
        "value": spell.value,
        "source": spell.source,
        "start_date": spell.start_date,
        "finish_date": spell.finish_date,
    }


def _spell_from_row(row: Row[Any]) -> Spell:
    return Spell(
        entity_id=row.entity_id,
        attribute_type=row.attribute_type,
        value=row.value,
        source=row.source,
        start_date=row.start_date,
        finish_date=row.finish_date,
    )


def _audit_values(entry: AuditEntry, *, position: int) -> dict[str, object]:
    return {
        "position": position,
        "candidate_keys": entry.keys,
        "entity_id": entry.entity_id,
        "status": entry.status,
        "accepted": entry.accepted,
        "conflict_flag": entry.conflict_flag,
        "agency_id_count": entry.agency_id_count,
        "link_failure_count": entry.link_failure_count,
        "distinct_resolved_id_count": entry.distinct_resolved_id_count,
        "candidate_entity_ids": entry.candidate_entity_ids,
        "match_quality": entry.match_quality,
        "rejection_reason": entry.rejection_reason,
    }


def _audit_from_row(row: Row[Any]) -> AuditEntry:
    return AuditEntry(
        keys=row.candidate_keys,
        entity_id=row.entity_id,
        status=row.status,
        accepted=row.accepted,
        conflict_flag=row.conflict_flag,
        agency_id_count=row.agency_id_count,
        link_failure_count=row.link_failure_count,
        distinct_resolved_id_count=row.distinct_resolved_id_count,
        candidate_entity_ids=row.candidate_entity_ids,
        match_quality=row.match_quality,
        rejection_reason=row.rejection_reason,
    )
