"""SQLAlchemy table metadata for the identity lookup and pipeline artifacts."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    Dialect,
    Enum,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
)

from spellkit.domain.model import CandidateKey, RejectionReason, ResolutionStatus

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


class CandidateKeyListType(TypeDecorator[tuple[CandidateKey, ...]]):
    """Store candidate keys as a JSON list of ``[scheme, raw_value]`` pairs."""

    impl = String
    cache_ok = True

    def process_bind_param(
        self, value: tuple[CandidateKey, ...] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([[str(key.scheme), key.raw_value] for key in value])

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[CandidateKey, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        pairs = cast(list[Any], loaded)
        return tuple(CandidateKey(str(scheme), str(raw_value)) for scheme, raw_value in pairs)


class StringListType(TypeDecorator[tuple[str, ...]]):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        return tuple(str(item) for item in cast(list[Any], loaded))


identity_lookup_table = Table(
    "identity_lookup",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("scheme", String, nullable=False),
    Column("raw_value", String, nullable=False),
    Column("entity_id", String, nullable=False),
    UniqueConstraint("scheme", "raw_value"),
    Index("ix_identity_lookup_entity", "entity_id"),
)

resolution_audit_table = Table(
    "resolution_audit",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("position", Integer, nullable=False),
    Column("candidate_keys", CandidateKeyListType, nullable=False),
    Column("entity_id", String, nullable=True),
    Column("status", Enum(ResolutionStatus, native_enum=False), nullable=False),
    Column("accepted", Boolean, nullable=False),
    Column("conflict_flag", Boolean, nullable=False),
    Column("agency_id_count", Integer, nullable=False),
    Column("link_failure_count", Integer, nullable=False),
    Column("distinct_resolved_id_count", Integer, nullable=False),
    Column("candidate_entity_ids", StringListType, nullable=False),
    Column("match_quality", String, nullable=False),
    Column("rejection_reason", Enum(RejectionReason, native_enum=False), nullable=True),
    Index("ix_resolution_audit_entity", "entity_id"),
)

spell_table = Table(
    "spell",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_id", String, nullable=False),
    Column("attribute_type", String, nullable=False),
    Column("value", Integer, nullable=False),
    Column("source", String, nullable=False),
    Column("start_date", Date, nullable=False),
    Column("finish_date", Date, nullable=False),
    Index("ix_spell_entity_attribute_start", "entity_id", "attribute_type", "start_date"),
    Index("ix_spell_attribute", "attribute_type"),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the spellkit metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
