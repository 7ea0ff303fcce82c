"""SQLAlchemy adapter package for spellkit."""

from __future__ import annotations

from .lookup import SqlAlchemyIdentityLookup
from .mappings import (
    create_all_tables,
    identity_lookup_table,
    metadata,
    resolution_audit_table,
    spell_table,
)
from .repositories import SqlAlchemyResolutionAuditRepository, SqlAlchemySpellRepository
from .unit_of_work import (
    PipelineDatabase,
    SqlAlchemyPipelineUnitOfWork,
    StartupError,
    bound_database,
    shutdown,
    startup,
)

__all__ = [
    "PipelineDatabase",
    "SqlAlchemyIdentityLookup",
    "SqlAlchemyPipelineUnitOfWork",
    "SqlAlchemyResolutionAuditRepository",
    "SqlAlchemySpellRepository",
    "StartupError",
    "bound_database",
    "create_all_tables",
    "identity_lookup_table",
    "metadata",
    "resolution_audit_table",
    "shutdown",
    "spell_table",
    "startup",
]
