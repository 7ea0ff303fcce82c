"""Ports the domain expects adapters to provide."""

from __future__ import annotations

from .lookup import IdentityLookup
from .persistence import ResolutionAuditRepository, SpellRepository
from .sources import SourceAdapter
from .unit_of_work import PipelineRepositories, PipelineUnitOfWork, UnitOfWork

__all__ = [
    "IdentityLookup",
    "PipelineRepositories",
    "PipelineUnitOfWork",
    "ResolutionAuditRepository",
    "SourceAdapter",
    "SpellRepository",
    "UnitOfWork",
]
