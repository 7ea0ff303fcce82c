"""Ports for persisting pipeline artifacts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from spellkit.domain.model import AuditEntry, Spell


@runtime_checkable
class SpellRepository(Protocol):
    """The spell table is recomputed on every run, never patched in place."""

    def replace_all(self, spells: Iterable[Spell]) -> int: ...

    def list(self) -> tuple[Spell, ...]: ...

    def for_attribute(self, attribute_type: str) -> tuple[Spell, ...]: ...


@runtime_checkable
class ResolutionAuditRepository(Protocol):
    def replace_all(self, entries: Iterable[AuditEntry]) -> int: ...

    def list(self) -> tuple[AuditEntry, ...]: ...
