"""Database binding and the unit of work that persists a pipeline run.

``startup`` creates the pipeline tables on an engine and binds it; every
``SqlAlchemyPipelineUnitOfWork`` created afterwards opens its session there.
A run writes the spell table and the resolution audit in one transaction, so
readers never see spells from one run next to the audit of another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from spellkit.adapters.sqlalchemy.lookup import SqlAlchemyIdentityLookup
from spellkit.adapters.sqlalchemy.mappings import create_all_tables
from spellkit.adapters.sqlalchemy.repositories import (
    SqlAlchemyResolutionAuditRepository,
    SqlAlchemySpellRepository,
)
from spellkit.config.storage import get_database_config
from spellkit.domain.errors import SpellkitError
from spellkit.domain.ports.unit_of_work import PipelineRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(SpellkitError):
    """Raised when the pipeline database is bound twice or used unbound."""


@dataclass(frozen=True, slots=True)
class PipelineDatabase:
    """An engine holding the pipeline tables, with its session factory."""

    engine: Engine
    sessions: sessionmaker[Session]

    @classmethod
    def prepare(cls, engine: Engine) -> PipelineDatabase:
        create_all_tables(engine)
        return cls(engine=engine, sessions=sessionmaker(bind=engine, expire_on_commit=False))


_database: PipelineDatabase | None = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> PipelineDatabase:
    """Bind units of work to ``engine``, or to one built from the configured URI."""

    global _database
    if _database is not None and not force:
        raise StartupError(
            f"Pipeline database already bound to {_database.engine.url!r}; "
            "pass force=True to rebind"
        )
    _database = PipelineDatabase.prepare(
        engine or create_engine(database_uri or get_database_config().uri)
    )
    return _database


def bound_database() -> PipelineDatabase:
    if _database is None:
        raise StartupError(
            "Pipeline database not bound; call spellkit.adapters.sqlalchemy.startup() first"
        )
    return _database


def shutdown() -> None:
    """Dispose the bound engine and unbind it."""

    global _database
    if _database is not None:
        _database.engine.dispose()
    _database = None


class SqlAlchemyPipelineUnitOfWork:
    """Replace the spell table and the resolution audit in one transaction."""

    def __init__(self, database: PipelineDatabase | None = None) -> None:
        self.database = database or bound_database()
        self._session: Session | None = None
        self._repositories: PipelineRepositories | None = None

    def __enter__(self) -> SqlAlchemyPipelineUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self.database.sessions()
        self._session = session
        self._repositories = PipelineRepositories(
            spells=SqlAlchemySpellRepository(session),
            audit=SqlAlchemyResolutionAuditRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._session

    @property
    def repositories(self) -> PipelineRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._repositories

    @property
    def lookup(self) -> SqlAlchemyIdentityLookup:
        """Identity lookup sharing this unit of work's session."""

        return SqlAlchemyIdentityLookup(self.session)


if TYPE_CHECKING:
    from spellkit.domain.ports.unit_of_work import PipelineUnitOfWork

    _uow_check: PipelineUnitOfWork = SqlAlchemyPipelineUnitOfWork()
