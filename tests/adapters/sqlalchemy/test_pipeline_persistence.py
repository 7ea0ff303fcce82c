from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from spellkit.adapters.memory import InMemoryIdentityLookup
from spellkit.adapters.sources import IterableSourceAdapter
from spellkit.adapters.sqlalchemy import (
    SqlAlchemyPipelineUnitOfWork,
    PipelineDatabase,
    StartupError,
    bound_database,
    shutdown,
    startup,
)
from spellkit.domain.model import OPEN_FINISH_DATE, RejectionReason, ResolutionStatus, Spell
from spellkit.domain.pipeline import SpellPipeline, persist_result
from tests.helpers.records import make_canonical, make_key

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def _spell(value: int, start: date, finish: date, *, attribute_type: str = "seeing") -> Spell:
    return Spell(
        entity_id="X",
        attribute_type=attribute_type,
        value=value,
        source="CEN",
        start_date=start,
        finish_date=finish,
    )


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyPipelineUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:")
    engine_b = create_engine("sqlite+pysqlite:///:memory:")

    startup(engine=engine_a)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    database = startup(engine=engine_b, force=True)
    assert database.engine is engine_b
    assert bound_database() is database


def test_shutdown_unbinds_the_database() -> None:
    startup(engine=create_engine("sqlite+pysqlite:///:memory:"))

    shutdown()

    with pytest.raises(StartupError):
        bound_database()


def test_unit_of_work_can_use_an_explicit_database() -> None:
    database = PipelineDatabase.prepare(create_engine("sqlite+pysqlite:///:memory:"))
    spell = _spell(2, date(2018, 3, 6), OPEN_FINISH_DATE)

    with SqlAlchemyPipelineUnitOfWork(database) as uow:
        uow.repositories.spells.replace_all([spell])
        uow.commit()
    with SqlAlchemyPipelineUnitOfWork(database) as uow:
        assert uow.repositories.spells.list() == (spell,)

    database.engine.dispose()


def test_repositories_are_only_available_inside_the_with_block(
    sqlite_unit_of_work: Callable[[], SqlAlchemyPipelineUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories
    with uow:
        with pytest.raises(StartupError):
            uow.__enter__()
    with pytest.raises(StartupError):
        uow.commit()


def test_spell_table_is_replaced_not_appended(
    sqlite_unit_of_work: Callable[[], SqlAlchemyPipelineUnitOfWork],
) -> None:
    old = _spell(1, date(2010, 1, 1), OPEN_FINISH_DATE)
    new = [
        _spell(3, date(2018, 3, 6), OPEN_FINISH_DATE, attribute_type="walking"),
        _spell(1, date(2018, 3, 6), date(2020, 1, 9)),
        _spell(2, date(2020, 1, 10), OPEN_FINISH_DATE),
    ]

    with sqlite_unit_of_work() as uow:
        uow.repositories.spells.replace_all([old])
        uow.commit()
    with sqlite_unit_of_work() as uow:
        written = uow.repositories.spells.replace_all(new)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.spells.list()
        walking = uow.repositories.spells.for_attribute("walking")

    assert written == 3
    assert stored == (new[1], new[2], new[0])
    assert walking == (new[0],)


def test_failed_unit_of_work_rolls_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyPipelineUnitOfWork],
) -> None:
    spell = _spell(1, date(2018, 3, 6), OPEN_FINISH_DATE)

    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.spells.replace_all([spell])
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.spells.list() == ()


def test_persist_result_writes_spells_and_audit(
    sqlite_unit_of_work: Callable[[], SqlAlchemyPipelineUnitOfWork],
) -> None:
    lookup = InMemoryIdentityLookup(
        {make_key("moh", "a1"): "E1", make_key("moh", "a2"): "E1", make_key("msd", "b2"): "E2"}
    )
    adapter = IterableSourceAdapter(
        "CEN",
        [
            make_canonical(("moh", "a1"), seeing=1),
            make_canonical(("moh", "a2"), ("msd", "b2"), seeing=2),
        ],
    )
    result = SpellPipeline(lookup=lookup).run([adapter])

    persisted = persist_result(result, sqlite_unit_of_work())

    with sqlite_unit_of_work() as uow:
        spells = uow.repositories.spells.list()
        audit = uow.repositories.audit.list()

    assert persisted.spells_written == len(result.spells.spells) == len(spells)
    assert persisted.audit_entries_written == 2
    assert spells == result.spells.spells
    assert audit == result.resolution.audit_entries()
    assert audit[1].status is ResolutionStatus.CONFLICTING
    assert audit[1].rejection_reason is RejectionReason.CONFLICTING_LINK
    assert audit[1].candidate_entity_ids == ("E1", "E2")
    assert audit[1].keys == (make_key("moh", "a2"), make_key("msd", "b2"))


def test_unit_of_work_exposes_a_session_bound_lookup(
    sqlite_unit_of_work: Callable[[], SqlAlchemyPipelineUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        uow.lookup.register({make_key("moh", "1"): "E1"})
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert uow.lookup.resolve_many([make_key("moh", "1")]) == {make_key("moh", "1"): "E1"}
