"""Identity lookup backed by the ``identity_lookup`` table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import Column, MetaData, String, Table, and_, delete, insert, select

from spellkit.adapters.sqlalchemy.mappings import identity_lookup_table
from spellkit.domain.model import CandidateKey

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sqlalchemy.orm import Session

    from spellkit.domain.model import EntityId

log = logging.getLogger(__name__)

# Kept out of the main metadata so ``create_all`` never creates it.
_staging_metadata = MetaData()

lookup_staging_table = Table(
    "identity_lookup_staging",
    _staging_metadata,
    Column("scheme", String, primary_key=True),
    Column("raw_value", String, primary_key=True),
    prefixes=["TEMPORARY"],
)


class SqlAlchemyIdentityLookup:
    """Resolve candidate keys with one join against the lookup table.

    The distinct keys of a run are staged in a temporary table on the
    session's connection, joined once, and the staging table is dropped again.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve_many(self, keys: Iterable[CandidateKey]) -> Mapping[CandidateKey, EntityId]:
        distinct = sorted(set(keys))
        if not distinct:
            return {}
        connection = self.session.connection()
        lookup_staging_table.create(connection)
        try:
            connection.execute(
                insert(lookup_staging_table),
                [{"scheme": str(key.scheme), "raw_value": key.raw_value} for key in distinct],
            )
            stmt = select(
                identity_lookup_table.c.scheme,
                identity_lookup_table.c.raw_value,
                identity_lookup_table.c.entity_id,
            ).join_from(
                lookup_staging_table,
                identity_lookup_table,
                and_(
                    identity_lookup_table.c.scheme == lookup_staging_table.c.scheme,
                    identity_lookup_table.c.raw_value == lookup_staging_table.c.raw_value,
                ),
            )
            rows = connection.execute(stmt).all()
        finally:
            lookup_staging_table.drop(connection)
        resolved = {
            CandidateKey(scheme, raw_value): entity_id for scheme, raw_value, entity_id in rows
        }
        log.debug("Identity lookup resolved %d of %d distinct keys", len(resolved), len(distinct))
        return resolved

    def register(self, entries: Mapping[CandidateKey, EntityId]) -> int:
        """Insert or replace lookup entries; returns the number written."""

        if not entries:
            return 0
        for key in entries:
            self.session.execute(
                delete(identity_lookup_table)
                .where(identity_lookup_table.c.scheme == str(key.scheme))
                .where(identity_lookup_table.c.raw_value == key.raw_value)
            )
        self.session.execute(
            insert(identity_lookup_table),
            [
                {"scheme": str(key.scheme), "raw_value": key.raw_value, "entity_id": entity_id}
                for key, entity_id in sorted(entries.items())
            ],
        )
        return len(entries)
