"""Source adapter driven by a declarative :class:`SourceDefinition`."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from spellkit.domain.model import CandidateKey, CanonicalObservation

from .schema import SourceDefinition

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from spellkit.domain.model import Ordinal

log = logging.getLogger(__name__)

type RawRow = Mapping[str, object]

_DATE_ADAPTER = TypeAdapter(date)


def _cell(row: RawRow, column: str) -> str | None:
    value = row.get(column)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class CodeMappedSourceAdapter:
    """Turn raw rows into canonical observations using code tables.

    Rows without any candidate key, or without a readable event date, are
    skipped and counted; the rest of the feed is still processed.
    """

    def __init__(
        self,
        definition: SourceDefinition | Mapping[str, Any],
        rows: Iterable[RawRow],
    ) -> None:
        self.definition = (
            definition
            if isinstance(definition, SourceDefinition)
            else SourceDefinition.model_validate(definition)
        )
        self._rows = tuple(rows)
        self.rows_without_keys = 0
        self.rows_without_date = 0

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def skipped_rows(self) -> int:
        return self.rows_without_keys + self.rows_without_date

    def observations(self) -> Iterator[CanonicalObservation]:
        self.rows_without_keys = 0
        self.rows_without_date = 0
        emitted = 0
        for row in self._rows:
            keys = self._keys(row)
            if not keys:
                self.rows_without_keys += 1
                continue
            event_date = self._event_date(row)
            if event_date is None:
                self.rows_without_date += 1
                continue
            emitted += 1
            yield CanonicalObservation(
                keys=keys,
                source=self.name,
                event_date=event_date,
                values=self._values(row),
            )
        log.info(
            "Source %s emitted %d observations (%d rows without keys, %d without a date)",
            self.name,
            emitted,
            self.rows_without_keys,
            self.rows_without_date,
        )

    def _keys(self, row: RawRow) -> tuple[CandidateKey, ...]:
        keys: list[CandidateKey] = []
        for column, scheme in self.definition.key_columns.items():
            raw_value = _cell(row, column)
            if raw_value is not None:
                keys.append(CandidateKey(scheme, raw_value))
        return tuple(keys)

    def _event_date(self, row: RawRow) -> date | None:
        if self.definition.proxy_event_date is not None:
            return self.definition.proxy_event_date
        column = self.definition.event_date_column
        if column is None:
            return None
        try:
            return _DATE_ADAPTER.validate_python(row.get(column))
        except ValidationError:
            log.warning("Source %s: unreadable event date %r", self.name, row.get(column))
            return None

    def _values(self, row: RawRow) -> dict[str, Ordinal | None]:
        values: dict[str, Ordinal | None] = {}
        for attribute, mapping in self.definition.attributes.items():
            code = _cell(row, mapping.column)
            values[attribute] = None if code is None else mapping.codes.get(code)
        return values
