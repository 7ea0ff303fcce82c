"""Pydantic models describing a declarative, code-mapped source."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SourceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class AttributeMapping(SourceBaseModel):
    """Where one attribute lives in a raw row and how its codes map to ordinals.

    Codes are compared as stripped strings; unmapped codes read as null.
    """

    column: str = Field(min_length=1)
    codes: dict[str, int] = Field(default_factory=dict[str, int])

    @field_validator("codes")
    @classmethod
    def _strip_codes(cls, codes: dict[str, int]) -> dict[str, int]:
        return {code.strip(): value for code, value in codes.items()}


class SourceDefinition(SourceBaseModel):
    """Declarative description of one raw feed.

    Exactly one of ``event_date_column`` and ``proxy_event_date`` must be set;
    the proxy date documents feeds whose true event date is unknown (for
    example a census night).
    """

    name: str = Field(min_length=1)
    key_columns: dict[str, str] = Field(min_length=1)
    event_date_column: str | None = None
    proxy_event_date: date | None = None
    attributes: dict[str, AttributeMapping] = Field(default_factory=dict[str, AttributeMapping])

    @model_validator(mode="after")
    def _exactly_one_date_source(self) -> Self:
        if (self.event_date_column is None) == (self.proxy_event_date is None):
            raise ValueError("Set exactly one of event_date_column or proxy_event_date")
        return self
