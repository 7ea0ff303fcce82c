"""Source adapter contract.

Each concrete source (a census, a survey, an assessment collection) is one
variant of this capability. Adapters own their code-to-ordinal mapping and
their date semantics, including any proxy dates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from spellkit.domain.model import CanonicalObservation


@runtime_checkable
class SourceAdapter(Protocol):
    """Produce a stream of canonical observations from one raw feed."""

    @property
    def name(self) -> str: ...

    def observations(self) -> Iterable[CanonicalObservation]: ...


__all__ = ["SourceAdapter"]
