"""Source adapters producing canonical observations."""

from __future__ import annotations

from .mapped import CodeMappedSourceAdapter
from .schema import AttributeMapping, SourceDefinition
from .static import IterableSourceAdapter

__all__ = [
    "AttributeMapping",
    "CodeMappedSourceAdapter",
    "IterableSourceAdapter",
    "SourceDefinition",
]
