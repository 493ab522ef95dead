"""
JSON encoding/decoding for the data model.

Uses pydantic TypeAdapters over the frozen dataclasses so the model itself
stays plain Python while the boundary gets validation and JSON support.
Input dictionaries may use camelCase keys (wordCount, startPosition, ...)
as produced by JavaScript callers; they are normalized to snake_case.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter

from chapterlens.models.analysis import ChapterAnalysis
from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


@lru_cache(maxsize=None)
def _adapter(model: type) -> TypeAdapter:
    return TypeAdapter(model)


def _snake_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            _CAMEL_BOUNDARY.sub(r"_\1", key).lower() if isinstance(key, str) else key: _snake_keys(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_snake_keys(item) for item in value]
    return value


def chapter_from_dict(data: dict[str, Any]) -> Chapter:
    """Validate a caller-supplied chapter payload."""
    return _adapter(Chapter).validate_python(_snake_keys(data))


def graph_from_dict(data: dict[str, Any]) -> ConceptGraph:
    return _adapter(ConceptGraph).validate_python(_snake_keys(data))


def analysis_to_dict(analysis: ChapterAnalysis) -> dict[str, Any]:
    """JSON-compatible dict (enums as values, datetimes as ISO strings)."""
    return _adapter(ChapterAnalysis).dump_python(analysis, mode="json")


def analysis_to_json(analysis: ChapterAnalysis, indent: int | None = 2) -> str:
    return _adapter(ChapterAnalysis).dump_json(analysis, indent=indent).decode("utf-8")


def analysis_from_json(payload: str | bytes) -> ChapterAnalysis:
    return _adapter(ChapterAnalysis).validate_json(payload)
