# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tagged JSON encoding used at the serialization boundary.

A plain JSON object cannot tell a key-ordered mapping apart from a generic
object, so every mapping is written as::

    {"dataType": "Map", "value": [[key, value], ...]}

and restored to a ``dict`` with the same key order on the way back in.
Dates always cross the boundary as ``YYYY-MM-DD`` strings.

Usage::

    text = encode(result)
    same = decode(text, AnalysisResult)
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

MAP_TAG = "Map"

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_tagged(value: Any) -> Any:
    """Convert *value* into JSON-ready data with mappings tagged."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    if isinstance(value, Mapping):
        return {
            "dataType": MAP_TAG,
            "value": [[to_tagged(k), to_tagged(v)] for k, v in value.items()],
        }
    if isinstance(value, (list, tuple)):
        return [to_tagged(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def from_tagged(value: Any) -> Any:
    """Inverse of :func:`to_tagged`; tagged mappings become ordered dicts."""
    if isinstance(value, dict):
        if value.get("dataType") == MAP_TAG and isinstance(value.get("value"), list):
            return {
                _hashable(from_tagged(k)): from_tagged(v)
                for k, v in value["value"]
            }
        return {k: from_tagged(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_tagged(v) for v in value]
    return value


def _hashable(key: Any) -> Any:
    # Tuple keys (e.g. period start/end pairs) come back as JSON arrays.
    if isinstance(key, list):
        return tuple(_hashable(k) for k in key)
    return key


def encode(value: Any, indent: int | None = None) -> str:
    """Serialize *value* (model, mapping, list or scalar) to tagged JSON."""
    return json.dumps(to_tagged(value), indent=indent, allow_nan=False)


def decode(text: str, model: type[ModelT] | None = None) -> Any:
    """Parse tagged JSON, optionally validating it into *model*."""
    data = from_tagged(json.loads(text))
    if model is None:
        return data
    return model.model_validate(data)
