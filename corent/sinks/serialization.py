"""JSON conversion of ledger records and events."""

import json
from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from corent.models import Period


def serialize_value(value: Any) -> Any:
    """Convert a value to JSON-compatible types.

    Amounts become strings so no precision is lost, periods become
    ``YYYY-MM`` and dataclasses become dicts of their fields. Unknown
    objects fall back to ``str``.
    """
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Period):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: serialize_value(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [serialize_value(v) for v in value]
    return str(value)


def to_dict(obj: Any) -> dict:
    """Serialize a record; non-mapping values are wrapped as ``{"value": ...}``."""
    value = serialize_value(obj)
    if isinstance(value, dict):
        return value
    return {"value": value}


def to_json(obj: Any, pretty: bool = False) -> str:
    """Serialize ``obj`` to a JSON string (UTF-8 characters kept as-is)."""
    return json.dumps(serialize_value(obj), ensure_ascii=False, indent=2 if pretty else None)
