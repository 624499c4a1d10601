"""
JSON text codec for opaque payload columns.

Payloads (dashboard options, item data) are stored as TEXT. asyncpg does not
encode Python dicts for us, so values go through `json` on the way in and
out.
"""

from __future__ import annotations

import json
from typing import Any


class CodecError(ValueError):
    pass


def encode(value: Any) -> str | None:
    """
    Serialize a JSON-like value. `None` maps to SQL NULL, not the text "null".
    """
    if value is None:
        return None
    try:
        return json.dumps(value, ensure_ascii=True)
    except (TypeError, ValueError) as exc:
        raise CodecError(f"Value is not JSON serializable: {exc}") from exc


def decode(text: str | None) -> Any:
    if text is None:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise CodecError(f"Stored payload is not valid JSON: {exc}") from exc


def decode_mapping(text: str | None, *, nullable: bool = False) -> dict[str, Any] | None:
    """
    Decode a payload that must be a JSON object.
    """
    value = decode(text)
    if value is None and nullable:
        return None
    if not isinstance(value, dict):
        raise CodecError(f"Stored payload is not a JSON object (got {type(value).__name__}).")
    return value
