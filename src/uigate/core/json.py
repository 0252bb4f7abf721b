"""JSON serialization for responses and stored versions."""

from typing import Any

import orjson
from pydantic import BaseModel

from .errors import InternalSerializationError


def safe_json_dumps(obj: Any, indent: bool = False, sort_keys: bool = False) -> str:
    """
    Serialize object to JSON with orjson.

    Args:
        obj: Object to serialize (pydantic models are dumped in JSON mode first)
        indent: Pretty-print with two-space indentation
        sort_keys: Emit object keys in sorted order

    Returns:
        JSON string

    Raises:
        InternalSerializationError: If the object is not representable as JSON
    """
    option = 0
    if indent:
        option |= orjson.OPT_INDENT_2
    if sort_keys:
        option |= orjson.OPT_SORT_KEYS

    try:
        if isinstance(obj, BaseModel):
            obj = obj.model_dump(mode="json")
        return orjson.dumps(obj, option=option).decode("utf-8")
    except (TypeError, ValueError) as e:
        raise InternalSerializationError(f"Result is not JSON-serializable: {e}") from e


def ensure_serializable(obj: Any) -> None:
    """Raise InternalSerializationError unless ``obj`` round-trips through JSON."""
    orjson.loads(safe_json_dumps(obj))
