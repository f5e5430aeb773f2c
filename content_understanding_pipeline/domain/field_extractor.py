"""
Display-string extraction for tagged field values.

Turns a TaggedValue (or a raw result-tree node, which is classified first)
into a single human-readable string. Extraction never raises: problems are
reported in-band through fixed sentinel strings so that one odd field can't
spoil the rest of a rendered result.

Example:
    >>> extract_field_value({"type": "number", "valueNumber": 42.5})
    '42.50'
    >>> extract_field_value({"type": "array", "valueArray": []})
    'Empty Array'
"""

import logging
from typing import Any

from .tagged_value import (
    ArrayValue,
    MalformedValue,
    NumberValue,
    ObjectValue,
    ScalarValue,
    TaggedValue,
    classify,
    resolve_path,
)

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
EMPTY_ARRAY = "Empty Array"
EMPTY_OBJECT = "Empty Object"
PARSE_ERROR = "Parse Error"
ARRAY_PARSE_ERROR = "Array Parse Error"
OBJECT_PARSE_ERROR = "Object Parse Error"

_TAGGED_TYPES = (ScalarValue, NumberValue, ArrayValue, ObjectValue, MalformedValue)


def extract_field_value(node: TaggedValue | Any) -> str:
    """Render one field value as a display string.

    Args:
        node: A TaggedValue, or a raw JSON field node from the result tree.

    Returns:
        The display string, or one of the sentinels ``"Parse Error"``,
        ``"Array Parse Error"`` and ``"Object Parse Error"`` when the value
        can't be rendered.
    """
    try:
        value = node if isinstance(node, _TAGGED_TYPES) else classify(node)

        if isinstance(value, ScalarValue):
            return value.text if value.text is not None else NOT_AVAILABLE
        if isinstance(value, NumberValue):
            return f"{value.value:.2f}"
        if isinstance(value, ArrayValue):
            return _extract_array(value)
        if isinstance(value, ObjectValue):
            return _extract_object(value)
        if isinstance(value, MalformedValue):
            if value.container == "array":
                return ARRAY_PARSE_ERROR
            if value.container == "object":
                return OBJECT_PARSE_ERROR
        return PARSE_ERROR
    except Exception as e:
        logger.debug(f"Failed to extract field value: {e}")
        return PARSE_ERROR


def _extract_array(value: ArrayValue) -> str:
    try:
        parts = [extract_field_value(item) for item in value.items]
    except Exception as e:
        logger.debug(f"Failed to iterate array value: {e}")
        return ARRAY_PARSE_ERROR
    return "; ".join(parts) if parts else EMPTY_ARRAY


def _extract_object(value: ObjectValue) -> str:
    try:
        parts = [
            f"{name}: {extract_field_value(field)}"
            for name, field in value.fields.items()
        ]
    except Exception as e:
        logger.debug(f"Failed to iterate object value: {e}")
        return OBJECT_PARSE_ERROR
    return f"[{', '.join(parts)}]" if parts else EMPTY_OBJECT


def extract_named_fields(payload: Any, fields_path: str) -> dict[str, str] | None:
    """Extract display strings for every named field of a result.

    Args:
        payload: Full operation payload returned by the service.
        fields_path: Dotted path to the named-fields collection, e.g.
            ``"result.contents.0.fields"``.

    Returns:
        Mapping of field name to display string in service order, or None
        when the collection is missing.
    """
    fields = resolve_path(payload, fields_path)
    if not isinstance(fields, dict):
        return None
    return {name: extract_field_value(node) for name, node in fields.items()}
