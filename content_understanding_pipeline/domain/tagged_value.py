"""
Typed model of the self-describing field values returned by the service.

Every extracted field in a Content Understanding result is a JSON node that
names its own type and stores the value under a type-specific key::

    {"type": "string", "valueString": "ACME Corp"}
    {"type": "number", "valueNumber": 42.5}
    {"type": "array", "valueArray": [...]}
    {"type": "object", "valueObject": {"Name": {...}, "Amount": {...}}}

``classify()`` turns such a node (recursively) into one of the immutable
TaggedValue variants below, so the rest of the pipeline never has to inspect
raw shapes again. Nodes that don't fit the conventions become
``MalformedValue`` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Field types whose value is stored as a plain string under value<Type>
_STRING_TYPES = {
    "string": "valueString",
    "date": "valueDate",
    "time": "valueTime",
    "phonenumber": "valuePhoneNumber",
    "countryregion": "valueCountryRegion",
    "selectionmark": "valueSelectionMark",
}

_NUMBER_TYPES = {
    "number": "valueNumber",
    "integer": "valueInteger",
}


@dataclass(frozen=True)
class ScalarValue:
    """A textual leaf. ``text`` is None when the service sent no value."""

    text: str | None


@dataclass(frozen=True)
class NumberValue:
    """A numeric leaf."""

    value: float


@dataclass(frozen=True)
class ArrayValue:
    """An ordered sequence of values."""

    items: tuple[TaggedValue, ...] = ()


@dataclass(frozen=True)
class ObjectValue:
    """Named sub-fields, in the order the service returned them."""

    fields: dict[str, TaggedValue] = field(default_factory=dict)


@dataclass(frozen=True)
class MalformedValue:
    """A node that doesn't follow the tagged-value conventions.

    ``container`` is ``"array"`` or ``"object"`` when the node claimed to be a
    container but its contents could not be iterated, and None otherwise.
    """

    fragment: Any
    container: str | None = None


TaggedValue = ScalarValue | NumberValue | ArrayValue | ObjectValue | MalformedValue


def classify(node: Any) -> TaggedValue:
    """Classify a raw JSON node into a TaggedValue, recursively.

    Args:
        node: One field node from the result tree, as parsed from JSON.

    Returns:
        The matching TaggedValue variant. Never raises; shapes that can't be
        interpreted come back as MalformedValue.
    """
    if not isinstance(node, dict):
        return MalformedValue(node)

    field_type = node.get("type")
    if isinstance(field_type, str):
        return _classify_typed(node, field_type.lower())

    # Untyped nodes: fall back to the textual representations
    if "valueString" in node:
        return _scalar(node.get("valueString"), node)
    if "content" in node:
        return _scalar(node.get("content"), node)
    return MalformedValue(node)


def _classify_typed(node: dict[str, Any], field_type: str) -> TaggedValue:
    if field_type in _STRING_TYPES:
        key = _STRING_TYPES[field_type]
        if key in node:
            return _scalar(node.get(key), node)
        # Typed but empty: the service found no value for the field
        return _scalar(node.get("content"), node)

    if field_type in _NUMBER_TYPES:
        raw = node.get(_NUMBER_TYPES[field_type])
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            if raw is None and "content" in node:
                return _scalar(node.get("content"), node)
            return MalformedValue(node)
        return NumberValue(float(raw))

    if field_type == "boolean":
        raw = node.get("valueBoolean")
        if isinstance(raw, bool):
            return ScalarValue("true" if raw else "false")
        return _scalar(node.get("content"), node)

    if field_type == "array":
        items = node.get("valueArray")
        if not isinstance(items, list):
            return MalformedValue(node, container="array")
        return ArrayValue(tuple(classify(item) for item in items))

    if field_type == "object":
        fields = node.get("valueObject")
        if not isinstance(fields, dict):
            return MalformedValue(node, container="object")
        return ObjectValue({name: classify(value) for name, value in fields.items()})

    return MalformedValue(node)


def _scalar(value: Any, node: dict[str, Any]) -> TaggedValue:
    if value is None:
        return ScalarValue(None)
    if isinstance(value, str):
        return ScalarValue(value)
    return MalformedValue(node)


def resolve_path(tree: Any, path: str) -> Any | None:
    """Walk a dotted path through nested dicts and lists.

    Numeric segments index into lists, other segments are dictionary keys.
    For example ``"result.contents.0.fields"``.

    Args:
        tree: Parsed JSON document.
        path: Dotted path.

    Returns:
        The node at the path, or None if any segment is missing.
    """
    current = tree
    for segment in path.split("."):
        if isinstance(current, list) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        elif isinstance(current, dict) and segment in current:
            current = current[segment]
        else:
            return None
    return current
