"""Schema literal parser.

Turns the source text of a swagger schema descriptor such as

    { type: 'array', items: { type: 'string' }, example: ['tech'] }

into a SchemaNode tree. Every key is read independently: a key that is
missing or cannot be parsed is left out of the node, and parsing never
raises.
"""

import logging
from typing import Any

from apidoc_extractor.parser.base import SchemaNode
from apidoc_extractor.parser.literal import (
    LiteralError,
    is_object_literal,
    object_entries,
    parse_literal,
    strip_quotes,
)

logger = logging.getLogger(__name__)

MAX_SCHEMA_DEPTH = 32

# JavaScript constructors used as type references in decorator options.
BUILTIN_TYPES = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Object": "object",
    "Array": "array",
}

_MISSING = object()


def parse_schema(text: str) -> SchemaNode:
    """Parse an object-literal schema descriptor into a SchemaNode."""
    return _parse_schema(text, 0)


def _parse_schema(text: str, depth: int) -> SchemaNode:
    entries = object_entries(text) or {}
    fields: dict[str, Any] = {}

    declared = _literal(entries.get("type"), str)
    ref = _literal(entries.get("$ref"), str)
    if declared is not None:
        fields["type"] = declared
    elif ref is not None:
        fields["type"] = ref.rsplit("/", 1)[-1]
    else:
        reference = _type_reference(entries.get("type"), depth)
        if reference is not None:
            fields.update(reference.model_dump(exclude_unset=True))
        else:
            fields["type"] = "string"

    example = _MISSING
    if "example" in entries:
        example = _example(entries["example"])
        fields["example"] = example

    for key in ("description", "format"):
        value = _literal(entries.get(key), str)
        if value is not None:
            fields[key] = value

    for key in ("nullable", "required"):
        value = _literal(entries.get(key), bool)
        if value is not None:
            fields[key] = value

    enum = _string_list(entries.get("enum"))
    if enum is not None:
        fields["enum"] = enum

    if depth < MAX_SCHEMA_DEPTH:
        items = entries.get("items")
        if is_object_literal(items):
            fields["items"] = _parse_schema(items, depth + 1)

        properties = _properties(entries.get("properties"), depth)
        if properties is not None:
            fields["properties"] = properties
    elif "items" in entries or "properties" in entries:
        logger.debug("Schema nested deeper than %d levels, ignoring inner blocks", MAX_SCHEMA_DEPTH)

    # An example overrides a declared type, never the "string" default.
    if "type" in entries:
        if isinstance(example, list):
            fields["type"] = "array"
            if example and "items" not in fields:
                fields["items"] = SchemaNode(type=value_kind(example[0]), example=example[0])
        elif isinstance(example, (int, float)) and not isinstance(example, bool):
            fields["type"] = "number"

    return SchemaNode(**fields)


def _properties(text: str | None, depth: int) -> dict[str, SchemaNode] | None:
    entries = object_entries(text)
    if entries is None:
        return None
    properties = {}
    for name, value in entries.items():
        if is_object_literal(value):
            properties[name] = _parse_schema(value, depth + 1)
            continue
        reference = _type_reference(value, depth + 1)
        if reference is not None:
            properties[name] = reference
    return properties


def type_reference(text: str | None) -> SchemaNode | None:
    """Schema for a ``type:`` option that names a type instead of a string.

    ``CreateUserDto`` gives a bare-type node and ``[CreateUserDto]`` an
    array of it. Qualified names keep their last segment. Brackets
    nested deeper than MAX_SCHEMA_DEPTH give None.
    """
    return _type_reference(text, 0)


def _type_reference(text: str | None, depth: int) -> SchemaNode | None:
    if depth > MAX_SCHEMA_DEPTH:
        logger.debug("Type reference nested deeper than %d levels", MAX_SCHEMA_DEPTH)
        return None
    text = (text or "").strip()
    if not text:
        return None
    if text.startswith("[") and text.endswith("]"):
        inner = _type_reference(text[1:-1], depth + 1)
        if inner is None:
            return None
        return SchemaNode(type="array", items=inner)
    if text[0] in "'\"`":
        return SchemaNode(type=strip_quotes(text))
    name = text.rsplit(".", 1)[-1]
    if not name.isidentifier():
        return None
    return SchemaNode(type=BUILTIN_TYPES.get(name, name))


def value_kind(value: Any) -> str:
    """Schema type name for a parsed literal value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def _literal(text: str | None, kind: type) -> Any:
    if text is None:
        return None
    try:
        value = parse_literal(text)
    except LiteralError:
        return None
    return value if isinstance(value, kind) else None


def _example(text: str) -> Any:
    try:
        return parse_literal(text)
    except LiteralError:
        return strip_quotes(text)


def _string_list(text: str | None) -> list[str] | None:
    value = _literal(text, list)
    if value is None or not all(isinstance(v, str) for v in value):
        return None
    return value
