"""Request body schema resolution.

The body parameter's type is introspected when its declaration can be
found; otherwise the schema only carries the type name.
"""

import logging

from apidoc_extractor.extractor.decorators import find_decorator
from apidoc_extractor.parser.base import SchemaNode
from apidoc_extractor.parser.literal import object_entries
from apidoc_extractor.parser.schema import parse_schema
from apidoc_extractor.source.project import Project
from apidoc_extractor.source.tree import Parameter, Property, SourceFile

logger = logging.getLogger(__name__)

BODY_DECORATOR = "Body"
PROPERTY_DECORATORS = ("ApiProperty", "ApiPropertyOptional")


def find_body_parameter(parameters: list[Parameter]) -> Parameter | None:
    """The parameter bound to the request body; the last one if several are."""
    body = None
    for param in parameters:
        if find_decorator(param, BODY_DECORATOR):
            body = param
    return body


def resolve_request_body(
    parameters: list[Parameter],
    project: Project | None = None,
    source: SourceFile | None = None,
) -> SchemaNode | None:
    """Schema of the request body, or None when no parameter is a body."""
    param = find_body_parameter(parameters)
    if param is None:
        return None

    if project is not None and source is not None and param.type_text:
        decl = project.resolve_declaration(source, param.type_text)
        if decl is not None and decl.properties:
            logger.debug("Body type %s resolved to %s %s", param.type_text, decl.kind, decl.name)
            return SchemaNode(
                type="object",
                properties={prop.name: property_schema(prop) for prop in decl.properties},
            )

    return SchemaNode(type=bare_type_name(param.type_text))


def property_schema(prop: Property) -> SchemaNode:
    """Schema for one DTO property, from its swagger decorator if any."""
    decorator = None
    for name in PROPERTY_DECORATORS:
        decorator = find_decorator(prop, name)
        if decorator is not None:
            break
    if decorator is None:
        return SchemaNode(type=prop.type_text or "string")

    literal = decorator.first_argument or "{}"
    fields = parse_schema(literal).model_dump(exclude_unset=True)
    entries = object_entries(literal) or {}
    # The declared type stands in for a missing "type" option.
    if prop.type_text and "type" not in entries and "$ref" not in entries:
        fields["type"] = prop.type_text
    if "required" not in fields:
        fields["required"] = not (prop.optional or decorator.name == "ApiPropertyOptional")
    return SchemaNode(**fields)


def bare_type_name(type_text: str) -> str:
    """Type name without its module or namespace qualification."""
    return type_text.rsplit(".", 1)[-1] if type_text else "object"
