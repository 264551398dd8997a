"""Endpoint synthesis for one controller class.

Each method carrying an HTTP verb decorator becomes an EndpointDocument
built from its route, ``@ApiOperation`` text, ``@Body`` parameter and
response decorators.
"""

import logging
from http import HTTPStatus

from apidoc_extractor.extractor.body import resolve_request_body
from apidoc_extractor.extractor.decorators import (
    argument_entries,
    find_decorator,
    find_decorators,
    http_verb,
    route_argument,
    string_option,
)
from apidoc_extractor.extractor.routes import resolve_route
from apidoc_extractor.parser.base import EndpointDocument, ResponseDescriptor
from apidoc_extractor.parser.literal import LiteralError, is_object_literal, parse_literal
from apidoc_extractor.parser.schema import parse_schema, type_reference
from apidoc_extractor.source.project import Project
from apidoc_extractor.source.tree import Declaration, Decorator, Method, SourceFile

logger = logging.getLogger(__name__)

CONTROLLER_DECORATOR = "Controller"
OPERATION_DECORATOR = "ApiOperation"

# Status implied by each response decorator when no explicit status is given.
RESPONSE_DECORATORS = {
    "ApiResponse": 200,
    "ApiOkResponse": 200,
    "ApiCreatedResponse": 201,
    "ApiAcceptedResponse": 202,
    "ApiNoContentResponse": 204,
    "ApiBadRequestResponse": 400,
    "ApiUnauthorizedResponse": 401,
    "ApiForbiddenResponse": 403,
    "ApiNotFoundResponse": 404,
    "ApiConflictResponse": 409,
    "ApiUnprocessableEntityResponse": 422,
    "ApiInternalServerErrorResponse": 500,
}


def controller_route(controller: Declaration) -> str:
    decorator = find_decorator(controller, CONTROLLER_DECORATOR)
    return route_argument(decorator) if decorator else ""


def synthesize_controller(
    controller: Declaration,
    project: Project | None = None,
    source: SourceFile | None = None,
) -> list[EndpointDocument]:
    """Endpoint documents for every routed method, in declaration order."""
    base_route = controller_route(controller)
    endpoints = []
    for method in controller.methods:
        endpoint = synthesize_endpoint(method, base_route, controller.name, project, source)
        if endpoint is not None:
            endpoints.append(endpoint)
    return endpoints


def synthesize_endpoint(
    method: Method,
    base_route: str,
    controller_name: str = "",
    project: Project | None = None,
    source: SourceFile | None = None,
) -> EndpointDocument | None:
    """Build the document for one method.

    Returns None for methods without a verb decorator and for routes
    that normalize to the empty string.
    """
    route_decorator = None
    for decorator in method.decorators:
        if http_verb(decorator):
            route_decorator = decorator
            break
    if route_decorator is None:
        return None

    route = resolve_route(base_route, route_argument(route_decorator))
    if not route:
        logger.debug("Skipping %s.%s: empty route", controller_name, method.name)
        return None

    fields = {
        "method": http_verb(route_decorator),
        "route": route,
        "controller": controller_name,
    }

    operation = argument_entries(find_decorator(method, OPERATION_DECORATOR))
    fields["summary"] = string_option(operation, "summary") or ""
    description = string_option(operation, "description")
    if description is not None:
        fields["description"] = description

    request_body = resolve_request_body(method.parameters, project, source)
    if request_body is not None:
        fields["request_body"] = request_body

    success = None
    errors = []
    for decorator in find_decorators(method, RESPONSE_DECORATORS):
        response = read_response(decorator)
        if response.is_error:
            errors.append(response)
        else:
            # Later declarations replace earlier ones in the success slot.
            success = response
    if success is not None:
        fields["response"] = success
    if errors:
        fields["error_responses"] = errors

    return EndpointDocument(**fields)


def read_response(decorator: Decorator) -> ResponseDescriptor:
    """Response descriptor for one response decorator."""
    entries = argument_entries(decorator)
    status = _status(entries.get("status"))
    if status is None:
        status = RESPONSE_DECORATORS.get(decorator.name, 200)

    fields = {
        "status": status,
        "description": string_option(entries, "description") or "",
    }
    if is_object_literal(entries.get("schema")):
        fields["schema_"] = parse_schema(entries["schema"])
    else:
        reference = type_reference(entries.get("type"))
        if reference is not None:
            fields["schema_"] = reference
    return ResponseDescriptor(**fields)


def _status(text: str | None) -> int | None:
    """Numeric status from ``201``, ``'201'`` or ``HttpStatus.CREATED``."""
    if not text:
        return None
    name = text.strip()
    if name.startswith("HttpStatus."):
        try:
            return HTTPStatus[name.split(".", 1)[1]].value
        except KeyError:
            return None
    try:
        value = parse_literal(name)
    except LiteralError:
        return None
    if isinstance(value, str) and value.isdigit():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None
