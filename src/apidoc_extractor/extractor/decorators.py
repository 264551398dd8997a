"""Reading decorators off declarations, methods and parameters."""

from typing import Iterable

from apidoc_extractor.parser.literal import LiteralError, object_entries, parse_literal, strip_quotes
from apidoc_extractor.source.tree import Decorator

HTTP_VERBS = {
    "Get": "GET",
    "Post": "POST",
    "Put": "PUT",
    "Delete": "DELETE",
    "Patch": "PATCH",
}


def find_decorator(node, name: str) -> Decorator | None:
    """First decorator called ``name`` on a class, method, property or parameter."""
    for decorator in node.decorators:
        if decorator.name == name:
            return decorator
    return None


def find_decorators(node, names: Iterable[str]) -> list[Decorator]:
    """All decorators whose name is in ``names``, in source order."""
    names = set(names)
    return [d for d in node.decorators if d.name in names]


def http_verb(decorator: Decorator) -> str | None:
    return HTTP_VERBS.get(decorator.name)


def route_argument(decorator: Decorator) -> str:
    """Route fragment given to ``@Controller``/``@Get``-style decorators."""
    text = decorator.first_argument
    if text is None:
        return ""
    try:
        value = parse_literal(text)
    except LiteralError:
        return strip_quotes(text)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        path = value.get("path")
        return path if isinstance(path, str) else ""
    return ""


def argument_entries(decorator: Decorator | None) -> dict[str, str]:
    """Top-level keys of the decorator's options object, as raw text."""
    if decorator is None:
        return {}
    return object_entries(decorator.first_argument) or {}


def string_option(entries: dict[str, str], key: str) -> str | None:
    text = entries.get(key)
    if text is None:
        return None
    try:
        value = parse_literal(text)
    except LiteralError:
        return None
    return value if isinstance(value, str) else None
