"""Joining controller and method routes."""

import re

_SLASHES_RE = re.compile(r"/+")


def resolve_route(base_route: str, method_route: str) -> str:
    """Join a controller route and a method route into one normalized path.

    The result has no leading or trailing slash and single slashes
    between segments: ``resolve_route("/categories/", "/:id/children")``
    gives ``categories/:id/children``.
    """
    joined = _SLASHES_RE.sub("/", f"{base_route}/{method_route}")
    return joined.strip("/")
