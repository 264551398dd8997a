"""Markdown emitter: endpoints grouped under one heading per controller."""

from pathlib import Path

from apidoc_extractor.parser.base import EndpointDocument

TITLE = "# API Documentation"


def render_markdown(endpoints: list[EndpointDocument]) -> str:
    grouped: dict[str, list[EndpointDocument]] = {}
    for ep in endpoints:
        grouped.setdefault(ep.controller, []).append(ep)

    lines = [TITLE, ""]
    for controller, group in grouped.items():
        lines += [f"## {controller or 'Controller'}", ""]
        for ep in group:
            lines += [f"### {ep.method} `{ep.route}`", ""]
            if ep.summary:
                lines += [f"**Description:** {ep.summary}", ""]
            if ep.description:
                lines += [ep.description, ""]
            lines += ["---", ""]
    return "\n".join(lines)


def write_markdown(endpoints: list[EndpointDocument], path: Path) -> Path:
    """Write the Markdown document, creating its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_markdown(endpoints), encoding="utf-8")
    return path
