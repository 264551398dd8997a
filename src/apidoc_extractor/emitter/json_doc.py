"""JSON emitter: the endpoint list as a pretty-printed array."""

import json
from pathlib import Path

from apidoc_extractor.parser.base import EndpointDocument


def render_json(endpoints: list[EndpointDocument]) -> str:
    return json.dumps([ep.to_json_dict() for ep in endpoints], indent=2, ensure_ascii=False)


def write_json(endpoints: list[EndpointDocument], path: Path) -> Path:
    """Write the JSON document, creating its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_json(endpoints), encoding="utf-8")
    return path
