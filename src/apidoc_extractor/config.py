"""Extractor configuration.

Defaults can be overridden by an ``apidoc.yaml`` file at the project
root, and the CLI options override both.
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ValidationError

from apidoc_extractor.errors import ConfigError

CONFIG_FILENAME = "apidoc.yaml"


class ExtractorConfig(BaseModel):
    """Where to look for controllers and where to write the docs."""

    pattern: str = "**/*.controller.ts"
    output_dir: str = "docs"
    formats: list[Literal["json", "markdown"]] = ["json"]
    json_filename: str = "api-docs.json"
    markdown_filename: str = "api-documentation.md"
    tsconfig: str = "tsconfig.json"
    exclude: list[str] = ["node_modules", "dist"]


def load_config(root: Path, overrides: dict | None = None) -> ExtractorConfig:
    """Build the config for a project root.

    ``overrides`` entries set to None are ignored so unset CLI options
    keep the file or default value.
    """
    data: dict = {}
    config_path = root / CONFIG_FILENAME
    if config_path.is_file():
        try:
            loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"{config_path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{config_path}: expected a mapping at the top level")
        data.update(loaded or {})

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    try:
        return ExtractorConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
