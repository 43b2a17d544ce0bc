"""Configuration file loading (JSON or YAML)."""

import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ValidationError

from go_openapi_gen.analyzer.models import ConflictPolicy
from go_openapi_gen.errors import ConfigError
from go_openapi_gen.generator.generator import DocumentConfig


class GeneratorConfig(BaseModel):
    """Settings of one generator run."""

    project_path: Path = Path(".")
    output_path: Path = Path("openapi.yaml")
    output_format: Literal["auto", "json", "yaml"] = "yaml"
    server_url: str = "http://localhost:3000"
    title: str = "API Server"
    version: str = "1.0.0"
    description: str = ""
    routes_pattern: str = "routes/**/router.go"
    sdk_package: str = "sdk"
    conflict_policy: ConflictPolicy = ConflictPolicy.FIRST_WINS
    heuristics: dict = {}  # merged over the packaged heuristic tables

    def document_config(self) -> DocumentConfig:
        return DocumentConfig(
            title=self.title,
            description=self.description,
            version=self.version,
            server_url=self.server_url,
            conflict_policy=self.conflict_policy,
        )


def load_config(path: Path) -> GeneratorConfig:
    """Load a config file; ``.json`` files are read as JSON, anything else as YAML."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
