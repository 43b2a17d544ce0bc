"""Heuristic tables loader: reads the packaged defaults and merges config overrides."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from go_openapi_gen.errors import ConfigError

HEURISTICS_DIR = Path(__file__).parent
DEFAULTS_PATH = HEURISTICS_DIR / "defaults.yaml"


class CallNames(BaseModel):
    """Selector names of the framework calls the analyzer recognizes."""

    query_parser: str = "QueryParser"
    body_parser: str = "BodyParser"
    query: str = "Query"
    json_response: str = "JSON"
    status: str = "Status"
    group: str = "Group"
    register_routes: str = "RegisterRoutes"


class PrefixFormat(BaseModel):
    prefix: str
    format: str  # printf-style, "%s" receives the rest of the method name


class ResponseLike(BaseModel):
    contains: list[str] = []
    suffixes: list[str] = []


class NamePatterns(BaseModel):
    integer: list[str] = []
    boolean: list[str] = []
    boolean_prefixes: list[str] = []
    number: list[str] = []


class Heuristics(BaseModel):
    """Every naming and typing convention used while reading Go sources."""

    context_types: list[str] = ["Ctx"]
    calls: CallNames = CallNames()
    typed_queries: dict[str, str] = {}
    open_map_literals: list[str] = []
    response_helpers: dict[str, str] = {}
    status_constants: dict[str, int] = {}
    service_roots: list[str] = []
    service_suffix: str = "Service"
    response_like: ResponseLike = ResponseLike()
    response_prefixes: list[PrefixFormat] = []
    param_descriptions: dict[str, str] = {}
    query_defaults: dict[str, Any] = {}
    query_enums: dict[str, list[str]] = {}
    name_patterns: NamePatterns = NamePatterns()
    conversions: dict[str, str] = {}
    parse_packages: list[str] = []
    parse_functions: dict[str, str] = {}
    http_methods: list[str] = []
    auth_marker: str = "auth"
    anonymous_names: dict[str, str] = {}
    tag_descriptions: dict[str, str] = {}

    def is_response_like(self, type_name: str) -> bool:
        name = type_name.lstrip("*").rsplit(".", 1)[-1]
        if any(part in name for part in self.response_like.contains):
            return True
        return any(name.endswith(suffix) for suffix in self.response_like.suffixes)

    def is_service_chain(self, chain: list[str]) -> bool:
        """``["pr", "Users", "Get"]`` or ``["orderService", "Orders", "List"]`` style member access.

        The chain needs a root, at least one member and the method; the root
        must be a known service root or end in the service suffix.
        """
        if len(chain) < 3:
            return False
        root = chain[0]
        return root in self.service_roots or root.endswith(self.service_suffix)

    def response_type_for_method(self, method: str) -> str:
        """Guess a service method's response type from its name, e.g. ListUsers -> UsersListResponse."""
        for entry in self.response_prefixes:
            if method.startswith(entry.prefix) and len(method) > len(entry.prefix):
                return entry.format % method[len(entry.prefix):]
        return method + "Response"

    def type_from_name(self, param_name: str) -> str:
        """Semantic type guessed from a parameter name alone."""
        lower = param_name.lower()
        patterns = self.name_patterns
        if any(p in lower for p in patterns.integer):
            return "integer"
        if any(p in lower for p in patterns.boolean) or lower.startswith(tuple(patterns.boolean_prefixes)):
            return "boolean"
        if any(p in lower for p in patterns.number):
            return "number"
        return "string"

    def anonymous_model_name(self, handler_name: str) -> str:
        if handler_name in self.anonymous_names:
            return self.anonymous_names[handler_name]
        if handler_name.endswith("Request"):
            return handler_name
        return handler_name + "Request"

    def tag_description(self, tag: str) -> str:
        if tag in self.tag_descriptions:
            return self.tag_descriptions[tag]
        return tag[:1].upper() + tag[1:] + " related endpoints"

    def has_auth(self, middleware: list[str]) -> bool:
        marker = self.auth_marker.lower()
        return any(marker in name.lower() for name in middleware)


def load_heuristics(overrides: dict | None = None, path: Path = DEFAULTS_PATH) -> Heuristics:
    """Load the heuristic tables, merging ``overrides`` over the packaged defaults.

    Nested mappings are merged key by key; lists and scalars are replaced.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read heuristics from {path}: {e}") from e

    if overrides:
        data = _merge(data, overrides)

    try:
        return Heuristics.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid heuristics: {e}") from e


def _merge(base: dict, overrides: dict) -> dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged
