"""Output format detection and document writing."""

import json
from pathlib import Path

import yaml

from go_openapi_gen.generator.document import OpenAPIDocument


def detect_format(file_path: Path, default: str = "yaml") -> str:
    """Detect the output format from the file extension.

    Returns: 'json' or 'yaml'.
    """
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return default


def render_document(document: OpenAPIDocument, fmt: str) -> str:
    data = document.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    raise ValueError(f"Unknown output format: {fmt}")


def write_document(document: OpenAPIDocument, file_path: Path, fmt: str) -> int:
    """Write the document, creating parent directories. Returns the size in bytes."""
    content = render_document(document, fmt).encode("utf-8")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(content)
    return len(content)
