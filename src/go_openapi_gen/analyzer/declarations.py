"""Declaration scanner: struct types of the model tree become Models."""

import logging
import re
from pathlib import Path

from go_openapi_gen.analyzer.models import Analysis, ConflictPolicy, Field, Model
from go_openapi_gen.analyzer.naming import type_string
from go_openapi_gen.errors import ExtractionError, GoSyntaxError
from go_openapi_gen.golang.nodes import File, GenDecl, StructType, TypeSpec, is_exported, unquote
from go_openapi_gen.golang.parser import parse_path

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'(\w+):"((?:[^"\\]|\\.)*)"')


def parse_go_file(path: Path) -> File:
    """Parse one Go file, turning read and syntax failures into ExtractionError."""
    try:
        return parse_path(path)
    except (OSError, UnicodeDecodeError, GoSyntaxError) as e:
        raise ExtractionError(f"Failed to parse {path}: {e}") from e


def go_files(directory: Path, recursive: bool = True) -> list[Path]:
    """Non-test .go files under ``directory``, sorted by path."""
    pattern = "**/*.go" if recursive else "*.go"
    return sorted(p for p in directory.glob(pattern) if p.is_file() and not p.name.endswith("_test.go"))


def parse_tag(raw: str) -> dict[str, str]:
    """`json:"id,omitempty" query:"id"` -> {"json": "id,omitempty", "query": "id"}"""
    return {key: value for key, value in _TAG_RE.findall(raw)}


def build_fields(struct: StructType, sdk_package: str = "sdk") -> list[Field]:
    """Turn struct fields into Fields, skipping unexported named fields."""
    fields = []
    for decl in struct.fields.list:
        type_name = type_string(decl.type, sdk_package)
        tags = parse_tag(unquote(decl.tag)) if decl.tag is not None else {}
        json_tag = tags.get("json", "")
        required = "omitempty" not in json_tag.split(",")[1:] if "json" in tags else True
        common = dict(
            type=type_name,
            json_tag=json_tag,
            query_tag=tags.get("query", ""),
            required=required,
            description=decl.doc,
            example=tags.get("example"),
        )
        if not decl.names:
            fields.append(Field(name=type_name, embedded=True, **common))
            continue
        for ident in decl.names:
            if is_exported(ident.name):
                fields.append(Field(name=ident.name, **common))
    return fields


def models_in_file(file: File, sdk_package: str = "sdk") -> list[Model]:
    """Exported top-level struct declarations of one file."""
    models = []
    for decl in file.decls:
        if not isinstance(decl, GenDecl) or decl.tok != "type":
            continue
        for spec in decl.specs:
            if not isinstance(spec, TypeSpec) or spec.assign or not isinstance(spec.type, StructType):
                continue
            if not is_exported(spec.name.name):
                continue
            models.append(Model(
                name=spec.name.name,
                package=file.package.name,
                fields=build_fields(spec.type, sdk_package),
                description=spec.doc or decl.doc,
            ))
    return models


def scan_models(
    root: Path,
    analysis: Analysis,
    sdk_package: str = "sdk",
    policy: ConflictPolicy = ConflictPolicy.FIRST_WINS,
) -> int:
    """Register every model declared under ``root``. Returns how many were added."""
    added = 0
    for path in go_files(root):
        for model in models_in_file(parse_go_file(path), sdk_package):
            if analysis.register(model, policy) is not None:
                added += 1
    logger.debug("Scanned %s: %d models", root, added)
    return added
