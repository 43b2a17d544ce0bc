"""Reference integrity: canonical schema names, no dangling references, consistent path parameters.

Every pass corrects the document in place and reports what it changed.
"""

import logging
import re

from go_openapi_gen.analyzer.models import ConflictPolicy
from go_openapi_gen.analyzer.naming import unique_name
from go_openapi_gen.errors import ModelConflictError
from go_openapi_gen.generator.document import OpenAPIDocument, Parameter, Schema, schema_ref

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "UnknownSchema"
NAME_PREFIX = "Schema"

_INVALID_CHARS_RE = re.compile(r"[^A-Za-z0-9_]")
_TEMPLATE_RE = re.compile(r"\{([^}]+)\}")


def canonical_name(name: str) -> str:
    """``*sdk.User`` -> ``User``; ``1st`` -> ``Schema1st``; empty -> ``UnknownSchema``."""
    cleaned = name.replace("*", "").rsplit(".", 1)[-1]
    cleaned = _INVALID_CHARS_RE.sub("", cleaned)
    if not cleaned:
        return PLACEHOLDER_NAME
    if not cleaned[0].isalpha():
        cleaned = NAME_PREFIX + cleaned
    return cleaned


def path_template_names(path: str) -> list[str]:
    return list(dict.fromkeys(_TEMPLATE_RE.findall(path)))


def open_object() -> Schema:
    return Schema(type="object", additional_properties=True)


class ReferenceIntegrity:
    """Repairs an OpenAPIDocument so that every reference resolves."""

    def __init__(self, policy: ConflictPolicy = ConflictPolicy.FIRST_WINS):
        self.policy = ConflictPolicy(policy)

    def repair(self, document: OpenAPIDocument) -> list[str]:
        """Run all passes; return the corrections made."""
        corrections: list[str] = []
        mapping = self.canonicalize(document, corrections)
        self.rewrite_references(document, mapping, corrections)
        self.reconcile_path_parameters(document, corrections)
        return corrections

    def canonicalize(self, document: OpenAPIDocument, corrections: list[str]) -> dict[str, str]:
        schemas: dict[str, Schema] = {}
        mapping: dict[str, str] = {}
        for old, schema in document.components.schemas.items():
            new = canonical_name(old)
            if new in schemas:
                if self.policy == ConflictPolicy.ERROR:
                    raise ModelConflictError(f"Schemas {old!r} and another schema both canonicalize to {new!r}")
                if self.policy == ConflictPolicy.FIRST_WINS:
                    mapping[old] = new
                    corrections.append(f"Schema {old!r} dropped: {new!r} already exists")
                    continue
                new = unique_name(new, schemas)
            if new != old:
                corrections.append(f"Schema {old!r} renamed to {new!r}")
            schemas[new] = schema
            mapping[old] = new
        document.components.schemas = schemas
        return mapping

    def rewrite_references(self, document: OpenAPIDocument, mapping: dict[str, str], corrections: list[str]) -> None:
        schemas = document.components.schemas
        for name in list(schemas):
            schemas[name] = self._fix(schemas[name], mapping, schemas, f"schema {name}", corrections)

        for path, item in document.paths.items():
            for method, op in item.operations():
                where = f"{method.upper()} {path}"
                for param in op.parameters or []:
                    param.schema_ = self._fix(param.schema_, mapping, schemas, where, corrections)
                if op.request_body is not None:
                    for media in op.request_body.content.values():
                        media.schema_ = self._fix(media.schema_, mapping, schemas, where, corrections)
                for response in op.responses.values():
                    for media in (response.content or {}).values():
                        media.schema_ = self._fix(media.schema_, mapping, schemas, where, corrections)

    def resolve(self, ref_name: str, mapping: dict[str, str], schemas: dict[str, Schema]) -> str | None:
        """Target schema name of a reference, or None if nothing matches."""
        if ref_name in mapping:
            return mapping[ref_name]
        if ref_name in schemas:
            return ref_name
        canonical = canonical_name(ref_name)
        if canonical in schemas:
            return canonical
        folded = canonical.casefold()
        return next((name for name in schemas if name.casefold() == folded), None)

    def _fix(
        self,
        schema: Schema,
        mapping: dict[str, str],
        schemas: dict[str, Schema],
        where: str,
        corrections: list[str],
    ) -> Schema:
        if schema.ref is not None:
            target = self.resolve(schema.ref_name, mapping, schemas)
            if target is None:
                corrections.append(f"{where}: dangling reference {schema.ref!r} replaced by an open object")
                return open_object()
            return Schema(ref=schema_ref(target))

        if schema.properties:
            schema.properties = {
                name: self._fix(prop, mapping, schemas, where, corrections)
                for name, prop in schema.properties.items()
            }
        if schema.items is not None:
            schema.items = self._fix(schema.items, mapping, schemas, where, corrections)
        if isinstance(schema.additional_properties, Schema):
            schema.additional_properties = self._fix(schema.additional_properties, mapping, schemas, where, corrections)
        return schema

    def reconcile_path_parameters(self, document: OpenAPIDocument, corrections: list[str]) -> None:
        """Path parameters of each operation are exactly the ``{name}`` tokens of its path."""
        for path, item in document.paths.items():
            names = path_template_names(path)
            for method, op in item.operations():
                where = f"{method.upper()} {path}"
                kept: list[Parameter] = []
                declared: set[str] = set()
                for param in op.parameters or []:
                    if param.location != "path":
                        kept.append(param)
                    elif param.name not in names or param.name in declared:
                        corrections.append(f"{where}: removed path parameter {param.name!r}")
                    else:
                        if not param.required:
                            param.required = True
                            corrections.append(f"{where}: path parameter {param.name!r} marked required")
                        declared.add(param.name)
                        kept.append(param)
                for name in names:
                    if name not in declared:
                        corrections.append(f"{where}: added missing path parameter {name!r}")
                        kept.append(Parameter(name=name, location="path", required=True, schema_=Schema(type="string")))
                op.parameters = kept or None
