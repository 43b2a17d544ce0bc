"""Validates a generated OpenAPI document for internal consistency."""

import re

from go_openapi_gen.generator.document import SCHEMA_REF_PREFIX, OpenAPIDocument

_TEMPLATE_RE = re.compile(r"\{([^}]+)\}")
HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options")


def _iter_refs(node, location: str):
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            yield location, ref
        for key, value in node.items():
            yield from _iter_refs(value, f"{location}/{key}")
    elif isinstance(node, list):
        for i, value in enumerate(node):
            yield from _iter_refs(value, f"{location}/{i}")


def _operations(data: dict):
    for path, item in data.get("paths", {}).items():
        for method in HTTP_METHODS:
            if method in item:
                yield path, method, item[method]


def validate_references(data: dict) -> dict[str, str]:
    """Check every $ref points at an existing component schema.

    Returns dict of {location: error_message}.
    """
    schemas = data.get("components", {}).get("schemas", {})
    errors = {}
    for location, ref in _iter_refs(data, "#"):
        name = ref.removeprefix(SCHEMA_REF_PREFIX)
        if not ref.startswith(SCHEMA_REF_PREFIX) or name not in schemas:
            errors[location] = f"Dangling reference {ref!r}"
    return errors


def validate_required(data: dict) -> dict[str, str]:
    """Check required names of every component schema are declared properties."""
    errors = {}
    for name, schema in data.get("components", {}).get("schemas", {}).items():
        properties = schema.get("properties", {})
        for required in schema.get("required", []):
            if required not in properties:
                errors[f"#/components/schemas/{name}/required"] = f"Required property {required!r} is not defined"
    return errors


def validate_path_parameters(data: dict) -> dict[str, str]:
    """Check path templates and path parameters agree for every operation."""
    errors = {}
    for path, method, op in _operations(data):
        expected = set(_TEMPLATE_RE.findall(path))
        declared = {p["name"] for p in op.get("parameters", []) if p.get("in") == "path"}
        location = f"{method.upper()} {path}"
        missing = sorted(expected - declared)
        extra = sorted(declared - expected)
        if missing:
            errors[f"{location} missing"] = f"Path parameters not declared: {', '.join(missing)}"
        if extra:
            errors[f"{location} extra"] = f"Path parameters not in path: {', '.join(extra)}"
    return errors


def validate_operation_ids(data: dict) -> dict[str, str]:
    """Check operation ids are unique."""
    errors = {}
    first_seen: dict[str, str] = {}
    for path, method, op in _operations(data):
        op_id = op.get("operationId")
        if not op_id:
            continue
        location = f"{method.upper()} {path}"
        if op_id in first_seen:
            errors[location] = f"Duplicate operationId {op_id!r} (first used by {first_seen[op_id]})"
        else:
            first_seen[op_id] = location
    return errors


def validate_document(document: OpenAPIDocument | dict) -> dict[str, str]:
    """Run all validations on a document.

    Returns dict of {location: error_message}; empty when consistent.
    """
    data = document.to_dict() if isinstance(document, OpenAPIDocument) else document
    errors = {}
    errors.update(validate_references(data))
    errors.update(validate_required(data))
    errors.update(validate_path_parameters(data))
    errors.update(validate_operation_ids(data))
    return errors
