"""Operation generation: one OpenAPI operation per Route."""

import re

from go_openapi_gen.analyzer.models import ERROR_RESPONSE, Parameter, Route
from go_openapi_gen.analyzer.naming import title
from go_openapi_gen.generator.document import (
    MediaType, Operation, Parameter as OperationParameter, RequestBody,
    Response, Schema, schema_ref,
)
from go_openapi_gen.heuristics.loader import Heuristics

JSON_MEDIA_TYPE = "application/json"
BEARER_SCHEME = "bearerAuth"

_PATH_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_SLASHES_RE = re.compile(r"/{2,}")

ACTIONS = {
    "GET": "Get",
    "POST": "Create",
    "PUT": "Update",
    "DELETE": "Delete",
    "PATCH": "Patch",
}


def convert_path(path: str) -> str:
    """Normalize a framework path: ``/users/:id/`` -> ``/users/{id}``."""
    converted = _PATH_PARAM_RE.sub(r"{\1}", path)
    converted = _SLASHES_RE.sub("/", "/" + converted)
    if len(converted) > 1:
        converted = converted.rstrip("/")
    return converted


def operation_id(method: str, path: str) -> str:
    cleaned = convert_path(path)
    for old, new in (("/", "_"), ("{", ""), ("}", ""), ("-", "_")):
        cleaned = cleaned.replace(old, new)
    return method.lower() + "_" + cleaned.lstrip("_")


def summary(method: str, path: str) -> str:
    """``GET /users/:id`` -> ``Get Users``"""
    action = ACTIONS.get(method, method)
    for part in reversed(path.split("/")):
        if part and not part.startswith((":", "{")):
            return f"{action} {title(part)}"
    return f"{action} Resource"


def parameter_schema(param: Parameter) -> Schema:
    if param.type in ("integer", "int"):
        schema = Schema(type="integer", format="int32")
    elif param.type == "int64":
        schema = Schema(type="integer", format="int64")
    elif param.type in ("number", "float", "double"):
        schema = Schema(type="number", format="double")
    elif param.type in ("boolean", "bool"):
        schema = Schema(type="boolean")
    elif param.type == "array":
        schema = Schema(type="array", items=Schema(type="string"))
    else:
        schema = Schema(type="string")
    if param.enum:
        schema.enum = list(param.enum)
    if param.default is not None:
        schema.default = param.default
    return schema


def _json_content(name: str) -> dict[str, MediaType]:
    return {JSON_MEDIA_TYPE: MediaType(schema_=Schema(ref=schema_ref(name)))}


def build_operation(route: Route, heuristics: Heuristics) -> Operation:
    parameters = []
    seen = set()
    for param in route.parameters:
        key = (param.name, param.location)
        if key in seen:
            continue
        seen.add(key)
        parameters.append(OperationParameter(
            name=param.name,
            location=param.location,
            required=param.required,
            description=param.description or None,
            schema_=parameter_schema(param),
            example=param.example,
        ))

    request_body = None
    if route.request_body:
        request_body = RequestBody(description="Request body", required=True, content=_json_content(route.request_body))

    success = Response(description="Successful operation")
    if route.response:
        success.content = _json_content(route.response)
    responses = {
        str(route.success_status): success,
        "400": Response(description="Bad request", content=_json_content(ERROR_RESPONSE)),
        "500": Response(description="Internal server error", content=_json_content(ERROR_RESPONSE)),
    }

    security = None
    if heuristics.has_auth(route.middleware):
        security = [{BEARER_SCHEME: []}]

    return Operation(
        tags=list(route.tags) or None,
        summary=summary(route.method, route.path),
        description=f"{route.handler} handler for {route.method.lower()} {route.path}",
        operation_id=operation_id(route.method, route.path),
        parameters=parameters or None,
        request_body=request_body,
        responses=responses,
        security=security,
    )
