"""OpenAPI 3.0 document models.

Attribute names are Pythonic; aliases carry the OpenAPI spelling so that
``to_dict()`` produces a document ready to serialize.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SCHEMA_REF_PREFIX = "#/components/schemas/"


def schema_ref(name: str) -> str:
    return SCHEMA_REF_PREFIX + name


class _Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Schema(_Node):
    ref: str | None = Field(default=None, alias="$ref")
    type: str | None = None
    format: str | None = None
    description: str | None = None
    properties: dict[str, Schema] | None = None
    required: list[str] | None = None
    items: Schema | None = None
    additional_properties: bool | Schema | None = Field(default=None, alias="additionalProperties")
    enum: list[Any] | None = None
    default: Any = None
    example: Any = None

    @property
    def ref_name(self) -> str | None:
        if self.ref is None:
            return None
        return self.ref.rsplit("/", 1)[-1]


class Parameter(_Node):
    name: str
    location: str = Field(alias="in")
    required: bool = False
    description: str | None = None
    schema_: Schema = Field(default_factory=Schema, alias="schema")
    example: Any = None


class MediaType(_Node):
    schema_: Schema = Field(alias="schema")


class RequestBody(_Node):
    description: str | None = None
    required: bool = True
    content: dict[str, MediaType]


class Response(_Node):
    description: str
    content: dict[str, MediaType] | None = None


class Operation(_Node):
    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = Field(default=None, alias="operationId")
    parameters: list[Parameter] | None = None
    request_body: RequestBody | None = Field(default=None, alias="requestBody")
    responses: dict[str, Response] = {}
    security: list[dict[str, list[str]]] | None = None


class PathItem(_Node):
    get: Operation | None = None
    post: Operation | None = None
    put: Operation | None = None
    delete: Operation | None = None
    patch: Operation | None = None
    head: Operation | None = None
    options: Operation | None = None

    def operations(self) -> list[tuple[str, Operation]]:
        methods = ("get", "post", "put", "delete", "patch", "head", "options")
        return [(m, getattr(self, m)) for m in methods if getattr(self, m) is not None]


class Info(_Node):
    title: str
    description: str | None = None
    version: str


class Server(_Node):
    url: str
    description: str | None = None


class SecurityScheme(_Node):
    type: str
    scheme: str | None = None
    bearer_format: str | None = Field(default=None, alias="bearerFormat")
    description: str | None = None


class Components(_Node):
    schemas: dict[str, Schema] = {}
    security_schemes: dict[str, SecurityScheme] = Field(default_factory=dict, alias="securitySchemes")


class Tag(_Node):
    name: str
    description: str | None = None


class OpenAPIDocument(_Node):
    openapi: str = "3.0.3"
    info: Info
    servers: list[Server] = []
    paths: dict[str, PathItem] = {}
    components: Components = Components()
    tags: list[Tag] = []

    def to_dict(self) -> dict:
        """Plain OpenAPI structure, unset values omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
