"""Intermediate analysis models.

The extractors (declaration scanner, handler analyzer, route parser)
fill an :class:`Analysis`; the generator reads it without changing it.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel

from go_openapi_gen.analyzer.naming import clean_type_name, to_snake_case, unique_name
from go_openapi_gen.errors import ModelConflictError

logger = logging.getLogger(__name__)

# Envelope schemas every document carries.
STANDARD_RESPONSE = "StandardResponse"
ERROR_RESPONSE = "ErrorResponse"
SENTINEL_RESPONSES = (STANDARD_RESPONSE, ERROR_RESPONSE)


class ConflictPolicy(str, Enum):
    """What to do when two models (or schemas) claim the same name."""

    FIRST_WINS = "first-wins"
    RENAME = "rename"
    ERROR = "error"


class Field(BaseModel):
    """A single struct field."""

    name: str
    type: str  # raw Go type string: []T, map[K]V, *T, pkg.T
    json_tag: str = ""
    query_tag: str = ""
    embedded: bool = False
    required: bool = True
    description: str = ""
    example: Any = None

    @property
    def serialization_name(self) -> str | None:
        name = self.json_tag.split(",")[0]
        if name and name != "-":
            return name
        return None

    @property
    def skipped(self) -> bool:
        return self.json_tag == "-"

    @property
    def property_name(self) -> str:
        """Key of this field in its schema's properties."""
        if self.serialization_name:
            return self.serialization_name
        if self.embedded:
            return to_snake_case(clean_type_name(self.name))
        return to_snake_case(self.name)


class Model(BaseModel):
    """A struct declaration destined to become a schema."""

    name: str
    package: str = ""
    fields: list[Field] = []
    description: str = ""


class Parameter(BaseModel):
    """A single operation parameter (path, query, or header)."""

    name: str
    location: str  # path / query / header
    required: bool = False
    type: str = "string"  # string / integer / number / boolean / array
    default: Any = None
    enum: list[str] = []
    description: str = ""
    example: Any = None


class QueryParameter(BaseModel):
    """A query parameter collected from a handler body."""

    name: str
    type: str = "string"
    required: bool = False
    default: Any = None
    enum: list[str] = []
    description: str = ""
    example: Any = None

    def to_parameter(self) -> Parameter:
        return Parameter(location="query", **self.model_dump())


class HandlerInfo(BaseModel):
    """The inferred contract of one request handler."""

    name: str
    request_type: str = ""
    response_type: str = ""
    package: str = ""
    query_parameters: list[QueryParameter] = []
    anonymous_request_model: Model | None = None
    success_status: int = 200


class Route(BaseModel):
    """One (path, verb, handler) binding."""

    path: str  # framework syntax, /users/:id
    method: str
    handler: str
    middleware: list[str] = []
    request_body: str | None = None  # model name
    response: str | None = None  # model name
    parameters: list[Parameter] = []
    tags: list[str] = []
    success_status: int = 200


class Analysis(BaseModel):
    """Everything extracted from one project, passed explicitly through the pipeline."""

    models: dict[str, Model] = {}
    routes: list[Route] = []

    def register(self, model: Model, policy: ConflictPolicy = ConflictPolicy.FIRST_WINS) -> str | None:
        """Add ``model`` to the table; return the name it was stored under, or None if discarded."""
        if model.name not in self.models:
            self.models[model.name] = model
            return model.name

        existing = self.models[model.name]
        if policy == ConflictPolicy.ERROR:
            raise ModelConflictError(
                f"Model {model.name!r} from package {model.package!r} "
                f"conflicts with the one from package {existing.package!r}"
            )
        if policy == ConflictPolicy.RENAME:
            new_name = unique_name(model.name, self.models, qualifier=model.package)
            logger.warning("Model %s from package %s renamed to %s", model.name, model.package, new_name)
            self.models[new_name] = model.model_copy(update={"name": new_name})
            return new_name

        logger.warning(
            "Model %s from package %s ignored, already declared in package %s",
            model.name, model.package, existing.package,
        )
        return None
