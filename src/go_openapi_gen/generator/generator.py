"""OpenAPI generator: turns an Analysis into a repaired OpenAPIDocument."""

import logging

from pydantic import BaseModel

from go_openapi_gen.analyzer.models import Analysis, ConflictPolicy
from go_openapi_gen.generator.document import (
    Components, Info, OpenAPIDocument, PathItem, SecurityScheme, Server, Tag,
)
from go_openapi_gen.generator.integrity import ReferenceIntegrity
from go_openapi_gen.generator.operations import BEARER_SCHEME, build_operation, convert_path
from go_openapi_gen.generator.schemas import baseline_schemas, schema_for_model
from go_openapi_gen.generator.validator import validate_document
from go_openapi_gen.heuristics.loader import Heuristics, load_heuristics

logger = logging.getLogger(__name__)


class DocumentConfig(BaseModel):
    """Document-level settings."""

    title: str = "API Server"
    description: str = ""
    version: str = "1.0.0"
    server_url: str = "http://localhost:3000"
    conflict_policy: ConflictPolicy = ConflictPolicy.FIRST_WINS


class Generator:
    """Builds the OpenAPI document for an Analysis.

    The analysis is only read; generating twice gives equal documents.
    """

    def __init__(self, config: DocumentConfig | None = None, heuristics: Heuristics | None = None):
        self.config = config or DocumentConfig()
        self.heuristics = heuristics or load_heuristics()

    def generate(self, analysis: Analysis) -> OpenAPIDocument:
        schemas = {name: schema_for_model(model) for name, model in analysis.models.items()}
        for name, schema in baseline_schemas().items():
            schemas.setdefault(name, schema)

        paths: dict[str, PathItem] = {}
        seen: set[tuple[str, str]] = set()
        tag_names: set[str] = set()
        for route in analysis.routes:
            path = convert_path(route.path)
            method = route.method.lower()
            if (method, path) in seen:
                logger.debug("Duplicate route %s %s (%s) skipped", route.method, path, route.handler)
                continue
            if method not in PathItem.model_fields:
                logger.debug("Unsupported method %s for %s skipped", route.method, path)
                continue
            seen.add((method, path))
            item = paths.setdefault(path, PathItem())
            setattr(item, method, build_operation(route, self.heuristics))
            tag_names.update(route.tags)

        document = OpenAPIDocument(
            info=Info(title=self.config.title, description=self.config.description or None, version=self.config.version),
            servers=[Server(url=self.config.server_url, description="Development server")],
            paths=paths,
            components=Components(
                schemas=schemas,
                security_schemes={
                    BEARER_SCHEME: SecurityScheme(
                        type="http",
                        scheme="bearer",
                        bearer_format="JWT",
                        description="Authorization header using Bearer token",
                    ),
                },
            ),
            tags=[Tag(name=name, description=self.heuristics.tag_description(name)) for name in sorted(tag_names)],
        )

        for correction in ReferenceIntegrity(self.config.conflict_policy).repair(document):
            logger.warning(correction)
        for location, message in validate_document(document).items():
            logger.warning("%s: %s", location, message)
        return document
