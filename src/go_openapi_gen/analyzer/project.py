"""Project analyzer: runs the declaration scanner, handler analyzer and route parser."""

import logging
from pathlib import Path

from go_openapi_gen.analyzer.declarations import go_files, parse_go_file, scan_models
from go_openapi_gen.analyzer.handlers import HandlerAnalyzer
from go_openapi_gen.analyzer.models import Analysis, ConflictPolicy, HandlerInfo
from go_openapi_gen.analyzer.routes import RouteParser
from go_openapi_gen.errors import ExtractionError
from go_openapi_gen.heuristics.loader import Heuristics, load_heuristics

logger = logging.getLogger(__name__)


class ProjectAnalyzer:
    """Reads one Go project into an :class:`Analysis`."""

    def __init__(
        self,
        project_path: Path,
        sdk_package: str = "sdk",
        routes_pattern: str = "routes/**/router.go",
        heuristics: Heuristics | None = None,
        conflict_policy: ConflictPolicy = ConflictPolicy.FIRST_WINS,
    ):
        self.project_path = Path(project_path)
        self.sdk_package = sdk_package
        self.routes_pattern = routes_pattern
        self.heuristics = heuristics or load_heuristics()
        self.conflict_policy = ConflictPolicy(conflict_policy)

    @property
    def sdk_dir(self) -> Path:
        return self.project_path / self.sdk_package

    def route_files(self) -> list[Path]:
        try:
            matches = self.project_path.glob(self.routes_pattern)
            return sorted(p for p in matches if p.is_file())
        except (ValueError, NotImplementedError) as e:
            raise ExtractionError(f"Invalid routes pattern {self.routes_pattern!r}: {e}") from e

    def analyze(self) -> Analysis:
        analysis = Analysis()
        if self.sdk_dir.is_dir():
            scan_models(self.sdk_dir, analysis, self.sdk_package, self.conflict_policy)
        else:
            logger.warning("Model directory %s not found, continuing without models", self.sdk_dir)

        handler_analyzer = HandlerAnalyzer(analysis, self.heuristics, self.sdk_package)
        route_parser = RouteParser(analysis, self.heuristics, self.sdk_package, self.conflict_policy)
        handler_tables: dict[Path, dict[str, HandlerInfo]] = {}

        for route_file in self.route_files():
            directory = route_file.parent
            if directory not in handler_tables:
                handler_tables[directory] = self._handlers_in(directory, route_file, handler_analyzer)
            routes = route_parser.parse_file(parse_go_file(route_file), handler_tables[directory], str(directory))
            logger.debug("%s: %d routes", route_file, len(routes))
            analysis.routes.extend(routes)

        return analysis

    @staticmethod
    def _handlers_in(directory: Path, route_file: Path, handler_analyzer: HandlerAnalyzer) -> dict[str, HandlerInfo]:
        handlers: dict[str, HandlerInfo] = {}
        for path in go_files(directory, recursive=False):
            if path == route_file:
                continue
            handlers.update(handler_analyzer.analyze_file(parse_go_file(path)))
        return handlers
