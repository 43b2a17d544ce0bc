"""Route registration parser: reads RegisterRoutes functions into Routes."""

import logging
import re
from dataclasses import dataclass, field

from go_openapi_gen.analyzer.models import (
    SENTINEL_RESPONSES, Analysis, ConflictPolicy, HandlerInfo, Parameter, Route,
)
from go_openapi_gen.analyzer.naming import clean_type_name
from go_openapi_gen.golang.nodes import (
    AssignStmt, BasicLit, CallExpr, File, FuncDecl, Ident, Node, SelectorExpr, unquote,
)
from go_openapi_gen.golang.walk import walk
from go_openapi_gen.heuristics.loader import Heuristics

logger = logging.getLogger(__name__)

PATH_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class RouteGroup:
    prefix: str
    middleware: list[str] = field(default_factory=list)


def path_parameters(path: str) -> list[Parameter]:
    """``/users/:id/posts/:postId`` -> required string path parameters id and postId."""
    return [
        Parameter(name=name, location="path", required=True, type="string")
        for name in dict.fromkeys(PATH_PARAM_RE.findall(path))
    ]


def call_target_name(expr: Node) -> str | None:
    """Dotted name of a middleware argument: ``auth.Protected()`` -> ``auth.Protected``."""
    if isinstance(expr, CallExpr):
        expr = expr.fun
    if isinstance(expr, Ident):
        return expr.name
    if isinstance(expr, SelectorExpr):
        prefix = call_target_name(expr.x)
        return f"{prefix}.{expr.sel.name}" if prefix else expr.sel.name
    return None


def _string_literal(expr: Node) -> str | None:
    if isinstance(expr, BasicLit) and expr.kind == "STRING":
        return unquote(expr)
    return None


class RouteParser:
    """Turns the registration function of route files into Routes.

    One parser serves a whole project so that an anonymous request model
    bound to a handler is registered once and reused by later routes.
    """

    def __init__(
        self,
        analysis: Analysis,
        heuristics: Heuristics,
        sdk_package: str = "sdk",
        conflict_policy: ConflictPolicy = ConflictPolicy.FIRST_WINS,
    ):
        self.analysis = analysis
        self.heuristics = heuristics
        self.sdk_package = sdk_package
        self.conflict_policy = conflict_policy
        self._anonymous_bindings: dict[tuple[str, str], str] = {}

    def parse_file(self, file: File, handlers: dict[str, HandlerInfo], scope: str = "") -> list[Route]:
        """Routes registered by ``file``; ``scope`` identifies the handler table (its directory)."""
        routes = []
        for decl in file.decls:
            if isinstance(decl, FuncDecl) and decl.body is not None \
                    and decl.name.name == self.heuristics.calls.register_routes:
                routes.extend(self._parse_register_function(decl, file.package.name, handlers, scope))
        return routes

    def _parse_register_function(
        self, func: FuncDecl, package: str, handlers: dict[str, HandlerInfo], scope: str,
    ) -> list[Route]:
        base_path = "/" + package
        groups: dict[str, RouteGroup] = {}
        routes = []
        for node in walk(func.body):
            if isinstance(node, AssignStmt):
                self._track_group(node, groups)
            elif isinstance(node, CallExpr):
                route = self._parse_route_call(node, base_path, package, groups, handlers, scope)
                if route is not None:
                    routes.append(route)
        return routes

    def _track_group(self, assign: AssignStmt, groups: dict[str, RouteGroup]) -> None:
        """``v1 := api.Group("/v1", mw)`` inherits api's prefix and middleware."""
        if len(assign.lhs) != 1 or len(assign.rhs) != 1 or not isinstance(assign.lhs[0], Ident):
            return
        call = assign.rhs[0]
        if not isinstance(call, CallExpr) or not isinstance(call.fun, SelectorExpr):
            return
        if call.fun.sel.name != self.heuristics.calls.group or not call.args:
            return
        prefix = _string_literal(call.args[0])
        if prefix is None:
            return
        parent = groups.get(call.fun.x.name) if isinstance(call.fun.x, Ident) else None
        middleware = [name for name in map(call_target_name, call.args[1:]) if name]
        if parent is not None:
            groups[assign.lhs[0].name] = RouteGroup(parent.prefix + prefix, parent.middleware + middleware)
        else:
            groups[assign.lhs[0].name] = RouteGroup(prefix, middleware)

    def _parse_route_call(
        self,
        call: CallExpr,
        base_path: str,
        package: str,
        groups: dict[str, RouteGroup],
        handlers: dict[str, HandlerInfo],
        scope: str,
    ) -> Route | None:
        fun = call.fun
        if not isinstance(fun, SelectorExpr) or len(call.args) < 2:
            return None
        method = fun.sel.name.upper()
        if method not in self.heuristics.http_methods:
            return None
        path = _string_literal(call.args[0])
        if path is None:
            return None

        last = call.args[-1]
        if isinstance(last, Ident):
            handler_name = last.name
        elif isinstance(last, SelectorExpr):
            handler_name = last.sel.name  # h.GetUser
        else:
            return None

        group = groups.get(fun.x.name) if isinstance(fun.x, Ident) else None
        full_path = base_path + (group.prefix if group else "") + path
        middleware = list(group.middleware) if group else []
        middleware += [name for name in map(call_target_name, call.args[1:-1]) if name]

        info = handlers.get(handler_name) or HandlerInfo(name=handler_name, package=package)
        parameters = path_parameters(full_path)
        parameters += [q.to_parameter() for q in info.query_parameters]

        return Route(
            path=full_path,
            method=method,
            handler=handler_name,
            middleware=middleware,
            request_body=self._resolve_request(info, scope),
            response=self._resolve_response(info),
            parameters=parameters,
            tags=[package],
            success_status=info.success_status,
        )

    def _lookup(self, type_name: str) -> str | None:
        candidates = [
            clean_type_name(type_name),
            type_name,
            type_name.lstrip("*"),
            type_name.removeprefix(self.sdk_package + "."),
        ]
        return next((name for name in candidates if name in self.analysis.models), None)

    def _resolve_request(self, info: HandlerInfo, scope: str) -> str | None:
        key = (scope, info.name)
        if key in self._anonymous_bindings:
            return self._anonymous_bindings[key]
        anonymous = info.anonymous_request_model
        if anonymous is not None and info.request_type == anonymous.name:
            return self._register_anonymous(info, key)
        if info.request_type:
            found = self._lookup(info.request_type)
            if found:
                return found
        if anonymous is not None:
            return self._register_anonymous(info, key)
        if info.request_type:
            logger.debug("Request model %r of handler %s not found", info.request_type, info.name)
        return None

    def _register_anonymous(self, info: HandlerInfo, key: tuple[str, str]) -> str | None:
        model = info.anonymous_request_model
        if model.name in self.analysis.models:
            model = model.model_copy(update={"name": info.name + model.name})
        name = self.analysis.register(model, self.conflict_policy)
        if name is not None:
            self._anonymous_bindings[key] = name
        return name

    def _resolve_response(self, info: HandlerInfo) -> str | None:
        if not info.response_type:
            return None
        if info.response_type in SENTINEL_RESPONSES:
            return info.response_type
        found = self._lookup(info.response_type)
        if found is None:
            logger.debug("Response model %r of handler %s not found", info.response_type, info.name)
        return found
