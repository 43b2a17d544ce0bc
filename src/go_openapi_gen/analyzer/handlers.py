"""Handler analyzer: infers request, response and query parameters of handlers.

Each handler body is read twice. The first pass records what local
variables hold (declared types, inline structs, service call results,
query values). The second pass classifies every call site and lets the
matching pattern contribute to the HandlerInfo.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from go_openapi_gen.analyzer.declarations import build_fields
from go_openapi_gen.analyzer.models import (
    ERROR_RESPONSE, SENTINEL_RESPONSES, STANDARD_RESPONSE, Analysis, Field,
    HandlerInfo, Model, QueryParameter,
)
from go_openapi_gen.analyzer.naming import OPEN_TYPE, clean_type_name, split_map_type, to_snake_case, type_string
from go_openapi_gen.analyzer.patterns import CallPattern, match_call
from go_openapi_gen.golang.nodes import (
    AssignStmt, BasicLit, BinaryExpr, BlockStmt, CallExpr, CompositeLit,
    DeclStmt, File, FuncDecl, Ident, IfStmt, Node, ParenExpr, SelectorExpr,
    StarExpr, StructType, SwitchStmt, UnaryExpr, unquote,
)
from go_openapi_gen.golang.walk import find_all, walk
from go_openapi_gen.heuristics.loader import Heuristics

logger = logging.getLogger(__name__)

INTEGER_TYPES = {"int", "int8", "int16", "int32", "int64", "uint", "uint8", "uint16", "uint32", "uint64"}
NUMBER_TYPES = {"float32", "float64"}


@dataclass
class Bindings:
    """What the local variables of one handler hold."""

    variable_types: dict[str, str] = field(default_factory=dict)
    anonymous_structs: dict[str, StructType] = field(default_factory=dict)
    service_call_results: dict[str, str] = field(default_factory=dict)
    response_variables: dict[str, str] = field(default_factory=dict)
    new_allocations: dict[str, str] = field(default_factory=dict)
    query_assignments: dict[str, str] = field(default_factory=dict)  # variable -> query name

    def declared_type(self, name: str) -> str | None:
        return self.variable_types.get(name) or self.new_allocations.get(name)


@dataclass
class _Scope:
    body: BlockStmt
    receiver: str
    bindings: Bindings
    info: HandlerInfo


def param_type_for(go_type: str) -> str:
    """Semantic parameter type of a Go field type."""
    go_type = go_type.lstrip("*")
    if go_type.startswith("[]"):
        return "array"
    if go_type in INTEGER_TYPES:
        return "integer"
    if go_type in NUMBER_TYPES:
        return "number"
    if go_type == "bool":
        return "boolean"
    return "string"


def coerce(value: Any, semantic_type: str) -> Any:
    """Convert a string default to ``semantic_type`` when it parses; otherwise keep it."""
    if not isinstance(value, str):
        return value
    try:
        if semantic_type == "integer":
            return int(value)
        if semantic_type == "number":
            return float(value)
    except ValueError:
        return value
    if semantic_type == "boolean" and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def literal_value(expr: Node) -> Any:
    """Python value of a literal argument, or None."""
    if isinstance(expr, BasicLit):
        text = expr.value.replace("_", "")
        try:
            if expr.kind == "INT":
                return int(text, 0)
            if expr.kind == "FLOAT":
                return float(text)
        except ValueError:
            return expr.value
        if expr.kind in ("STRING", "CHAR"):
            return unquote(expr)
        return None
    if isinstance(expr, Ident) and expr.name in ("true", "false"):
        return expr.name == "true"
    if isinstance(expr, UnaryExpr) and expr.op == "-":
        value = literal_value(expr.x)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return -value
    return None


def variable_name(expr: Node) -> str | None:
    """``x`` and ``&x`` both name the variable ``x``."""
    if isinstance(expr, UnaryExpr) and expr.op == "&":
        expr = expr.x
    if isinstance(expr, Ident):
        return expr.name
    return None


class HandlerAnalyzer:
    """Builds HandlerInfo values for the handler functions of a file."""

    def __init__(self, analysis: Analysis, heuristics: Heuristics, sdk_package: str = "sdk"):
        self.analysis = analysis
        self.heuristics = heuristics
        self.sdk_package = sdk_package
        self._dispatch = {
            CallPattern.QUERY_PARSER: self._on_query_parser,
            CallPattern.BODY_PARSER: self._on_body_parser,
            CallPattern.QUERY: self._on_query,
            CallPattern.TYPED_QUERY: self._on_typed_query,
            CallPattern.JSON_RESPONSE: self._on_json_response,
            CallPattern.RESPONSE_HELPER: self._on_response_helper,
        }

    def context_param(self, func: FuncDecl) -> str | None:
        """Name of the context parameter if ``func`` is a handler, else None.

        A handler takes exactly one parameter of type ``*<pkg>.Ctx``. An
        unnamed parameter gives the empty string.
        """
        params = func.type.params
        if func.body is None or params.count() != 1:
            return None
        param = params.list[0]
        typ = param.type
        if not isinstance(typ, StarExpr) or not isinstance(typ.x, SelectorExpr):
            return None
        if typ.x.sel.name not in self.heuristics.context_types:
            return None
        return param.names[0].name if param.names else ""

    def analyze_file(self, file: File) -> dict[str, HandlerInfo]:
        handlers = {}
        for decl in file.decls:
            if not isinstance(decl, FuncDecl):
                continue
            receiver = self.context_param(decl)
            if receiver is not None:
                handlers[decl.name.name] = self.analyze(decl, receiver, file.package.name)
        return handlers

    def analyze(self, func: FuncDecl, receiver: str, package: str = "") -> HandlerInfo:
        info = HandlerInfo(name=func.name.name, package=package)
        scope = _Scope(func.body, receiver, self.collect_bindings(func.body, receiver), info)
        for call in find_all(func.body, CallExpr):
            pattern = match_call(call, receiver, self.heuristics)
            if pattern is not None:
                self._dispatch[pattern](call, scope)
        logger.debug(
            "Handler %s: request=%r response=%r query=%s status=%d",
            info.name, info.request_type, info.response_type,
            [p.name for p in info.query_parameters], info.success_status,
        )
        return info

    # -- pass 1 ---------------------------------------------------------------

    def collect_bindings(self, body: BlockStmt, receiver: str) -> Bindings:
        bindings = Bindings()
        for node in walk(body):
            if isinstance(node, DeclStmt) and node.decl.tok == "var":
                for spec in node.decl.specs:
                    for i, ident in enumerate(spec.names):
                        if spec.type is not None:
                            self._bind_type(bindings, ident.name, spec.type)
                        elif i < len(spec.values):
                            self._bind_value(bindings, ident.name, spec.values[i], receiver)
            elif isinstance(node, AssignStmt) and node.tok in (":=", "="):
                if len(node.lhs) == len(node.rhs):
                    pairs = list(zip(node.lhs, node.rhs))
                elif len(node.rhs) == 1:
                    pairs = [(node.lhs[0], node.rhs[0])]  # resp, err := svc.Get()
                else:
                    continue
                for target, value in pairs:
                    if isinstance(target, Ident) and target.name != "_":
                        self._bind_value(bindings, target.name, value, receiver)
        return bindings

    def _bind_type(self, bindings: Bindings, name: str, typ: Node) -> None:
        if isinstance(typ, StructType):
            bindings.anonymous_structs[name] = typ
            return
        type_name = type_string(typ, self.sdk_package)
        bindings.variable_types[name] = type_name
        if self.heuristics.is_response_like(type_name):
            bindings.response_variables[name] = type_name

    def _bind_value(self, bindings: Bindings, name: str, value: Node, receiver: str) -> None:
        if isinstance(value, UnaryExpr) and value.op == "&":
            value = value.x
        if isinstance(value, CompositeLit):
            if value.type is not None:
                self._bind_type(bindings, name, value.type)
            return
        if not isinstance(value, CallExpr):
            return

        fun = value.fun
        if isinstance(fun, Ident) and fun.name == "new" and len(value.args) == 1:
            arg = value.args[0]
            if isinstance(arg, StructType):
                bindings.anonymous_structs[name] = arg
                return
            type_name = type_string(arg, self.sdk_package)
            bindings.new_allocations[name] = type_name
            if self.heuristics.is_response_like(type_name):
                bindings.response_variables[name] = type_name
            return
        if match_call(value, receiver, self.heuristics) == CallPattern.QUERY:
            bindings.query_assignments[name] = unquote(value.args[0])
            return
        response = self.service_response_type(value)
        if response:
            bindings.service_call_results[name] = response

    def service_response_type(self, call: CallExpr) -> str | None:
        """Response type guessed for ``pr.Users.GetUser(...)`` style calls, else None."""
        fun = call.fun
        if not isinstance(fun, SelectorExpr):
            return None
        chain = [fun.sel.name]
        x = fun.x
        while isinstance(x, SelectorExpr):
            chain.append(x.sel.name)
            x = x.x
        if not isinstance(x, Ident):
            return None
        chain.append(x.name)
        chain.reverse()
        if not self.heuristics.is_service_chain(chain):
            return None
        return self.heuristics.response_type_for_method(fun.sel.name)

    # -- pass 2 ---------------------------------------------------------------

    def _on_query_parser(self, call: CallExpr, scope: _Scope) -> None:
        name = variable_name(call.args[0])
        if name is None:
            return
        bindings = scope.bindings
        if name in bindings.anonymous_structs:
            fields = build_fields(bindings.anonymous_structs[name], self.sdk_package)
        else:
            type_name = bindings.declared_type(name)
            if not type_name:
                return
            fields = self._model_fields(type_name)
            if fields is None:
                logger.debug("Handler %s: query model %r not found", scope.info.name, type_name)
                return
        scope.info.query_parameters.extend(self.query_parameters_from_fields(fields))

    def _model_fields(self, type_name: str) -> list[Field] | None:
        model = self.analysis.models.get(clean_type_name(type_name))
        return model.fields if model is not None else None

    def query_parameters_from_fields(self, fields: list[Field], seen: frozenset = frozenset()) -> list[QueryParameter]:
        """One query parameter per field; embedded models are expanded in place."""
        params = []
        for f in fields:
            if f.embedded and not f.serialization_name:
                key = clean_type_name(f.type)
                nested = self._model_fields(f.type)
                if nested is not None and key not in seen:
                    params.extend(self.query_parameters_from_fields(nested, seen | {key}))
                continue
            query_name = f.query_tag.split(",")[0]
            if query_name == "-" or (f.skipped and not query_name):
                continue
            name = query_name or f.serialization_name or to_snake_case(f.name)
            params.append(QueryParameter(
                name=name,
                type=param_type_for(f.type),
                description=f.description or self.heuristics.param_descriptions.get(name, ""),
                default=self.heuristics.query_defaults.get(name),
                enum=list(self.heuristics.query_enums.get(name, [])),
            ))
        return params

    def _on_body_parser(self, call: CallExpr, scope: _Scope) -> None:
        name = variable_name(call.args[0])
        if name is None:
            return
        info = scope.info
        bindings = scope.bindings
        if name in bindings.anonymous_structs:
            model = Model(
                name=self.heuristics.anonymous_model_name(info.name),
                package=info.package,
                fields=build_fields(bindings.anonymous_structs[name], self.sdk_package),
            )
            info.anonymous_request_model = model
            info.request_type = model.name
            return
        type_name = bindings.declared_type(name)
        if type_name:
            info.request_type = type_name

    def _on_query(self, call: CallExpr, scope: _Scope) -> None:
        name = unquote(call.args[0])
        default = None
        if len(call.args) > 1:
            default = literal_value(call.args[1])
            if default == "":
                default = None
        semantic_type, enum = self.infer_query_type(scope.body, call, name, scope.bindings)
        if not enum:
            enum = list(self.heuristics.query_enums.get(name, []))
        scope.info.query_parameters.append(QueryParameter(
            name=name,
            type=semantic_type,
            default=coerce(default, semantic_type),
            enum=enum,
            description=self.heuristics.param_descriptions.get(name, ""),
        ))

    def infer_query_type(
        self, body: BlockStmt, fetch: CallExpr, name: str, bindings: Bindings,
    ) -> tuple[str, list[str]]:
        """Semantic type (and enum values) of a query value from how the body uses it.

        A conversion or parse call on the value decides first. String
        comparisons in ``if`` conditions and ``switch`` cases give an enum.
        Otherwise the name dictionary guesses.
        """
        variable = next((var for var, query in bindings.query_assignments.items() if query == name), None)

        def is_value(expr: Node) -> bool:
            if expr is fetch:
                return True
            return variable is not None and isinstance(expr, Ident) and expr.name == variable

        enum: list[str] = []
        for node in walk(body):
            if isinstance(node, CallExpr) and node.args and is_value(node.args[0]):
                converted = self._conversion_type(node.fun)
                if converted:
                    return converted, []
            elif variable is None:
                continue
            elif isinstance(node, IfStmt):
                enum.extend(_compared_literals(node.cond, variable))
            elif isinstance(node, SwitchStmt) and isinstance(node.tag, Ident) and node.tag.name == variable:
                for clause in node.body.list:
                    for expr in clause.list or []:
                        if isinstance(expr, BasicLit) and expr.kind == "STRING":
                            enum.append(unquote(expr))

        if enum:
            return "string", list(dict.fromkeys(enum))
        return self.heuristics.type_from_name(name), []

    def _conversion_type(self, fun: Node) -> str | None:
        if isinstance(fun, Ident):
            return self.heuristics.conversions.get(fun.name)
        if isinstance(fun, SelectorExpr) and isinstance(fun.x, Ident):
            if fun.x.name in self.heuristics.parse_packages:
                return self.heuristics.parse_functions.get(fun.sel.name)
        return None

    def _on_typed_query(self, call: CallExpr, scope: _Scope) -> None:
        name = unquote(call.args[0])
        default = literal_value(call.args[1]) if len(call.args) > 1 else None
        scope.info.query_parameters.append(QueryParameter(
            name=name,
            type=self.heuristics.typed_queries[call.fun.sel.name],
            default=default,
            enum=list(self.heuristics.query_enums.get(name, [])),
            description=self.heuristics.param_descriptions.get(name, ""),
        ))

    def _on_json_response(self, call: CallExpr, scope: _Scope) -> None:
        info = scope.info
        response = self.response_type_of(call.args[0], scope.bindings)
        if response:
            self._set_response(info, response)
        status = self._status_code(call.fun.x)
        if status is not None and 200 <= status < 300 and info.success_status == 200:
            info.success_status = status

    def response_type_of(self, arg: Node, bindings: Bindings) -> str | None:
        name = variable_name(arg)
        if name is not None:
            if name in bindings.service_call_results:
                return bindings.service_call_results[name]
            if name in bindings.response_variables:
                return bindings.response_variables[name]
            type_name = bindings.declared_type(name)
            if type_name and self._is_open_map(type_name):
                return STANDARD_RESPONSE
            if type_name and self.heuristics.is_response_like(type_name):
                return type_name
            return None
        if isinstance(arg, UnaryExpr) and arg.op == "&":
            arg = arg.x
        if isinstance(arg, CompositeLit) and arg.type is not None and not isinstance(arg.type, StructType):
            type_name = type_string(arg.type, self.sdk_package)
            if self._is_open_map(type_name):
                return STANDARD_RESPONSE
            return type_name
        return None

    def _is_open_map(self, type_name: str) -> bool:
        if type_name in self.heuristics.open_map_literals:
            return True
        return type_name.startswith("map[") and split_map_type(type_name)[1] in (OPEN_TYPE, "any")

    def _status_code(self, expr: Node) -> int | None:
        """Status of a ``c.Status(201)`` or ``c.Status(fiber.StatusCreated)`` call."""
        if not isinstance(expr, CallExpr) or not expr.args:
            return None
        fun = expr.fun
        if not isinstance(fun, SelectorExpr) or fun.sel.name != self.heuristics.calls.status:
            return None
        arg = expr.args[0]
        if isinstance(arg, BasicLit) and arg.kind == "INT":
            value = literal_value(arg)
            return value if isinstance(value, int) else None
        if isinstance(arg, SelectorExpr):
            return self.heuristics.status_constants.get(arg.sel.name)
        return None

    def _on_response_helper(self, call: CallExpr, scope: _Scope) -> None:
        self._set_response(scope.info, self.heuristics.response_helpers[call.fun.name])

    @staticmethod
    def _set_response(info: HandlerInfo, response: str) -> None:
        current = info.response_type
        # a concrete type is never replaced, and the success envelope beats the error one
        if current and current not in SENTINEL_RESPONSES:
            return
        if current == STANDARD_RESPONSE and response == ERROR_RESPONSE:
            return
        info.response_type = response


def _compared_literals(cond: Node, variable: str) -> list[str]:
    """String literals ``variable`` is compared with, through ``&&``/``||`` chains."""
    while isinstance(cond, ParenExpr):
        cond = cond.x
    if not isinstance(cond, BinaryExpr):
        return []
    if cond.op in ("&&", "||"):
        return _compared_literals(cond.x, variable) + _compared_literals(cond.y, variable)
    if cond.op in ("==", "!="):
        for left, right in ((cond.x, cond.y), (cond.y, cond.x)):
            if isinstance(left, Ident) and left.name == variable and isinstance(right, BasicLit) and right.kind == "STRING":
                # comparing with "" is an emptiness check, not a value
                return [unquote(right)] if unquote(right) else []
    return []
