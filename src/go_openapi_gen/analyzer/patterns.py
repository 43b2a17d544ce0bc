"""Recognized call patterns inside handler bodies."""

from enum import Enum

from go_openapi_gen.golang.nodes import BasicLit, CallExpr, Ident, Node, SelectorExpr
from go_openapi_gen.heuristics.loader import Heuristics


class CallPattern(Enum):
    QUERY_PARSER = "query_parser"  # c.QueryParser(&filter)
    BODY_PARSER = "body_parser"  # c.BodyParser(&req)
    QUERY = "query"  # c.Query("page", "1")
    TYPED_QUERY = "typed_query"  # c.QueryInt("limit", 10)
    JSON_RESPONSE = "json_response"  # c.JSON(resp), c.Status(201).JSON(resp)
    RESPONSE_HELPER = "response_helper"  # createSuccessResponse(...)


def root_ident(expr: Node) -> Ident | None:
    """Innermost identifier of a selector/call chain: ``c.Status(201).JSON`` -> ``c``."""
    while True:
        if isinstance(expr, Ident):
            return expr
        if isinstance(expr, SelectorExpr):
            expr = expr.x
        elif isinstance(expr, CallExpr):
            expr = expr.fun
        else:
            return None


def match_call(call: CallExpr, receiver: str, heuristics: Heuristics) -> CallPattern | None:
    """Classify one call site; ``receiver`` is the name of the handler's context parameter."""
    fun = call.fun
    if isinstance(fun, Ident):
        if fun.name in heuristics.response_helpers:
            return CallPattern.RESPONSE_HELPER
        return None
    if not isinstance(fun, SelectorExpr) or not receiver:
        return None

    name = fun.sel.name
    calls = heuristics.calls
    on_receiver = isinstance(fun.x, Ident) and fun.x.name == receiver
    if on_receiver and call.args:
        if name == calls.query_parser:
            return CallPattern.QUERY_PARSER
        if name == calls.body_parser:
            return CallPattern.BODY_PARSER
        if isinstance(call.args[0], BasicLit) and call.args[0].kind == "STRING":
            if name == calls.query:
                return CallPattern.QUERY
            if name in heuristics.typed_queries:
                return CallPattern.TYPED_QUERY
    if name == calls.json_response and call.args:
        root = root_ident(fun.x)
        if root is not None and root.name == receiver:
            return CallPattern.JSON_RESPONSE
    return None
