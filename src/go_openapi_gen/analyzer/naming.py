"""Name and type-string helpers shared by the analyzer and the generator."""

import re
from collections.abc import Container

from go_openapi_gen.golang.nodes import (
    ArrayType, Ellipsis, Ident, IndexExpr, InterfaceType, MapType, Node,
    ParenExpr, SelectorExpr, StarExpr,
)

OPEN_TYPE = "interface{}"

_SNAKE_RE = re.compile(r"([a-z0-9])([A-Z])")


def to_snake_case(name: str) -> str:
    """UserID -> user_id, createdAt -> created_at; snake_case input is kept."""
    if "_" in name and name.lower() == name:
        return name
    return _SNAKE_RE.sub(r"\1_\2", name).lower()


def clean_type_name(type_name: str) -> str:
    """Strip pointer markers and the package qualifier: ``*sdk.User`` -> ``User``."""
    return type_name.replace("*", "").rsplit(".", 1)[-1]


def title(word: str) -> str:
    return word[:1].upper() + word[1:]


def unique_name(name: str, taken: Container, qualifier: str = "") -> str:
    """Pick a name not in ``taken``: package-qualified first, then numbered."""
    if name not in taken:
        return name
    if qualifier:
        qualified = title(qualifier) + name
        if qualified not in taken:
            return qualified
    n = 2
    while f"{name}{n}" in taken:
        n += 1
    return f"{name}{n}"


def type_string(expr: Node | None, sdk_package: str = "sdk") -> str:
    """Render a Go type expression as a type string.

    Array, map, pointer and qualified structure is preserved. Types of the
    model package lose their qualifier; anything that cannot be described as
    data (func, chan, inline struct) becomes ``interface{}``.
    """
    if isinstance(expr, Ident):
        return expr.name
    if isinstance(expr, SelectorExpr):
        if isinstance(expr.x, Ident):
            if expr.x.name == sdk_package:
                return expr.sel.name
            return f"{expr.x.name}.{expr.sel.name}"
        return f"{type_string(expr.x, sdk_package)}.{expr.sel.name}"
    if isinstance(expr, StarExpr):
        return "*" + type_string(expr.x, sdk_package)
    if isinstance(expr, ArrayType):
        return "[]" + type_string(expr.elt, sdk_package)
    if isinstance(expr, Ellipsis) and expr.elt is not None:
        return "[]" + type_string(expr.elt, sdk_package)
    if isinstance(expr, MapType):
        return f"map[{type_string(expr.key, sdk_package)}]{type_string(expr.value, sdk_package)}"
    if isinstance(expr, IndexExpr):
        # generic instantiation: List[T] reads as List
        return type_string(expr.x, sdk_package)
    if isinstance(expr, ParenExpr):
        return type_string(expr.x, sdk_package)
    if isinstance(expr, InterfaceType):
        return OPEN_TYPE
    return OPEN_TYPE


def split_map_type(type_name: str) -> tuple[str, str]:
    """``map[string][]Item`` -> ``("string", "[]Item")``, honoring nested brackets."""
    depth = 0
    for i in range(4, len(type_name)):
        ch = type_name[i]
        if ch == "[":
            depth += 1
        elif ch == "]":
            if depth == 0:
                return type_name[4:i], type_name[i + 1:].strip() or OPEN_TYPE
            depth -= 1
    return "string", OPEN_TYPE
