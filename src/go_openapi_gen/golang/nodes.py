"""Syntax tree nodes for the subset of Go the analyzer reads.

Node and attribute names follow Go's own ``go/ast`` package so that the
analysis code reads the same way the upstream tooling does.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Node:
    line: int = field(default=0, kw_only=True, compare=False, repr=False)


# -- expressions and types ---------------------------------------------------


@dataclass
class Ident(Node):
    name: str


@dataclass
class BasicLit(Node):
    kind: str  # INT / FLOAT / IMAG / CHAR / STRING
    value: str  # raw source text, quotes included


@dataclass
class CompositeLit(Node):
    type: Node | None
    elts: list[Node]


@dataclass
class KeyValueExpr(Node):
    key: Node
    value: Node


@dataclass
class FuncLit(Node):
    type: FuncType
    body: BlockStmt


@dataclass
class ParenExpr(Node):
    x: Node


@dataclass
class SelectorExpr(Node):
    x: Node
    sel: Ident


@dataclass
class IndexExpr(Node):
    x: Node
    indices: list[Node]


@dataclass
class SliceExpr(Node):
    x: Node
    low: Node | None
    high: Node | None
    max: Node | None


@dataclass
class TypeAssertExpr(Node):
    x: Node
    type: Node | None  # None for x.(type)


@dataclass
class CallExpr(Node):
    fun: Node
    args: list[Node]
    ellipsis: bool = False


@dataclass
class StarExpr(Node):
    x: Node


@dataclass
class UnaryExpr(Node):
    op: str
    x: Node


@dataclass
class BinaryExpr(Node):
    x: Node
    op: str
    y: Node


@dataclass
class Ellipsis(Node):
    elt: Node | None


@dataclass
class ArrayType(Node):
    len: Node | None  # None for slices
    elt: Node


@dataclass
class MapType(Node):
    key: Node
    value: Node


@dataclass
class ChanType(Node):
    dir: str  # "both" / "send" / "recv"
    value: Node


@dataclass
class Field(Node):
    names: list[Ident]
    type: Node
    tag: BasicLit | None = None
    doc: str = ""


@dataclass
class FieldList(Node):
    list: list[Field]

    def count(self) -> int:
        """Number of declared entries, counting each name of a grouped field."""
        return sum(max(1, len(f.names)) for f in self.list)


@dataclass
class StructType(Node):
    fields: FieldList


@dataclass
class InterfaceType(Node):
    methods: FieldList


@dataclass
class FuncType(Node):
    type_params: FieldList | None
    params: FieldList
    results: FieldList | None


# -- statements --------------------------------------------------------------


@dataclass
class BadStmt(Node):
    pass


@dataclass
class DeclStmt(Node):
    decl: GenDecl


@dataclass
class EmptyStmt(Node):
    pass


@dataclass
class LabeledStmt(Node):
    label: Ident
    stmt: Node


@dataclass
class ExprStmt(Node):
    x: Node


@dataclass
class SendStmt(Node):
    chan: Node
    value: Node


@dataclass
class IncDecStmt(Node):
    x: Node
    tok: str


@dataclass
class AssignStmt(Node):
    lhs: list[Node]
    tok: str
    rhs: list[Node]


@dataclass
class GoStmt(Node):
    call: Node


@dataclass
class DeferStmt(Node):
    call: Node


@dataclass
class ReturnStmt(Node):
    results: list[Node]


@dataclass
class BranchStmt(Node):
    tok: str
    label: Ident | None


@dataclass
class BlockStmt(Node):
    list: list[Node]


@dataclass
class IfStmt(Node):
    init: Node | None
    cond: Node
    body: BlockStmt
    else_: Node | None


@dataclass
class CaseClause(Node):
    list: list[Node] | None  # None for default
    body: list[Node]


@dataclass
class SwitchStmt(Node):
    init: Node | None
    tag: Node | None
    body: BlockStmt


@dataclass
class TypeSwitchStmt(Node):
    init: Node | None
    assign: Node
    body: BlockStmt


@dataclass
class CommClause(Node):
    comm: Node | None  # None for default
    body: list[Node]


@dataclass
class SelectStmt(Node):
    body: BlockStmt


@dataclass
class ForStmt(Node):
    init: Node | None
    cond: Node | None
    post: Node | None
    body: BlockStmt


@dataclass
class RangeStmt(Node):
    key: Node | None
    value: Node | None
    tok: str | None
    x: Node
    body: BlockStmt


# -- declarations ------------------------------------------------------------


@dataclass
class ImportSpec(Node):
    name: Ident | None
    path: BasicLit


@dataclass
class ValueSpec(Node):
    names: list[Ident]
    type: Node | None
    values: list[Node]
    doc: str = ""


@dataclass
class TypeSpec(Node):
    name: Ident
    type_params: FieldList | None
    assign: bool
    type: Node
    doc: str = ""


@dataclass
class GenDecl(Node):
    tok: str  # import / const / var / type
    specs: list[Node]
    doc: str = ""


@dataclass
class FuncDecl(Node):
    recv: FieldList | None
    name: Ident
    type: FuncType
    body: BlockStmt | None
    doc: str = ""


@dataclass
class File(Node):
    package: Ident
    imports: list[ImportSpec]
    decls: list[Node]
    filename: str = ""


def is_exported(name: str) -> bool:
    return name[:1].isupper()


def unquote(lit: BasicLit) -> str:
    """Strip the delimiters of a string or rune literal."""
    value = lit.value
    if len(value) >= 2 and value[0] in "\"`'" and value[-1] == value[0]:
        return value[1:-1]
    return value
