"""Recursive-descent parser for Go source files.

The grammar follows the Go language reference closely enough to read real
application code: declarations, generics, every statement form and the
full expression grammar. The composite-literal ambiguity in control
clauses (``if x == T{}``) is resolved the way go/parser does it, by
tracking the expression nesting level.
"""

from pathlib import Path

from go_openapi_gen.errors import GoSyntaxError
from go_openapi_gen.golang.lexer import Token, tokenize
from go_openapi_gen.golang.nodes import (
    ArrayType, AssignStmt, BasicLit, BinaryExpr, BlockStmt, BranchStmt,
    CallExpr, CaseClause, ChanType, CommClause, CompositeLit, DeclStmt,
    DeferStmt, Ellipsis, EmptyStmt, ExprStmt, Field, FieldList, File,
    ForStmt, FuncDecl, FuncLit, FuncType, GenDecl, GoStmt, Ident, IfStmt,
    ImportSpec, IncDecStmt, IndexExpr, InterfaceType, KeyValueExpr,
    LabeledStmt, MapType, Node, ParenExpr, RangeStmt, ReturnStmt,
    SelectorExpr, SelectStmt, SendStmt, SliceExpr, StarExpr, StructType,
    SwitchStmt, TypeAssertExpr, TypeSpec, TypeSwitchStmt, UnaryExpr,
    ValueSpec,
)

LITERAL_KINDS = {"INT", "FLOAT", "IMAG", "CHAR", "STRING"}

ASSIGN_OPS = {
    ":=", "=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=",
    "<<=", ">>=", "&^=",
}

BINARY_PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3, "<": 3, "<=": 3, ">": 3, ">=": 3,
    "+": 4, "-": 4, "|": 4, "^": 4,
    "*": 5, "/": 5, "%": 5, "<<": 5, ">>": 5, "&": 5, "&^": 5,
}

UNARY_OPS = {"+", "-", "!", "^", "&", "~"}

TYPE_START = {"IDENT", "*", "[", "map", "chan", "func", "struct", "interface", "<-", "("}

# simple statement modes
BASIC = 0
LABEL_OK = 1
RANGE_OK = 2


def parse_source(source: str, filename: str = "<source>") -> File:
    """Parse Go source text into a :class:`File`."""
    return Parser(source, filename).parse_file()


def parse_path(path: Path) -> File:
    """Read and parse a Go file."""
    return parse_source(Path(path).read_text(encoding="utf-8"), str(path))


class Parser:
    """Parses one Go file. Create a new instance per file."""

    def __init__(self, source: str, filename: str = "<source>"):
        self.filename = filename
        self.stream = tokenize(source, filename)
        self.tokens = self.stream.tokens
        self.pos = 0
        self.expr_lev = 0  # < 0: in control clause, >= 0: in expression

    # -- token helpers --------------------------------------------------------

    @property
    def tok(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, n: int = 1) -> Token:
        return self.tokens[min(self.pos + n, len(self.tokens) - 1)]

    def next(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != "EOF":
            self.pos += 1
        return token

    def got(self, kind: str) -> bool:
        if self.tok.kind == kind:
            self.next()
            return True
        return False

    def expect(self, kind: str) -> Token:
        if self.tok.kind != kind:
            self.error(f"expected {kind!r}, found {self._describe(self.tok)}")
        return self.next()

    def expect_semi(self) -> None:
        if self.tok.kind in (")", "}", "EOF"):
            return
        self.expect(";")

    def error(self, message: str):
        raise GoSyntaxError(message, self.filename, self.tok.line)

    @staticmethod
    def _describe(token: Token) -> str:
        if token.kind == "EOF":
            return "EOF"
        if token.kind == ";" and token.value == "\n":
            return "newline"
        return repr(token.value)

    # -- file and declarations ------------------------------------------------

    def parse_file(self) -> File:
        line = self.tok.line
        self.expect("package")
        package = self.parse_ident()
        self.expect_semi()

        imports: list[ImportSpec] = []
        decls: list[Node] = []
        while self.tok.kind == "import":
            decl = self.parse_gen_decl("import", self.parse_import_spec)
            imports.extend(decl.specs)
            decls.append(decl)
            self.expect_semi()

        while self.tok.kind != "EOF":
            decls.append(self.parse_decl())
            self.expect_semi()

        return File(package, imports, decls, filename=self.filename, line=line)

    def parse_decl(self) -> Node:
        kind = self.tok.kind
        if kind in ("const", "var"):
            return self.parse_gen_decl(kind, self.parse_value_spec)
        if kind == "type":
            return self.parse_gen_decl(kind, self.parse_type_spec)
        if kind == "func":
            return self.parse_func_decl()
        self.error(f"expected declaration, found {self._describe(self.tok)}")

    def parse_gen_decl(self, keyword: str, parse_spec) -> GenDecl:
        line = self.tok.line
        doc = self.stream.doc_comment(line)
        self.expect(keyword)
        specs = []
        if self.got("("):
            while self.tok.kind not in (")", "EOF"):
                specs.append(parse_spec())
                self.expect_semi()
            self.expect(")")
        else:
            specs.append(parse_spec())
        return GenDecl(keyword, specs, doc=doc, line=line)

    def parse_import_spec(self) -> ImportSpec:
        line = self.tok.line
        name = None
        if self.tok.kind == "IDENT":
            name = self.parse_ident()
        elif self.tok.kind == ".":
            self.next()
            name = Ident(".", line=line)
        path = self.expect("STRING")
        return ImportSpec(name, BasicLit("STRING", path.value, line=line), line=line)

    def parse_value_spec(self) -> ValueSpec:
        line = self.tok.line
        doc = self.stream.doc_comment(line)
        names = self.parse_ident_list()
        typ = None
        values: list[Node] = []
        if self.tok.kind not in ("=", ";", ")"):
            typ = self.parse_type()
        if self.got("="):
            values = self.parse_expr_list()
        return ValueSpec(names, typ, values, doc=doc, line=line)

    def parse_type_spec(self) -> TypeSpec:
        line = self.tok.line
        doc = self.stream.doc_comment(line)
        name = self.parse_ident()
        type_params = None
        if self.tok.kind == "[" and self._looks_like_type_params():
            type_params = self.parse_parameter_list("[", "]", self.parse_constraint)
        assign = self.got("=")
        typ = self.parse_type()
        return TypeSpec(name, type_params, assign, typ, doc=doc, line=line)

    def _looks_like_type_params(self) -> bool:
        # "type A [N]int" is an array; "type L[T any] ..." declares type parameters.
        if self.peek(1).kind != "IDENT":
            return False
        return self.peek(2).kind not in ("]", "+", "-", "/", "%", "<<", ">>", "&", "&^")

    def parse_func_decl(self) -> FuncDecl:
        line = self.tok.line
        doc = self.stream.doc_comment(line)
        self.expect("func")
        recv = None
        if self.tok.kind == "(":
            recv = self.parse_parameter_list("(", ")")
        name = self.parse_ident()
        type_params = None
        if self.tok.kind == "[":
            type_params = self.parse_parameter_list("[", "]", self.parse_constraint)
        params = self.parse_parameter_list("(", ")")
        results = self.parse_results()
        body = None
        if self.tok.kind == "{":
            body = self.parse_block()
        func_type = FuncType(type_params, params, results, line=line)
        return FuncDecl(recv, name, func_type, body, doc=doc, line=line)

    # -- types ----------------------------------------------------------------

    def parse_ident(self) -> Ident:
        token = self.expect("IDENT")
        return Ident(token.value, line=token.line)

    def parse_ident_list(self) -> list[Ident]:
        names = [self.parse_ident()]
        while self.got(","):
            names.append(self.parse_ident())
        return names

    def parse_type_name(self, allow_args: bool = True) -> Node:
        x: Node = self.parse_ident()
        if self.tok.kind == ".":
            self.next()
            x = SelectorExpr(x, self.parse_ident(), line=x.line)
        if allow_args and self.tok.kind == "[" and self.peek().kind != "]":
            line = self.tok.line
            self.next()
            self.expr_lev += 1
            args = [self.parse_type()]
            while self.got(","):
                if self.tok.kind == "]":
                    break
                args.append(self.parse_type())
            self.expr_lev -= 1
            self.expect("]")
            x = IndexExpr(x, args, line=line)
        return x

    def parse_type(self) -> Node:
        token = self.tok
        kind = token.kind
        line = token.line
        if kind == "IDENT":
            return self.parse_type_name()
        if kind == "*":
            self.next()
            return StarExpr(self.parse_type(), line=line)
        if kind == "[":
            self.next()
            if self.got("]"):
                return ArrayType(None, self.parse_type(), line=line)
            if self.got("..."):
                length: Node = Ellipsis(None, line=line)
            else:
                self.expr_lev += 1
                length = self.parse_expr()
                self.expr_lev -= 1
            self.expect("]")
            return ArrayType(length, self.parse_type(), line=line)
        if kind == "map":
            self.next()
            self.expect("[")
            key = self.parse_type()
            self.expect("]")
            return MapType(key, self.parse_type(), line=line)
        if kind == "chan":
            self.next()
            direction = "send" if self.got("<-") else "both"
            return ChanType(direction, self.parse_type(), line=line)
        if kind == "<-":
            self.next()
            self.expect("chan")
            return ChanType("recv", self.parse_type(), line=line)
        if kind == "func":
            self.next()
            return self.parse_signature(line)
        if kind == "struct":
            return self.parse_struct_type()
        if kind == "interface":
            return self.parse_interface_type()
        if kind == "(":
            self.next()
            typ = self.parse_type()
            self.expect(")")
            return ParenExpr(typ, line=line)
        self.error(f"expected type, found {self._describe(token)}")

    def parse_constraint(self) -> Node:
        x = self._parse_constraint_term()
        while self.tok.kind == "|":
            self.next()
            x = BinaryExpr(x, "|", self._parse_constraint_term(), line=x.line)
        return x

    def _parse_constraint_term(self) -> Node:
        line = self.tok.line
        if self.got("~"):
            return UnaryExpr("~", self.parse_type(), line=line)
        return self.parse_type()

    def parse_struct_type(self) -> StructType:
        line = self.tok.line
        self.expect("struct")
        self.expect("{")
        fields = []
        while self.tok.kind not in ("}", "EOF"):
            fields.append(self.parse_field_decl())
            self.expect_semi()
        self.expect("}")
        return StructType(FieldList(fields, line=line), line=line)

    def parse_field_decl(self) -> Field:
        line = self.tok.line
        doc = self.stream.doc_comment(line)
        if self.tok.kind == "*":
            self.next()
            names: list[Ident] = []
            typ: Node = StarExpr(self.parse_type_name(), line=line)
        elif self.tok.kind == "IDENT" and self.peek().kind in (".", ";", "}", "STRING"):
            names = []
            typ = self.parse_type_name()
        elif self.tok.kind == "IDENT":
            names = self.parse_ident_list()
            typ = self.parse_type()
        else:
            self.error(f"expected field declaration, found {self._describe(self.tok)}")
        tag = None
        if self.tok.kind == "STRING":
            token = self.next()
            tag = BasicLit("STRING", token.value, line=token.line)
        return Field(names, typ, tag, doc=doc, line=line)

    def parse_interface_type(self) -> InterfaceType:
        line = self.tok.line
        self.expect("interface")
        self.expect("{")
        elements = []
        while self.tok.kind not in ("}", "EOF"):
            elem_line = self.tok.line
            doc = self.stream.doc_comment(elem_line)
            if self.tok.kind == "IDENT" and self.peek().kind == "(":
                name = self.parse_ident()
                signature = self.parse_signature(elem_line)
                elements.append(Field([name], signature, doc=doc, line=elem_line))
            else:
                elements.append(Field([], self.parse_constraint(), doc=doc, line=elem_line))
            self.expect_semi()
        self.expect("}")
        return InterfaceType(FieldList(elements, line=line), line=line)

    def parse_signature(self, line: int) -> FuncType:
        params = self.parse_parameter_list("(", ")")
        results = self.parse_results()
        return FuncType(None, params, results, line=line)

    def parse_results(self) -> FieldList | None:
        if self.tok.kind == "(":
            return self.parse_parameter_list("(", ")")
        if self.tok.kind in TYPE_START:
            line = self.tok.line
            return FieldList([Field([], self.parse_type(), line=line)], line=line)
        return None

    def parse_parameter_list(self, open_tok: str, close_tok: str, parse_type=None) -> FieldList:
        """Parse ``(a, b int, c ...string)`` or ``(int, error)`` style lists."""
        parse_type = parse_type or self._parse_param_type
        line = self.tok.line
        self.expect(open_tok)
        entries: list[tuple[Node, Node | None]] = []
        while self.tok.kind not in (close_tok, "EOF"):
            if self.tok.kind == "IDENT":
                first = self.parse_type_name(allow_args=False)
            else:
                first = parse_type()
            second = None
            if self.tok.kind not in (",", close_tok):
                second = parse_type()
            entries.append((first, second))
            if not self.got(","):
                break
        self.expect(close_tok)

        if not any(second is not None for _, second in entries):
            return FieldList([Field([], first, line=first.line) for first, _ in entries], line=line)

        fields = []
        pending: list[Ident] = []
        for first, second in entries:
            if not isinstance(first, Ident):
                self.error("mixed named and unnamed parameters")
            pending.append(first)
            if second is not None:
                fields.append(Field(pending, second, line=pending[0].line))
                pending = []
        if pending:
            self.error("missing parameter type")
        return FieldList(fields, line=line)

    def _parse_param_type(self) -> Node:
        line = self.tok.line
        if self.got("..."):
            return Ellipsis(self.parse_type(), line=line)
        return self.parse_type()

    # -- statements -----------------------------------------------------------

    def parse_block(self) -> BlockStmt:
        line = self.tok.line
        self.expect("{")
        stmts = self.parse_stmt_list()
        self.expect("}")
        return BlockStmt(stmts, line=line)

    def parse_stmt_list(self) -> list[Node]:
        stmts = []
        while self.tok.kind not in ("case", "default", "}", "EOF"):
            stmt = self.parse_stmt()
            if not isinstance(stmt, EmptyStmt):
                stmts.append(stmt)
            if self.tok.kind not in ("}", ")"):
                self.expect(";")
        return stmts

    def parse_stmt(self) -> Node:
        token = self.tok
        kind = token.kind
        line = token.line
        if kind in ("var", "const", "type"):
            return DeclStmt(self.parse_decl(), line=line)
        if kind == "go":
            self.next()
            return GoStmt(self.parse_expr(), line=line)
        if kind == "defer":
            self.next()
            return DeferStmt(self.parse_expr(), line=line)
        if kind == "return":
            self.next()
            results = [] if self.tok.kind in (";", "}") else self.parse_expr_list()
            return ReturnStmt(results, line=line)
        if kind in ("break", "continue", "goto", "fallthrough"):
            self.next()
            label = self.parse_ident() if self.tok.kind == "IDENT" else None
            return BranchStmt(kind, label, line=line)
        if kind == "{":
            return self.parse_block()
        if kind == "if":
            return self.parse_if_stmt()
        if kind == "switch":
            return self.parse_switch_stmt()
        if kind == "select":
            return self.parse_select_stmt()
        if kind == "for":
            return self.parse_for_stmt()
        if kind in (";", "}"):
            return EmptyStmt(line=line)
        return self.parse_simple_stmt(LABEL_OK)

    def parse_simple_stmt(self, mode: int = BASIC) -> Node:
        line = self.tok.line
        if mode == RANGE_OK and self.tok.kind == "range":
            self.next()
            return RangeStmt(None, None, None, self.parse_expr(), BlockStmt([]), line=line)

        lhs = self.parse_expr_list()
        kind = self.tok.kind
        if kind in ASSIGN_OPS:
            self.next()
            if mode == RANGE_OK and self.tok.kind == "range" and kind in (":=", "="):
                self.next()
                x = self.parse_expr()
                value = lhs[1] if len(lhs) > 1 else None
                return RangeStmt(lhs[0], value, kind, x, BlockStmt([]), line=line)
            return AssignStmt(lhs, kind, self.parse_expr_list(), line=line)

        if len(lhs) > 1:
            self.error(f"expected 1 expression, found {len(lhs)}")
        x = lhs[0]
        if kind == ":" and mode == LABEL_OK and isinstance(x, Ident):
            self.next()
            if self.tok.kind == "}":
                return LabeledStmt(x, EmptyStmt(line=line), line=line)
            return LabeledStmt(x, self.parse_stmt(), line=line)
        if kind == "<-":
            self.next()
            return SendStmt(x, self.parse_expr(), line=line)
        if kind in ("++", "--"):
            self.next()
            return IncDecStmt(x, kind, line=line)
        return ExprStmt(x, line=line)

    def parse_if_stmt(self) -> IfStmt:
        line = self.tok.line
        self.expect("if")
        init, cond = self._parse_if_header()
        body = self.parse_block()
        else_ = None
        if self.got("else"):
            if self.tok.kind == "if":
                else_ = self.parse_if_stmt()
            elif self.tok.kind == "{":
                else_ = self.parse_block()
            else:
                self.error("expected if statement or block after else")
        return IfStmt(init, cond, body, else_, line=line)

    def _parse_if_header(self) -> tuple[Node | None, Node]:
        if self.tok.kind == "{":
            self.error("missing condition in if statement")
        prev = self.expr_lev
        self.expr_lev = -1
        init = None
        if self.tok.kind != ";":
            init = self.parse_simple_stmt()
        if self.tok.kind == ";":
            self.next()
            if self.tok.kind == "{":
                self.error("missing condition in if statement")
            cond_stmt = self.parse_simple_stmt()
        else:
            cond_stmt, init = init, None
        self.expr_lev = prev
        if not isinstance(cond_stmt, ExprStmt):
            self.error("cannot use assignment as condition")
        return init, cond_stmt.x

    def parse_switch_stmt(self) -> Node:
        line = self.tok.line
        self.expect("switch")
        prev = self.expr_lev
        self.expr_lev = -1
        init = None
        stmt = None
        if self.tok.kind != "{":
            if self.tok.kind != ";":
                stmt = self.parse_simple_stmt()
            if self.tok.kind == ";":
                self.next()
                init, stmt = stmt, None
                if self.tok.kind != "{":
                    stmt = self.parse_simple_stmt()
        self.expr_lev = prev

        type_switch = _is_type_switch_guard(stmt)
        body_line = self.tok.line
        self.expect("{")
        clauses = []
        while self.tok.kind in ("case", "default"):
            clauses.append(self._parse_case_clause())
        self.expect("}")
        body = BlockStmt(clauses, line=body_line)

        if type_switch:
            return TypeSwitchStmt(init, stmt, body, line=line)
        if stmt is not None and not isinstance(stmt, ExprStmt):
            self.error("switch expression must be an expression")
        tag = stmt.x if stmt is not None else None
        return SwitchStmt(init, tag, body, line=line)

    def _parse_case_clause(self) -> CaseClause:
        line = self.tok.line
        if self.got("case"):
            exprs = self.parse_expr_list()
        else:
            self.expect("default")
            exprs = None
        self.expect(":")
        return CaseClause(exprs, self.parse_stmt_list(), line=line)

    def parse_select_stmt(self) -> SelectStmt:
        line = self.tok.line
        self.expect("select")
        body_line = self.tok.line
        self.expect("{")
        clauses = []
        while self.tok.kind in ("case", "default"):
            clause_line = self.tok.line
            if self.got("case"):
                comm = self.parse_simple_stmt()
            else:
                self.expect("default")
                comm = None
            self.expect(":")
            clauses.append(CommClause(comm, self.parse_stmt_list(), line=clause_line))
        self.expect("}")
        return SelectStmt(BlockStmt(clauses, line=body_line), line=line)

    def parse_for_stmt(self) -> Node:
        line = self.tok.line
        self.expect("for")
        prev = self.expr_lev
        self.expr_lev = -1
        init = cond = post = None
        if self.tok.kind != "{":
            if self.tok.kind != ";":
                cond = self.parse_simple_stmt(RANGE_OK)
            if self.tok.kind == ";":
                self.next()
                init, cond = cond, None
                if self.tok.kind != ";":
                    cond = self.parse_simple_stmt()
                self.expect(";")
                if self.tok.kind != "{":
                    post = self.parse_simple_stmt()
        self.expr_lev = prev
        body = self.parse_block()

        if isinstance(cond, RangeStmt):
            cond.body = body
            return cond
        if cond is not None and not isinstance(cond, ExprStmt):
            self.error("for loop condition must be an expression")
        return ForStmt(init, cond.x if cond is not None else None, post, body, line=line)

    # -- expressions ----------------------------------------------------------

    def parse_expr_list(self) -> list[Node]:
        exprs = [self.parse_expr()]
        while self.got(","):
            exprs.append(self.parse_expr())
        return exprs

    def parse_expr(self) -> Node:
        return self.parse_binary_expr(1)

    def parse_binary_expr(self, min_prec: int) -> Node:
        x = self.parse_unary_expr()
        while True:
            op = self.tok.kind
            prec = BINARY_PRECEDENCE.get(op, 0)
            if prec < min_prec:
                return x
            self.next()
            y = self.parse_binary_expr(prec + 1)
            x = BinaryExpr(x, op, y, line=x.line)

    def parse_unary_expr(self) -> Node:
        token = self.tok
        line = token.line
        if token.kind in UNARY_OPS:
            self.next()
            return UnaryExpr(token.kind, self.parse_unary_expr(), line=line)
        if token.kind == "<-":
            self.next()
            if self.tok.kind == "chan":
                self.next()
                return ChanType("recv", self.parse_type(), line=line)
            return UnaryExpr("<-", self.parse_unary_expr(), line=line)
        if token.kind == "*":
            self.next()
            return StarExpr(self.parse_unary_expr(), line=line)
        return self.parse_primary_expr()

    def parse_primary_expr(self) -> Node:
        x = self.parse_operand()
        while True:
            kind = self.tok.kind
            line = self.tok.line
            if kind == ".":
                self.next()
                if self.tok.kind == "IDENT":
                    x = SelectorExpr(x, self.parse_ident(), line=line)
                elif self.got("("):
                    typ = None if self.got("type") else self.parse_type()
                    self.expect(")")
                    x = TypeAssertExpr(x, typ, line=line)
                else:
                    self.error(f"expected selector or type assertion, found {self._describe(self.tok)}")
            elif kind == "[":
                x = self._parse_index_or_slice(x)
            elif kind == "(":
                x = self._parse_call(x)
            elif kind == "{" and _is_literal_type(x) and (self.expr_lev >= 0 or not _is_type_name(x)):
                x = self._parse_literal_value(x)
            else:
                return x

    def parse_operand(self) -> Node:
        token = self.tok
        kind = token.kind
        line = token.line
        if kind in LITERAL_KINDS:
            self.next()
            return BasicLit(kind, token.value, line=line)
        if kind == "IDENT":
            return self.parse_ident()
        if kind == "(":
            self.next()
            self.expr_lev += 1
            x = self.parse_expr()
            self.expr_lev -= 1
            self.expect(")")
            return ParenExpr(x, line=line)
        if kind == "func":
            self.next()
            func_type = self.parse_signature(line)
            if self.tok.kind == "{":
                self.expr_lev += 1
                body = self.parse_block()
                self.expr_lev -= 1
                return FuncLit(func_type, body, line=line)
            return func_type
        if kind in ("[", "map", "chan", "struct", "interface"):
            return self.parse_type()
        self.error(f"expected operand, found {self._describe(token)}")

    def _parse_index_or_slice(self, x: Node) -> Node:
        line = self.tok.line
        self.expect("[")
        self.expr_lev += 1
        index: list[Node | None] = [None, None, None]
        if self.tok.kind != ":":
            index[0] = self.parse_expr()
        if self.tok.kind == ":":
            colons = 0
            while self.tok.kind == ":" and colons < 2:
                self.next()
                colons += 1
                if self.tok.kind not in (":", "]"):
                    index[colons] = self.parse_expr()
            self.expr_lev -= 1
            self.expect("]")
            return SliceExpr(x, index[0], index[1], index[2], line=line)

        indices = [index[0]]
        while self.got(","):
            if self.tok.kind == "]":
                break
            indices.append(self.parse_expr())
        self.expr_lev -= 1
        self.expect("]")
        return IndexExpr(x, indices, line=line)

    def _parse_call(self, fun: Node) -> CallExpr:
        line = self.tok.line
        self.expect("(")
        self.expr_lev += 1
        args = []
        ellipsis = False
        while self.tok.kind not in (")", "EOF"):
            args.append(self.parse_expr())
            if self.got("..."):
                ellipsis = True
            if not self.got(","):
                break
        self.expr_lev -= 1
        self.expect(")")
        return CallExpr(fun, args, ellipsis, line=line)

    def _parse_literal_value(self, typ: Node | None) -> CompositeLit:
        line = self.tok.line
        self.expect("{")
        self.expr_lev += 1
        elts = []
        while self.tok.kind not in ("}", "EOF"):
            element = self._parse_element()
            if self.got(":"):
                element = KeyValueExpr(element, self._parse_element(), line=element.line)
            elts.append(element)
            if not self.got(","):
                break
        self.expr_lev -= 1
        self.expect("}")
        return CompositeLit(typ, elts, line=line)

    def _parse_element(self) -> Node:
        if self.tok.kind == "{":
            return self._parse_literal_value(None)
        return self.parse_expr()


def _is_type_name(x: Node) -> bool:
    if isinstance(x, Ident):
        return True
    return isinstance(x, SelectorExpr) and isinstance(x.x, Ident)


def _is_literal_type(x: Node) -> bool:
    if _is_type_name(x):
        return True
    if isinstance(x, IndexExpr):
        return _is_type_name(x.x)
    return isinstance(x, (ArrayType, MapType, StructType))


def _is_type_switch_guard(stmt: Node | None) -> bool:
    if isinstance(stmt, ExprStmt):
        x = stmt.x
    elif isinstance(stmt, AssignStmt) and stmt.tok == ":=" and len(stmt.rhs) == 1:
        x = stmt.rhs[0]
    else:
        return False
    return isinstance(x, TypeAssertExpr) and x.type is None
