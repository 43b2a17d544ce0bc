from pathlib import Path

import pytest

from go_openapi_gen.errors import GoSyntaxError
from go_openapi_gen.golang.nodes import (
    AssignStmt, BinaryExpr, CallExpr, CompositeLit, FuncDecl, GenDecl, Ident,
    IfStmt, IndexExpr, MapType, RangeStmt, SelectorExpr, StarExpr, StructType,
    SwitchStmt, TypeSwitchStmt, UnaryExpr,
)
from go_openapi_gen.golang.parser import parse_path, parse_source
from go_openapi_gen.golang.walk import find_all

FIXTURES = Path(__file__).parent / "fixtures"


def _func(source: str, name: str) -> FuncDecl:
    file = parse_source("package p\n" + source)
    return next(d for d in file.decls if isinstance(d, FuncDecl) and d.name.name == name)


def _body_stmt(source: str):
    return _func("func f() {\n" + source + "\n}", "f").body.list[0]


class TestDeclarations:
    def test_package_and_imports(self):
        file = parse_source('package users\n\nimport (\n\t"strconv"\n\tf "github.com/gofiber/fiber/v2"\n)\n')
        assert file.package.name == "users"
        assert [i.path.value for i in file.imports] == ['"strconv"', '"github.com/gofiber/fiber/v2"']
        assert file.imports[1].name.name == "f"

    def test_struct_with_tags_and_embedded_fields(self):
        file = parse_source(
            "package sdk\n"
            "type User struct {\n"
            "\tBase\n"
            "\t*audit.Stamp\n"
            '\tID, OwnerID int `json:"id"`\n'
            '\tTags map[string][]string `json:"tags"`\n'
            "}\n"
        )
        spec = file.decls[0].specs[0]
        fields = spec.type.fields.list
        assert fields[0].names == [] and fields[0].type == Ident("Base")
        assert fields[1].names == [] and isinstance(fields[1].type, StarExpr)
        assert [n.name for n in fields[2].names] == ["ID", "OwnerID"]
        assert fields[2].tag.value == '`json:"id"`'
        assert isinstance(fields[3].type, MapType)

    def test_doc_comments_attach_to_declarations(self):
        file = parse_source(
            "package sdk\n"
            "// User is an account.\n"
            "type User struct {\n"
            "\t// Name shown in the UI.\n"
            "\tName string\n"
            "}\n"
        )
        decl = file.decls[0]
        assert decl.doc == "User is an account."
        assert decl.specs[0].type.fields.list[0].doc == "Name shown in the UI."

    def test_generic_type_declaration(self):
        file = parse_source("package p\ntype Page[T any] struct {\n\tItems []T\n}\ntype Buf [4]byte\n")
        page, buf = (d.specs[0] for d in file.decls)
        assert [f.names[0].name for f in page.type_params.list] == ["T"]
        assert buf.type_params is None

    def test_alias_declaration(self):
        spec = parse_source("package p\ntype ID = string\n").decls[0].specs[0]
        assert spec.assign is True

    def test_grouped_parameters(self):
        func = _func("func f(a, b int, c ...string) (int, error) { return 0, nil }", "f")
        params = func.type.params
        assert params.count() == 3
        assert [n.name for n in params.list[0].names] == ["a", "b"]
        assert len(func.type.results.list) == 2

    def test_method_receiver(self):
        func = _func("func (h *Handler) Get(c *fiber.Ctx) error { return nil }", "Get")
        assert isinstance(func.recv.list[0].type, StarExpr)
        param = func.type.params.list[0]
        assert param.names[0].name == "c"
        assert isinstance(param.type.x, SelectorExpr)

    def test_generic_function(self):
        func = _func("func Map[T, U any](xs []T, f func(T) U) []U { return nil }", "Map")
        assert func.type.type_params.count() == 2

    def test_interface_with_union_constraint(self):
        file = parse_source("package p\ntype Number interface {\n\t~int | ~float64\n\tString() string\n}\n")
        methods = file.decls[0].specs[0].type.methods.list
        assert isinstance(methods[0].type, BinaryExpr)
        assert methods[1].names[0].name == "String"


class TestStatements:
    def test_short_var_with_multiple_results(self):
        stmt = _body_stmt("user, err := svc.GetUser(id)")
        assert isinstance(stmt, AssignStmt)
        assert stmt.tok == ":="
        assert len(stmt.lhs) == 2 and len(stmt.rhs) == 1

    def test_if_with_init(self):
        stmt = _body_stmt("if err := c.BodyParser(&req); err != nil {\n\treturn err\n}")
        assert isinstance(stmt, IfStmt)
        assert isinstance(stmt.init, AssignStmt)
        assert isinstance(stmt.cond, BinaryExpr)

    def test_composite_literal_in_condition_needs_parens(self):
        stmt = _body_stmt("if p == (Point{1, 2}) {\n}")
        assert isinstance(stmt, IfStmt)
        assert stmt.body.list == []

    def test_block_after_condition_is_not_literal(self):
        stmt = _body_stmt("for i := range items {\n\tuse(i)\n}")
        assert isinstance(stmt, RangeStmt)
        assert stmt.key == Ident("i")

    def test_switch_with_cases(self):
        stmt = _body_stmt('switch kind {\ncase "a", "b":\n\tx()\ndefault:\n}')
        assert isinstance(stmt, SwitchStmt)
        assert len(stmt.body.list[0].list) == 2
        assert stmt.body.list[1].list is None

    def test_type_switch(self):
        stmt = _body_stmt("switch v := x.(type) {\ncase int:\n}")
        assert isinstance(stmt, TypeSwitchStmt)

    def test_three_clause_for(self):
        func = _func("func f() {\n\tfor i := 0; i < 3; i++ {\n\t}\n}", "f")
        loop = func.body.list[0]
        assert loop.init is not None and loop.post is not None

    def test_select_defer_go_and_labels(self):
        func = _func(
            "func f() {\n"
            "\tdefer close(ch)\n"
            "\tgo work()\n"
            "loop:\n"
            "\tselect {\n"
            "\tcase v := <-ch:\n"
            "\t\t_ = v\n"
            "\t\tbreak loop\n"
            "\tdefault:\n"
            "\t}\n"
            "}",
            "f",
        )
        assert len(func.body.list) == 3


class TestExpressions:
    def test_chained_call(self):
        stmt = _body_stmt("return c.Status(201).JSON(fiber.Map{\"ok\": true})")
        call = stmt.results[0]
        assert isinstance(call, CallExpr)
        assert call.fun.sel.name == "JSON"
        assert isinstance(call.fun.x, CallExpr)
        assert isinstance(call.args[0], CompositeLit)

    def test_address_of_composite_literal(self):
        stmt = _body_stmt("resp := &sdk.UserResponse{Data: user}")
        value = stmt.rhs[0]
        assert isinstance(value, UnaryExpr) and value.op == "&"
        assert isinstance(value.x, CompositeLit)

    def test_precedence(self):
        stmt = _body_stmt("x := a || b && c == d + e*f")
        expr = stmt.rhs[0]
        assert expr.op == "||"
        assert expr.y.op == "&&"
        assert expr.y.y.op == "=="
        assert expr.y.y.y.op == "+"

    def test_anonymous_struct_variable(self):
        func = _func("func f() {\n\tvar body struct {\n\t\tEmail string\n\t}\n\t_ = body\n}", "f")
        spec = func.body.list[0].decl.specs[0]
        assert isinstance(spec.type, StructType)

    def test_generic_instantiation_and_slices(self):
        stmt = _body_stmt("x := List[int]{}[1:2]")
        assert isinstance(stmt.rhs[0].x.type, IndexExpr)

    def test_function_literal(self):
        stmt = _body_stmt("h := func(c *fiber.Ctx) error {\n\treturn c.JSON(nil)\n}")
        assert len(list(find_all(stmt, CallExpr))) == 1


class TestErrors:
    def test_syntax_error_reports_position(self):
        with pytest.raises(GoSyntaxError) as exc:
            parse_source("package p\nfunc f() {\n\tx := \n}\n", "broken.go")
        assert exc.value.filename == "broken.go"
        assert exc.value.line == 4

    def test_missing_package_clause(self):
        with pytest.raises(GoSyntaxError):
            parse_source("func f() {}")


class TestFixtures:
    def test_parses_every_fixture_file(self):
        for path in sorted((FIXTURES / "goproject").rglob("*.go")):
            file = parse_path(path)
            assert file.decls, path

    def test_handler_declarations(self):
        file = parse_path(FIXTURES / "goproject" / "routes" / "users" / "handlers.go")
        names = [d.name.name for d in file.decls if isinstance(d, FuncDecl)]
        assert names == ["ListUsers", "GetUser", "CreateUser", "DeleteUser", "GetUserPost"]
        assert any(isinstance(d, GenDecl) and d.tok == "type" for d in file.decls)
