from pathlib import Path

import pytest

from go_openapi_gen.analyzer.declarations import (
    build_fields, go_files, models_in_file, parse_go_file, parse_tag, scan_models,
)
from go_openapi_gen.analyzer.models import Analysis, ConflictPolicy
from go_openapi_gen.errors import ExtractionError, ModelConflictError
from go_openapi_gen.golang.parser import parse_source

FIXTURES = Path(__file__).parent / "fixtures"
SDK_DIR = FIXTURES / "goproject" / "sdk"


def _struct(source: str):
    file = parse_source("package sdk\n" + source)
    return file.decls[0].specs[0].type


class TestParseTag:
    def test_multiple_keys(self):
        assert parse_tag('json:"id,omitempty" query:"id" validate:"required"') == {
            "json": "id,omitempty",
            "query": "id",
            "validate": "required",
        }

    def test_empty(self):
        assert parse_tag("") == {}


class TestBuildFields:
    def test_required_follows_omitempty(self):
        fields = build_fields(_struct('type T struct {\n\tID int `json:"id"`\n\tName string `json:"name,omitempty"`\n}'))
        assert [(f.name, f.required) for f in fields] == [("ID", True), ("Name", False)]

    def test_untagged_field_is_required(self):
        fields = build_fields(_struct("type T struct {\n\tEmail string\n}"))
        assert fields[0].required is True
        assert fields[0].property_name == "email"

    def test_embedded_field(self):
        fields = build_fields(_struct("type T struct {\n\t*sdk.Base\n\tPagination\n}"))
        assert [f.name for f in fields] == ["*Base", "Pagination"]
        assert all(f.embedded for f in fields)
        assert fields[0].property_name == "base"

    def test_unexported_fields_skipped(self):
        fields = build_fields(_struct("type T struct {\n\tsecret string\n\tPublic string\n}"))
        assert [f.name for f in fields] == ["Public"]

    def test_grouped_names_share_type(self):
        fields = build_fields(_struct('type T struct {\n\tLat, Lng float64 `json:",omitempty"`\n}'))
        assert [(f.name, f.type, f.required) for f in fields] == [("Lat", "float64", False), ("Lng", "float64", False)]

    def test_types_keep_structure(self):
        fields = build_fields(_struct(
            "type T struct {\n"
            "\tA []*sdk.Item\n"
            "\tB map[string][]int\n"
            "\tC time.Time\n"
            "\tD func()\n"
            "}"
        ))
        assert [f.type for f in fields] == ["[]*Item", "map[string][]int", "time.Time", "interface{}"]

    def test_example_and_description(self):
        fields = build_fields(_struct('type T struct {\n\t// Unique id.\n\tID string `json:"id" example:"u_1"`\n}'))
        assert fields[0].description == "Unique id."
        assert fields[0].example == "u_1"


class TestModelsInFile:
    def test_only_exported_structs(self):
        file = parse_source(
            "package sdk\n"
            "type User struct{}\n"
            "type internal struct{}\n"
            "type Status string\n"
            "type Alias = User\n"
        )
        assert [m.name for m in models_in_file(file)] == ["User"]

    def test_description_from_doc(self):
        file = parse_source("package sdk\n// User is an account.\ntype User struct{}\n")
        model = models_in_file(file)[0]
        assert model.description == "User is an account."
        assert model.package == "sdk"


class TestGoFiles:
    def test_skips_test_files(self):
        names = [p.name for p in go_files(SDK_DIR)]
        assert names == ["filters.go", "post.go", "user.go"]

    def test_non_recursive(self, tmp_path):
        (tmp_path / "a.go").write_text("package a\n")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.go").write_text("package sub\n")
        assert [p.name for p in go_files(tmp_path, recursive=False)] == ["a.go"]
        assert [p.name for p in go_files(tmp_path)] == ["a.go", "b.go"]


class TestScanModels:
    def test_fixture_models(self):
        analysis = Analysis()
        added = scan_models(SDK_DIR, analysis)
        assert added == 7
        assert set(analysis.models) == {
            "User", "UserResponse", "UsersListResponse", "Pagination", "ListFilter", "Post", "PostResult",
        }
        assert "TestOnly" not in analysis.models

    def test_user_fields(self):
        analysis = Analysis()
        scan_models(SDK_DIR, analysis)
        user = analysis.models["User"]
        assert [f.name for f in user.fields] == ["ID", "Name", "Profile"]
        assert user.fields[2].type == "*Profile"
        assert user.fields[2].description == "Profile is loaded on demand."
        assert user.description == "User is a registered account."

    def _write_conflict(self, root: Path) -> None:
        (root / "a").mkdir()
        (root / "b").mkdir()
        (root / "a" / "item.go").write_text("package a\ntype Item struct {\n\tA string\n}\n")
        (root / "b" / "item.go").write_text("package b\ntype Item struct {\n\tB string\n}\n")

    def test_conflict_first_wins(self, tmp_path):
        self._write_conflict(tmp_path)
        analysis = Analysis()
        assert scan_models(tmp_path, analysis) == 1
        assert analysis.models["Item"].package == "a"

    def test_conflict_rename(self, tmp_path):
        self._write_conflict(tmp_path)
        analysis = Analysis()
        assert scan_models(tmp_path, analysis, policy=ConflictPolicy.RENAME) == 2
        assert analysis.models["BItem"].fields[0].name == "B"
        assert analysis.models["BItem"].name == "BItem"

    def test_conflict_error(self, tmp_path):
        self._write_conflict(tmp_path)
        with pytest.raises(ModelConflictError):
            scan_models(tmp_path, Analysis(), policy=ConflictPolicy.ERROR)


class TestParseGoFile:
    def test_syntax_error_becomes_extraction_error(self, tmp_path):
        path = tmp_path / "bad.go"
        path.write_text("package bad\nfunc {\n")
        with pytest.raises(ExtractionError, match="bad.go"):
            parse_go_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExtractionError):
            parse_go_file(tmp_path / "missing.go")

    def test_leading_byte_order_mark(self, tmp_path):
        (tmp_path / "user.go").write_bytes(
            b"\xef\xbb\xbfpackage sdk\n\ntype User struct {\n\tID int `json:\"id\"`\n}\n"
        )
        analysis = Analysis()
        scan_models(tmp_path, analysis)
        assert list(analysis.models) == ["User"]
        assert [f.property_name for f in analysis.models["User"].fields] == ["id"]
