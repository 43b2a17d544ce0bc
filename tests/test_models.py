import pytest

from go_openapi_gen.analyzer.models import (
    Analysis, ConflictPolicy, Field, HandlerInfo, Model, QueryParameter, Route,
)
from go_openapi_gen.analyzer.naming import (
    clean_type_name, split_map_type, to_snake_case, unique_name,
)
from go_openapi_gen.errors import ModelConflictError


class TestField:
    def test_serialization_name(self):
        assert Field(name="ID", type="int", json_tag="id,omitempty").serialization_name == "id"
        assert Field(name="ID", type="int", json_tag=",omitempty").serialization_name is None
        assert Field(name="ID", type="int", json_tag="-").serialization_name is None

    def test_skipped(self):
        assert Field(name="X", type="string", json_tag="-").skipped
        assert not Field(name="X", type="string", json_tag="-,").skipped

    def test_property_name(self):
        assert Field(name="CreatedAt", type="time.Time").property_name == "created_at"
        assert Field(name="UserID", type="string").property_name == "user_id"
        assert Field(name="Name", type="string", json_tag="display_name").property_name == "display_name"
        assert Field(name="*sdk.Base", type="*sdk.Base", embedded=True).property_name == "base"


class TestQueryParameter:
    def test_to_parameter(self):
        param = QueryParameter(name="limit", type="integer", default=20).to_parameter()
        assert param.location == "query"
        assert (param.name, param.type, param.default, param.required) == ("limit", "integer", 20, False)


class TestHandlerInfo:
    def test_defaults(self):
        info = HandlerInfo(name="GetUser")
        assert info.request_type == ""
        assert info.success_status == 200
        assert info.anonymous_request_model is None


class TestRoute:
    def test_defaults(self):
        route = Route(path="/users/:id", method="GET", handler="GetUser")
        assert route.middleware == []
        assert route.request_body is None
        assert route.success_status == 200


class TestAnalysisRegister:
    def test_new_model(self):
        analysis = Analysis()
        assert analysis.register(Model(name="User", package="sdk")) == "User"

    def test_first_wins(self):
        analysis = Analysis()
        analysis.register(Model(name="User", package="sdk"))
        assert analysis.register(Model(name="User", package="admin")) is None
        assert analysis.models["User"].package == "sdk"

    def test_rename_prefers_package_qualifier(self):
        analysis = Analysis()
        analysis.register(Model(name="User", package="sdk"))
        assert analysis.register(Model(name="User", package="admin"), ConflictPolicy.RENAME) == "AdminUser"
        assert analysis.models["AdminUser"].name == "AdminUser"

    def test_rename_falls_back_to_number(self):
        analysis = Analysis()
        analysis.register(Model(name="User", package="sdk"))
        analysis.register(Model(name="User", package="sdk"), ConflictPolicy.RENAME)
        assert list(analysis.models) == ["User", "SdkUser"]
        assert analysis.register(Model(name="User", package="sdk"), ConflictPolicy.RENAME) == "User2"

    def test_error_policy(self):
        analysis = Analysis()
        analysis.register(Model(name="User", package="sdk"))
        with pytest.raises(ModelConflictError, match="User"):
            analysis.register(Model(name="User", package="admin"), ConflictPolicy.ERROR)

    def test_policy_values(self):
        assert [p.value for p in ConflictPolicy] == ["first-wins", "rename", "error"]


class TestNaming:
    def test_to_snake_case(self):
        assert to_snake_case("UserID") == "user_id"
        assert to_snake_case("createdAt") == "created_at"
        assert to_snake_case("already_snake") == "already_snake"
        assert to_snake_case("ID") == "id"

    def test_clean_type_name(self):
        assert clean_type_name("*sdk.User") == "User"
        assert clean_type_name("User") == "User"

    def test_unique_name(self):
        assert unique_name("User", {}) == "User"
        assert unique_name("User", {"User"}, qualifier="admin") == "AdminUser"
        assert unique_name("User", {"User", "User2"}) == "User3"

    def test_split_map_type(self):
        assert split_map_type("map[string]int") == ("string", "int")
        assert split_map_type("map[string][]Item") == ("string", "[]Item")
        assert split_map_type("map[Key[int]]map[string]bool") == ("Key[int]", "map[string]bool")
