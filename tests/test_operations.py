from go_openapi_gen.analyzer.models import Parameter, Route
from go_openapi_gen.generator.operations import (
    build_operation, convert_path, operation_id, parameter_schema, summary,
)
from go_openapi_gen.heuristics.loader import load_heuristics


def _make_route(**overrides) -> Route:
    defaults = dict(path="/users/:id", method="GET", handler="GetUser", tags=["users"])
    defaults.update(overrides)
    return Route(**defaults)


def _dump(operation) -> dict:
    return operation.model_dump(by_alias=True, exclude_none=True)


class TestPaths:
    def test_convert_path(self):
        assert convert_path("/users/:id/posts/:postId") == "/users/{id}/posts/{postId}"
        assert convert_path("/users/") == "/users"
        assert convert_path("/users//admin/") == "/users/admin"
        assert convert_path("/") == "/"

    def test_operation_id(self):
        assert operation_id("GET", "/users/:id") == "get_users_id"
        assert operation_id("POST", "/knowledge-base/") == "post_knowledge_base"

    def test_summary(self):
        assert summary("GET", "/users/:id") == "Get Users"
        assert summary("POST", "/users/:id/posts") == "Create Posts"
        assert summary("OPTIONS", "/:id") == "OPTIONS Resource"


class TestParameterSchema:
    def test_types(self):
        assert parameter_schema(Parameter(name="n", location="query", type="integer")).format == "int32"
        assert parameter_schema(Parameter(name="n", location="query", type="number")).format == "double"
        assert parameter_schema(Parameter(name="n", location="query", type="boolean")).type == "boolean"
        schema = parameter_schema(Parameter(name="n", location="query", type="array"))
        assert schema.items.type == "string"

    def test_enum_and_default(self):
        schema = parameter_schema(Parameter(name="sort_order", location="query", enum=["asc", "desc"], default="asc"))
        assert schema.enum == ["asc", "desc"]
        assert schema.default == "asc"

    def test_false_default_is_kept(self):
        schema = parameter_schema(Parameter(name="f", location="query", type="boolean", default=False))
        assert schema.default is False


class TestBuildOperation:
    def test_basic_operation(self):
        route = _make_route(response="UserResponse", parameters=[
            Parameter(name="id", location="path", required=True),
        ])
        op = _dump(build_operation(route, load_heuristics()))
        assert op["operationId"] == "get_users_id"
        assert op["tags"] == ["users"]
        assert op["description"] == "GetUser handler for get /users/:id"
        assert op["parameters"] == [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}]
        assert op["responses"]["200"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/UserResponse",
        }
        assert op["responses"]["400"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorResponse",
        }
        assert "500" in op["responses"]
        assert "requestBody" not in op
        assert "security" not in op

    def test_request_body_and_status(self):
        route = _make_route(method="POST", path="/users", request_body="CreateUserRequest", success_status=201)
        op = _dump(build_operation(route, load_heuristics()))
        assert op["requestBody"]["required"] is True
        assert op["requestBody"]["content"]["application/json"]["schema"]["$ref"].endswith("/CreateUserRequest")
        assert list(op["responses"]) == ["201", "400", "500"]
        assert "content" not in op["responses"]["201"]

    def test_duplicate_parameters_first_wins(self):
        route = _make_route(parameters=[
            Parameter(name="limit", location="query", type="integer", default=20),
            Parameter(name="limit", location="query", type="integer", default=100),
            Parameter(name="limit", location="header"),
        ])
        op = build_operation(route, load_heuristics())
        assert [(p.name, p.location, p.schema_.default) for p in op.parameters] == [
            ("limit", "query", 20),
            ("limit", "header", None),
        ]

    def test_auth_middleware_adds_security(self):
        route = _make_route(middleware=["auth.Protected"])
        op = _dump(build_operation(route, load_heuristics()))
        assert op["security"] == [{"bearerAuth": []}]

    def test_other_middleware_has_no_security(self):
        route = _make_route(middleware=["logger.New"])
        assert build_operation(route, load_heuristics()).security is None
