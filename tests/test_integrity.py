import pytest

from go_openapi_gen.analyzer.models import ConflictPolicy
from go_openapi_gen.errors import ModelConflictError
from go_openapi_gen.generator.document import (
    Components, Info, MediaType, OpenAPIDocument, Operation, Parameter, PathItem,
    RequestBody, Response, Schema, schema_ref,
)
from go_openapi_gen.generator.integrity import ReferenceIntegrity, canonical_name, path_template_names


def _ref(name: str) -> Schema:
    return Schema(ref=schema_ref(name))


def _document(schemas: dict, paths: dict | None = None) -> OpenAPIDocument:
    return OpenAPIDocument(
        info=Info(title="t", version="1"),
        paths=paths or {},
        components=Components(schemas=schemas),
    )


def _operation(parameters=None, body=None, response=None) -> Operation:
    content = {"application/json": MediaType(schema_=response)} if response is not None else None
    return Operation(
        parameters=parameters,
        request_body=RequestBody(content={"application/json": MediaType(schema_=body)}) if body is not None else None,
        responses={"200": Response(description="ok", content=content)},
    )


def _path_param(name: str, required: bool = True) -> Parameter:
    return Parameter(name=name, location="path", required=required, schema_=Schema(type="string"))


class TestCanonicalName:
    def test_names(self):
        assert canonical_name("*sdk.User") == "User"
        assert canonical_name("User-Response") == "UserResponse"
        assert canonical_name("1st") == "Schema1st"
        assert canonical_name("***") == "UnknownSchema"

    def test_path_template_names(self):
        assert path_template_names("/users/{id}/posts/{postId}/{id}") == ["id", "postId"]


class TestDanglingReferences:
    def test_dangling_reference_becomes_open_object(self):
        doc = _document(
            {"User": Schema(type="object", properties={"profile": _ref("Profile"), "id": Schema(type="integer")})},
        )
        corrections = ReferenceIntegrity().repair(doc)
        profile = doc.components.schemas["User"].properties["profile"]
        assert profile.ref is None
        assert profile.type == "object"
        assert profile.additional_properties is True
        assert len(corrections) == 1
        assert "Profile" in corrections[0]

    def test_nested_references(self):
        doc = _document({
            "Page": Schema(type="object", properties={
                "items": Schema(type="array", items=_ref("Missing")),
                "index": Schema(type="object", additional_properties=_ref("Item")),
            }),
            "Item": Schema(type="object"),
        })
        ReferenceIntegrity().repair(doc)
        page = doc.components.schemas["Page"]
        assert page.properties["items"].items.type == "object"
        assert page.properties["index"].additional_properties.ref == schema_ref("Item")

    def test_operation_references(self):
        doc = _document(
            {"User": Schema(type="object")},
            {"/users": PathItem(post=_operation(body=_ref("Ghost"), response=_ref("User")))},
        )
        ReferenceIntegrity().repair(doc)
        op = doc.paths["/users"].post
        assert op.request_body.content["application/json"].schema_.additional_properties is True
        assert op.responses["200"].content["application/json"].schema_.ref == schema_ref("User")

    def test_case_insensitive_match(self):
        doc = _document({"UserResponse": Schema(type="object"), "Box": Schema(type="object", properties={"u": _ref("userresponse")})})
        ReferenceIntegrity().repair(doc)
        assert doc.components.schemas["Box"].properties["u"].ref == schema_ref("UserResponse")

    def test_resolved_reference_loses_siblings(self):
        doc = _document({"User": Schema(type="object"), "Box": Schema(type="object", properties={
            "u": Schema(ref=schema_ref("User"), description="stray"),
        })})
        ReferenceIntegrity().repair(doc)
        assert doc.components.schemas["Box"].properties["u"] == _ref("User")

    def test_consistent_document_is_untouched(self):
        doc = _document({"User": Schema(type="object")}, {"/users/{id}": PathItem(get=_operation([_path_param("id")], response=_ref("User")))})
        before = doc.to_dict()
        assert ReferenceIntegrity().repair(doc) == []
        assert doc.to_dict() == before


class TestCanonicalize:
    def test_rename_to_canonical_and_follow_references(self):
        doc = _document({
            "sdk.User": Schema(type="object"),
            "Box": Schema(type="object", properties={"u": _ref("sdk.User")}),
        })
        ReferenceIntegrity().repair(doc)
        assert list(doc.components.schemas) == ["User", "Box"]
        assert doc.components.schemas["Box"].properties["u"].ref == schema_ref("User")

    def test_collision_first_wins(self):
        doc = _document({
            "User": Schema(type="object", description="first"),
            "*User": Schema(type="object", description="second"),
            "Box": Schema(type="object", properties={"u": _ref("*User")}),
        })
        ReferenceIntegrity(ConflictPolicy.FIRST_WINS).repair(doc)
        schemas = doc.components.schemas
        assert list(schemas) == ["User", "Box"]
        assert schemas["User"].description == "first"
        assert schemas["Box"].properties["u"].ref == schema_ref("User")

    def test_collision_rename(self):
        doc = _document({
            "User": Schema(type="object"),
            "*User": Schema(type="object", description="second"),
        })
        ReferenceIntegrity(ConflictPolicy.RENAME).repair(doc)
        assert doc.components.schemas["User2"].description == "second"

    def test_collision_error(self):
        doc = _document({"User": Schema(type="object"), "*User": Schema(type="object")})
        with pytest.raises(ModelConflictError):
            ReferenceIntegrity(ConflictPolicy.ERROR).repair(doc)


class TestPathParameters:
    def test_missing_parameters_are_added(self):
        doc = _document({}, {"/users/{id}/posts/{postId}": PathItem(get=_operation([_path_param("id")]))})
        corrections = ReferenceIntegrity().repair(doc)
        params = doc.paths["/users/{id}/posts/{postId}"].get.parameters
        assert [(p.name, p.location, p.required, p.schema_.type) for p in params] == [
            ("id", "path", True, "string"),
            ("postId", "path", True, "string"),
        ]
        assert corrections == ["GET /users/{id}/posts/{postId}: added missing path parameter 'postId'"]

    def test_extra_and_duplicate_parameters_are_removed(self):
        query = Parameter(name="q", location="query", schema_=Schema(type="string"))
        doc = _document({}, {"/users/{id}": PathItem(delete=_operation([
            _path_param("id"), _path_param("id"), _path_param("userId"), query,
        ]))})
        ReferenceIntegrity().repair(doc)
        params = doc.paths["/users/{id}"].delete.parameters
        assert [(p.name, p.location) for p in params] == [("id", "path"), ("q", "query")]

    def test_path_parameters_forced_required(self):
        doc = _document({}, {"/users/{id}": PathItem(get=_operation([_path_param("id", required=False)]))})
        ReferenceIntegrity().repair(doc)
        assert doc.paths["/users/{id}"].get.parameters[0].required is True

    def test_no_parameters_stays_none(self):
        doc = _document({}, {"/users": PathItem(get=_operation())})
        ReferenceIntegrity().repair(doc)
        assert doc.paths["/users"].get.parameters is None
