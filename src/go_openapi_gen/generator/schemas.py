"""Schema synthesis: Go type strings and Models to OpenAPI schemas."""

from go_openapi_gen.analyzer.models import ERROR_RESPONSE, STANDARD_RESPONSE, Field, Model
from go_openapi_gen.analyzer.naming import OPEN_TYPE, clean_type_name, split_map_type
from go_openapi_gen.generator.document import Schema, schema_ref

BUILTIN_TYPES = {
    "string", "bool", "byte", "rune", "error", "any", "interface", OPEN_TYPE,
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    "float32", "float64", "complex64", "complex128",
    "Time", "time.Time",
}

OPEN_TYPES = {OPEN_TYPE, "interface", "any", "json.RawMessage", "RawMessage"}

TEMPORAL_TYPES = {"time.Time", "Time"}

# (type, format) by exact Go type name
PRIMITIVES = {
    "string": ("string", None),
    "bool": ("boolean", None),
    "int": ("integer", "int32"),
    "int8": ("integer", "int32"),
    "int16": ("integer", "int32"),
    "int32": ("integer", "int32"),
    "rune": ("integer", "int32"),
    "uint": ("integer", "int32"),
    "uint8": ("integer", "int32"),
    "uint16": ("integer", "int32"),
    "uint32": ("integer", "int32"),
    "int64": ("integer", "int64"),
    "uint64": ("integer", "int64"),
    "uintptr": ("integer", "int64"),
    "float32": ("number", "float"),
    "float64": ("number", "double"),
    "byte": ("string", "byte"),
    "time.Duration": ("integer", "int64"),
    "uuid.UUID": ("string", "uuid"),
    "decimal.Decimal": ("number", None),
    "primitive.ObjectID": ("string", None),
}

# substring fallback for unexported named types, checked in order
SUBSTRING_PRIMITIVES = [
    ("string", ("string", None)),
    ("int64", ("integer", "int64")),
    ("int32", ("integer", "int32")),
    ("int", ("integer", "int32")),
    ("float64", ("number", "double")),
    ("float32", ("number", "float")),
    ("bool", ("boolean", None)),
]


def is_custom_type(type_name: str) -> bool:
    """Exported, non built-in names become references."""
    name = clean_type_name(type_name)
    if not name or name in BUILTIN_TYPES:
        return False
    return name[0].isascii() and name[0].isupper()


def schema_for_type(go_type: str) -> Schema:
    """Map a Go type string to a schema.

    Precedence: arrays, temporal types, maps, open types, exact
    primitives, custom types (as references), then substring matching on
    the remaining unexported names. Anything else is a generic object.
    """
    go_type = go_type.strip().replace("*", "")

    if go_type.startswith("[]"):
        element = go_type[2:]
        if element in ("byte", "uint8"):
            return Schema(type="string", format="byte")
        return Schema(type="array", items=schema_for_type(element))
    if go_type in TEMPORAL_TYPES:
        return Schema(type="string", format="date-time")
    if go_type.startswith("map["):
        _, value = split_map_type(go_type)
        if value in OPEN_TYPES:
            return Schema(type="object", additional_properties=True)
        return Schema(type="object", additional_properties=schema_for_type(value))
    if go_type in OPEN_TYPES:
        return Schema(type="object", additional_properties=True)
    if go_type in PRIMITIVES:
        schema_type, fmt = PRIMITIVES[go_type]
        return Schema(type=schema_type, format=fmt)
    if is_custom_type(go_type):
        return Schema(ref=schema_ref(clean_type_name(go_type)))

    lowered = go_type.lower()
    for needle, (schema_type, fmt) in SUBSTRING_PRIMITIVES:
        if needle in lowered:
            return Schema(type=schema_type, format=fmt)
    return Schema(type="object")


def schema_for_field(field: Field) -> Schema:
    schema = schema_for_type(field.type)
    if schema.ref is not None:
        return schema
    if field.description:
        schema.description = field.description
    if field.example is not None:
        schema.example = field.example
    return schema


def schema_for_model(model: Model) -> Schema:
    properties: dict[str, Schema] = {}
    required: list[str] = []
    for field in model.fields:
        if field.skipped:
            continue
        name = field.property_name
        properties[name] = schema_for_field(field)
        if field.required and name not in required:
            required.append(name)
    return Schema(
        type="object",
        description=model.description or None,
        properties=properties,
        required=required or None,
    )


def baseline_schemas() -> dict[str, Schema]:
    """Envelope schemas operations fall back to."""
    return {
        ERROR_RESPONSE: Schema(
            type="object",
            properties={
                "message": Schema(type="string", description="Error message"),
                "code": Schema(type="integer", description="Error code"),
            },
        ),
        STANDARD_RESPONSE: Schema(
            type="object",
            properties={
                "success": Schema(type="boolean", description="Indicates if the operation was successful"),
                "message": Schema(type="string", description="Response message"),
                "data": Schema(type="object", description="Response data", additional_properties=True),
            },
        ),
    }
