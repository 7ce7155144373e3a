"""Structural schema model shared by producer and consumer nodes.

A schema is a closed tagged variant discriminated by ``kind``. The JSON dump
of a schema (with its ``kind`` tag) is also the form cached inside node
parameters, so ``parse_schema`` must accept whatever ``dump_schema`` emits.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class SchemaKind(str, Enum):
    """Kind tag of a schema node."""

    object = "object"
    array = "array"
    string = "string"
    number = "number"
    boolean = "boolean"
    null = "null"
    unknown = "unknown"


class SchemaState(str, Enum):
    """How much is known about one side of a node."""

    unknown = "unknown"  # no information available
    pending = "pending"  # discoverable, but not discovered yet
    defined = "defined"


class _SchemaBase(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    description: str | None = None


class ObjectSchema(_SchemaBase):
    """An object with named properties.

    ``open`` means properties not listed in ``properties`` are tolerated.
    """

    kind: Literal["object"] = "object"
    properties: dict[str, "Schema"] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    open: bool = False


class ArraySchema(_SchemaBase):
    kind: Literal["array"] = "array"
    items: "Schema" = Field(default_factory=lambda: UnknownSchema())


class StringSchema(_SchemaBase):
    kind: Literal["string"] = "string"
    format: str | None = None  # date-time, date, email, uri, uuid


class NumberSchema(_SchemaBase):
    kind: Literal["number"] = "number"


class BooleanSchema(_SchemaBase):
    kind: Literal["boolean"] = "boolean"


class NullSchema(_SchemaBase):
    kind: Literal["null"] = "null"


class UnknownSchema(_SchemaBase):
    kind: Literal["unknown"] = "unknown"


Schema = Annotated[
    Union[
        ObjectSchema,
        ArraySchema,
        StringSchema,
        NumberSchema,
        BooleanSchema,
        NullSchema,
        UnknownSchema,
    ],
    Field(discriminator="kind"),
]

ObjectSchema.model_rebuild()
ArraySchema.model_rebuild()

_schema_adapter: TypeAdapter = TypeAdapter(Schema)


def parse_schema(data: Any) -> Schema:
    """Validate a dumped schema (dict or model) back into a Schema.

    Raises:
        pydantic.ValidationError: if data is not a well-formed schema.
    """
    if isinstance(data, _SchemaBase):
        return data
    return _schema_adapter.validate_python(data)


def dump_schema(schema: Schema) -> dict[str, Any]:
    """Dump a schema into its JSON-compatible dict form."""
    return schema.model_dump(mode="json")


def open_object_schema(description: str | None = None) -> ObjectSchema:
    """An object that accepts any properties (pass-through data)."""
    return ObjectSchema(open=True, description=description)
