from __future__ import annotations

import pytest

pytest.importorskip("google.protobuf")

from proto2py import model
from proto2py.defaults import (
    default_holder,
    default_holder_name,
    getter_default,
    has_nontrivial_default,
    storage_default,
)
from proto2py.type_mapper import TypeMapper

_MODULE = "example.person_pb"


def _message() -> model.Message:
    return model.Message(
        name="Person",
        full_name="example.Person",
        ident=model.NativeIdent(name="Person", module=_MODULE),
    )


def _color() -> model.Enum:
    return model.Enum(
        name="Color",
        full_name="example.Color",
        ident=model.NativeIdent(name="Color", module=_MODULE),
        values=[
            model.EnumValue(name="RED", number=0),
            model.EnumValue(name="GREEN", number=1),
        ],
        package="example",
    )


def _field(
    kind: model.FieldKind,
    *,
    name: str = "value",
    default_value: str | None = None,
    cardinality: model.FieldCardinality = model.FieldCardinality.OPTIONAL,
    syntax: model.Syntax = model.Syntax.PROTO2,
    resolved_type: model.ProtoType | None = None,
) -> model.Field:
    return model.Field(
        name=name,
        number=1,
        cardinality=cardinality,
        kind=kind,
        native_name=name,
        camel_name=name.title().replace("_", ""),
        default_value=default_value,
        syntax=syntax,
        resolved_type=resolved_type,
    )


def test_empty_string_and_bytes_defaults_are_trivial() -> None:
    assert not has_nontrivial_default(_field(model.FieldKind.STRING, default_value=""))
    assert not has_nontrivial_default(_field(model.FieldKind.BYTES, default_value=""))
    assert not has_nontrivial_default(_field(model.FieldKind.INT32))
    assert has_nontrivial_default(_field(model.FieldKind.STRING, default_value="x"))
    assert has_nontrivial_default(_field(model.FieldKind.INT32, default_value="0"))


def test_default_holder_name() -> None:
    field = _field(model.FieldKind.STRING, name="nick_name", default_value="x")

    assert default_holder_name(_message(), field) == "Default_Person_NickName"


@pytest.mark.parametrize(
    ("kind", "text", "expression", "uses_math"),
    [
        (model.FieldKind.DOUBLE, "-inf", "-math.inf", True),
        (model.FieldKind.DOUBLE, "inf", "math.inf", True),
        (model.FieldKind.DOUBLE, "nan", "math.nan", True),
        (model.FieldKind.FLOAT, "-inf", "float32(-math.inf)", True),
        (model.FieldKind.FLOAT, "nan", "float32(math.nan)", True),
        (model.FieldKind.DOUBLE, "2.5", "2.5", False),
        (model.FieldKind.DOUBLE, "100", "100.0", False),
        (model.FieldKind.DOUBLE, "1e+06", "1e+06", False),
        (model.FieldKind.INT32, "-7", "-7", False),
        (model.FieldKind.BOOL, "true", "True", False),
        (model.FieldKind.STRING, 'say "hi"', '"say \\"hi\\""', False),
        (model.FieldKind.BYTES, "a\\000b", "b'a\\x00b'", False),
        (model.FieldKind.BYTES, "\\x41\\377\\n", "b'A\\xff\\n'", False),
    ],
)
def test_default_holder_expressions(
    kind: model.FieldKind, text: str, expression: str, uses_math: bool
) -> None:
    mapper = TypeMapper(_MODULE)
    field = _field(kind, default_value=text)

    holder = default_holder(mapper, _message(), field)

    assert holder.name == "Default_Person_Value"
    assert holder.expression == expression
    assert holder.uses_math is uses_math


def test_default_holder_for_enum_references_the_member() -> None:
    mapper = TypeMapper(_MODULE)
    field = _field(model.FieldKind.ENUM, default_value="GREEN", resolved_type=_color())

    holder = default_holder(mapper, _message(), field)

    assert holder.annotation == "Color"
    assert holder.expression == "Color.GREEN"


def test_default_holder_requires_a_nontrivial_default() -> None:
    with pytest.raises(ValueError):
        default_holder(TypeMapper(_MODULE), _message(), _field(model.FieldKind.STRING, default_value=""))


def test_getter_defaults() -> None:
    mapper = TypeMapper(_MODULE)
    message = _message()

    assert getter_default(mapper, message, _field(model.FieldKind.BOOL)) == "False"
    assert getter_default(mapper, message, _field(model.FieldKind.STRING)) == '""'
    assert getter_default(mapper, message, _field(model.FieldKind.BYTES)) == "None"
    assert getter_default(mapper, message, _field(model.FieldKind.INT64)) == "0"
    assert getter_default(mapper, message, _field(model.FieldKind.DOUBLE)) == "0.0"
    assert (
        getter_default(mapper, message, _field(model.FieldKind.ENUM, resolved_type=_color()))
        == "Color.RED"
    )
    repeated = _field(model.FieldKind.INT32, cardinality=model.FieldCardinality.REPEATED)
    assert getter_default(mapper, message, repeated) == "None"


def test_getter_defaults_use_holders() -> None:
    mapper = TypeMapper(_MODULE)
    message = _message()

    string_field = _field(model.FieldKind.STRING, default_value="hello")
    bytes_field = _field(model.FieldKind.BYTES, default_value="abc")
    empty_field = _field(model.FieldKind.STRING, default_value="")

    assert getter_default(mapper, message, string_field) == "Default_Person_Value"
    assert getter_default(mapper, message, bytes_field) == "bytes(Default_Person_Value)"
    assert getter_default(mapper, message, empty_field) == '""'


def test_storage_defaults() -> None:
    mapper = TypeMapper(_MODULE)

    repeated = storage_default(
        mapper, _field(model.FieldKind.INT32, cardinality=model.FieldCardinality.REPEATED)
    )
    assert repeated.factory and repeated.expression == "list"

    assert storage_default(mapper, _field(model.FieldKind.INT32)).expression == "None"
    proto3_int = _field(model.FieldKind.INT32, syntax=model.Syntax.PROTO3)
    assert storage_default(mapper, proto3_int).expression == "0"
    proto3_float = _field(model.FieldKind.FLOAT, syntax=model.Syntax.PROTO3)
    assert storage_default(mapper, proto3_float).expression == "0.0"
    proto3_enum = _field(model.FieldKind.ENUM, syntax=model.Syntax.PROTO3, resolved_type=_color())
    assert storage_default(mapper, proto3_enum).expression == "Color.RED"
    proto3_bytes = _field(model.FieldKind.BYTES, syntax=model.Syntax.PROTO3)
    assert storage_default(mapper, proto3_bytes).expression == "None"
