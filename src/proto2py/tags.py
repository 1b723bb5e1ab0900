"""Encoding of the per-field ``protobuf`` struct tag consumed by the runtime."""

from __future__ import annotations

import math
import struct
from decimal import Decimal
from typing import Dict, List

from google.protobuf import text_encoding

from . import model

WIRE_TYPES: Dict[model.FieldKind, str] = {
    model.FieldKind.BOOL: "varint",
    model.FieldKind.ENUM: "varint",
    model.FieldKind.INT32: "varint",
    model.FieldKind.SINT32: "zigzag32",
    model.FieldKind.UINT32: "varint",
    model.FieldKind.INT64: "varint",
    model.FieldKind.SINT64: "zigzag64",
    model.FieldKind.UINT64: "varint",
    model.FieldKind.SFIXED32: "fixed32",
    model.FieldKind.FIXED32: "fixed32",
    model.FieldKind.FLOAT: "fixed32",
    model.FieldKind.SFIXED64: "fixed64",
    model.FieldKind.FIXED64: "fixed64",
    model.FieldKind.DOUBLE: "fixed64",
    model.FieldKind.STRING: "bytes",
    model.FieldKind.BYTES: "bytes",
    model.FieldKind.MESSAGE: "bytes",
    model.FieldKind.GROUP: "group",
}

_CARDINALITY_TOKENS: Dict[model.FieldCardinality, str] = {
    model.FieldCardinality.OPTIONAL: "opt",
    model.FieldCardinality.REQUIRED: "req",
    model.FieldCardinality.REPEATED: "rep",
}

def to_float32(value: float) -> float:
    """Round *value* to the nearest single precision float."""

    return struct.unpack("<f", struct.pack("<f", value))[0]


def _shortest_digits(value: float, *, single: bool) -> Decimal:
    if not single:
        return Decimal(repr(value)).normalize()
    for precision in range(1, 10):
        text = f"{value:.{precision - 1}e}"
        if to_float32(float(text)) == value:
            return Decimal(text).normalize()
    return Decimal(repr(value)).normalize()  # pragma: no cover - nine digits always suffice


def format_float(value: float, *, single: bool = False) -> str:
    """Render *value* with the shortest digits that read back to the same value.

    Exponent notation is used when the decimal exponent is below -4 or at
    least 6, giving ``1e+06`` and ``1e-05`` but ``100`` and ``0.0001``.
    Single precision values are rounded to float32 before formatting.
    """

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "-Inf" if value < 0 else "+Inf"
    if single:
        value = to_float32(value)

    sign = "-" if math.copysign(1.0, value) < 0 else ""
    parsed = _shortest_digits(abs(value), single=single).as_tuple()
    digits = "".join(str(d) for d in parsed.digits)
    point = len(digits) + parsed.exponent
    exponent = point - 1

    if exponent < -4 or exponent >= 6:
        mantissa = digits[0]
        if len(digits) > 1:
            mantissa += "." + digits[1:]
        exp_sign = "-" if exponent < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exponent):02d}"

    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{sign}{digits}{'0' * (point - len(digits))}"
    return f"{sign}{digits[:point]}.{digits[point:]}"


def parse_float_default(text: str) -> float:
    """Parse a float default as written by protoc (``inf``, ``-inf``, ``nan`` included)."""

    return float(text)


def enum_registry_name(enum: model.Enum) -> str:
    """Return the name an enum is registered under: ``<package>.<NativeName>``."""

    return f"{enum.package or ''}.{enum.ident.name}"


def enum_default_value(field: model.Field) -> model.EnumValue:
    """Return the enum value named by the default of an enum *field*."""

    enum = field.enum_type
    if enum is None:
        raise ValueError(f"Enum field '{field.name}' has no resolved enum type")
    for value in enum.values:
        if value.name == field.default_value:
            return value
    raise KeyError(f"Default '{field.default_value}' is not a value of enum '{enum.full_name}'")


def _default_token(field: model.Field) -> str:
    text = field.default_value or ""
    kind = field.kind
    if kind is model.FieldKind.BOOL:
        return "1" if text == "true" else "0"
    if kind is model.FieldKind.BYTES:
        return text_encoding.CUnescape(text).decode("latin-1")
    if kind.is_float:
        number = parse_float_default(text)
        if math.isinf(number):
            return "-inf" if number < 0 else "inf"
        if math.isnan(number):
            return "nan"
        return format_float(number, single=kind is model.FieldKind.FLOAT)
    if kind is model.FieldKind.ENUM:
        return str(enum_default_value(field).number)
    if kind is model.FieldKind.STRING:
        return text
    return str(int(text))


def encode_tag(field: model.Field) -> str:
    """Return the comma-joined tag describing how *field* is encoded."""

    tokens: List[str] = [
        WIRE_TYPES[field.kind],
        str(field.number),
        _CARDINALITY_TOKENS[field.cardinality],
    ]
    if field.packed:
        tokens.append("packed")

    name = field.name
    if field.kind is model.FieldKind.GROUP and field.message_type is not None:
        # Group field names are lowercased; the message keeps the original case.
        name = field.message_type.name
    tokens.append(f"name={name}")

    if field.json_name and field.json_name != name:
        tokens.append(f"json={field.json_name}")
    if field.syntax is model.Syntax.PROTO3:
        tokens.append("proto3")
    if field.kind is model.FieldKind.ENUM and field.enum_type is not None:
        tokens.append(f"enum={enum_registry_name(field.enum_type)}")
    if field.oneof is not None:
        tokens.append("oneof")
    # Must stay last: commas inside string defaults are not escaped.
    if field.has_default:
        tokens.append(f"def={_default_token(field)}")
    return ",".join(tokens)


def json_tag(field: model.Field) -> str:
    """Return the JSON tag of *field*."""

    return f"{field.name},omitempty"


__all__ = [
    "WIRE_TYPES",
    "encode_tag",
    "enum_default_value",
    "enum_registry_name",
    "format_float",
    "json_tag",
    "parse_float_default",
    "to_float32",
]
