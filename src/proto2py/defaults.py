"""Default value expressions for generated message members and getters."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass

from google.protobuf import text_encoding

from . import model
from .naming import enum_member_name
from .tags import enum_default_value, format_float, parse_float_default
from .type_mapper import TypeMapper


@dataclass(frozen=True, slots=True)
class DefaultHolder:
    """A module-level constant holding a field's explicit default."""

    name: str
    annotation: str
    expression: str
    uses_math: bool = False


@dataclass(frozen=True, slots=True)
class StorageDefault:
    """How a dataclass member is initialised on a fresh message."""

    expression: str
    factory: bool = False


def has_nontrivial_default(field: model.Field) -> bool:
    """Return ``True`` when *field* gets a ``Default_`` holder.

    Empty string and bytes defaults count as no default.
    """

    if not field.has_default:
        return False
    if field.kind in (model.FieldKind.STRING, model.FieldKind.BYTES):
        return field.default_value != ""
    return True


def default_holder_name(message: model.Message, field: model.Field) -> str:
    return f"Default_{message.ident.name}_{field.camel_name}"


def enum_value_expression(mapper: TypeMapper, enum: model.Enum, value: model.EnumValue) -> str:
    return f"{mapper.qualify(enum.ident)}.{enum_member_name(value.name)}"


def _float_literal(number: float, *, single: bool) -> str:
    text = format_float(number, single=single)
    if not any(marker in text for marker in ".e"):
        text += ".0"
    return text


def default_holder(mapper: TypeMapper, message: model.Message, field: model.Field) -> DefaultHolder:
    """Build the holder declaration for a field with a non-trivial default."""

    if not has_nontrivial_default(field):
        raise ValueError(f"Field '{message.full_name}.{field.name}' has no default")

    name = default_holder_name(message, field)
    annotation = mapper.element_type(field)
    text = field.default_value or ""
    kind = field.kind

    if kind is model.FieldKind.STRING:
        return DefaultHolder(name, annotation, json.dumps(text, ensure_ascii=False))
    if kind is model.FieldKind.BYTES:
        return DefaultHolder(name, annotation, repr(text_encoding.CUnescape(text)))
    if kind is model.FieldKind.BOOL:
        return DefaultHolder(name, annotation, "True" if text == "true" else "False")
    if kind is model.FieldKind.ENUM:
        value = enum_default_value(field)
        return DefaultHolder(name, annotation, enum_value_expression(mapper, field.enum_type, value))
    if kind.is_float:
        number = parse_float_default(text)
        single = kind is model.FieldKind.FLOAT
        if math.isinf(number) or math.isnan(number):
            if math.isnan(number):
                special = "math.nan"
            elif number < 0:
                special = "-math.inf"
            else:
                special = "math.inf"
            if single:
                special = f"float32({special})"
            return DefaultHolder(name, annotation, special, uses_math=True)
        return DefaultHolder(name, annotation, _float_literal(number, single=single))
    return DefaultHolder(name, annotation, str(int(text)))


def getter_default(mapper: TypeMapper, message: model.Message, field: model.Field) -> str:
    """Expression a getter returns when *field* is unset."""

    if field.is_repeated:
        return "None"
    if has_nontrivial_default(field):
        holder = default_holder_name(message, field)
        if field.kind is model.FieldKind.BYTES:
            return f"bytes({holder})"
        return holder
    kind = field.kind
    if kind is model.FieldKind.BOOL:
        return "False"
    if kind is model.FieldKind.STRING:
        return '""'
    if kind.is_message_like or kind is model.FieldKind.BYTES:
        return "None"
    if kind is model.FieldKind.ENUM:
        enum = field.enum_type
        return enum_value_expression(mapper, enum, enum.values[0])
    if kind.is_float:
        return "0.0"
    return "0"


def storage_default(mapper: TypeMapper, field: model.Field) -> StorageDefault:
    """Initial value of the dataclass member backing *field*."""

    if field.is_map:
        return StorageDefault("dict", factory=True)
    if field.is_repeated:
        return StorageDefault("list", factory=True)
    if mapper.map_type(field).indirect or mapper.is_nullable(field):
        return StorageDefault("None")
    kind = field.kind
    if kind is model.FieldKind.BOOL:
        return StorageDefault("False")
    if kind is model.FieldKind.STRING:
        return StorageDefault('""')
    if kind is model.FieldKind.ENUM:
        enum = field.enum_type
        return StorageDefault(enum_value_expression(mapper, enum, enum.values[0]))
    if kind.is_float:
        return StorageDefault("0.0")
    return StorageDefault("0")


__all__ = [
    "DefaultHolder",
    "StorageDefault",
    "default_holder",
    "default_holder_name",
    "enum_value_expression",
    "getter_default",
    "has_nontrivial_default",
    "storage_default",
]
