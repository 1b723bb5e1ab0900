"""Mapping utilities that turn model fields into native Python type expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from . import model
from .naming import module_alias


@dataclass(frozen=True, slots=True)
class NativeType:
    """A native type expression plus whether the member is stored indirectly.

    ``indirect`` marks fields whose presence is tracked by storing ``None``
    until a value is set, which applies to singular proto2 scalars and enums.
    """

    name: str
    indirect: bool


class TypeMapper:
    """Maps :mod:`proto2py.model` fields onto annotations for one generated module."""

    _SCALAR_MAPPING: Dict[model.FieldKind, str] = {
        model.FieldKind.BOOL: "bool",
        model.FieldKind.INT32: "int32",
        model.FieldKind.SINT32: "int32",
        model.FieldKind.SFIXED32: "int32",
        model.FieldKind.UINT32: "uint32",
        model.FieldKind.FIXED32: "uint32",
        model.FieldKind.INT64: "int64",
        model.FieldKind.SINT64: "int64",
        model.FieldKind.SFIXED64: "int64",
        model.FieldKind.UINT64: "uint64",
        model.FieldKind.FIXED64: "uint64",
        model.FieldKind.FLOAT: "float32",
        model.FieldKind.DOUBLE: "float64",
        model.FieldKind.STRING: "str",
        model.FieldKind.BYTES: "bytes",
    }

    def __init__(self, module: str) -> None:
        self._module = module

    @property
    def module(self) -> str:
        return self._module

    def qualify(self, ident: model.NativeIdent) -> str:
        """Return *ident* as referenced from the current module."""

        if ident.module == self._module:
            return ident.name
        return f"{module_alias(ident.module)}.{ident.name}"

    def map_type(self, field: model.Field) -> NativeType:
        """Return the native type of *field* and its indirection flag."""

        kind = field.kind
        indirect = True
        if kind is model.FieldKind.ENUM:
            name = self.qualify(self._require_enum(field).ident)
        elif kind.is_message_like:
            message = self._require_message(field)
            if field.is_map:
                key = self.map_type(message.fields[0]).name
                value = self.map_type(message.fields[1]).name
                return NativeType(name=f"typing.Dict[{key}, {value}]", indirect=False)
            name = self.qualify(message.ident)
            indirect = False
        else:
            name = self._SCALAR_MAPPING[kind]
            if kind is model.FieldKind.BYTES:
                indirect = False

        if field.is_repeated:
            name = f"typing.List[{name}]"
            indirect = False
        if field.syntax is model.Syntax.PROTO3:
            indirect = False
        return NativeType(name=name, indirect=indirect)

    def element_type(self, field: model.Field) -> str:
        """Return the annotation of a single value of *field*, ignoring cardinality."""

        if field.kind is model.FieldKind.ENUM:
            return self.qualify(self._require_enum(field).ident)
        if field.kind.is_message_like:
            return self.qualify(self._require_message(field).ident)
        return self._SCALAR_MAPPING[field.kind]

    def annotation(self, field: model.Field) -> str:
        """Return the annotation used for the struct member backing *field*."""

        native = self.map_type(field)
        if native.indirect or self.is_nullable(field):
            return f"typing.Optional[{native.name}]"
        return native.name

    @staticmethod
    def is_nullable(field: model.Field) -> bool:
        """Whether a singular *field* holds a reference that may be ``None``."""

        if field.is_repeated:
            return False
        return field.kind.is_message_like or field.kind is model.FieldKind.BYTES

    @staticmethod
    def _require_enum(field: model.Field) -> model.Enum:
        enum = field.enum_type
        if enum is None:
            raise ValueError(f"Enum field '{field.name}' has no resolved enum type")
        return enum

    @staticmethod
    def _require_message(field: model.Field) -> model.Message:
        message = field.message_type
        if message is None:
            raise ValueError(f"Message field '{field.name}' has no resolved message type")
        return message


__all__ = ["NativeType", "TypeMapper"]
