from __future__ import annotations

"""Utilities to convert CodeGeneratorRequest payloads into model dataclasses."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, MutableMapping, Optional, Tuple

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from . import model
from .config import GeneratorConfig
from .naming import (
    NameResolver,
    NamingRules,
    camel_case,
    escape_identifier,
    field_attribute_name,
    load_naming_rules,
    module_alias,
    module_for_file,
)

_LOG = logging.getLogger(__name__)

# Field numbers inside descriptor.proto used to build source location paths.
_FILE_MESSAGE_TYPE = 4
_FILE_ENUM_TYPE = 5
_FILE_EXTENSION = 7
_MESSAGE_FIELD = 2
_MESSAGE_NESTED_TYPE = 3
_MESSAGE_ENUM_TYPE = 4
_MESSAGE_EXTENSION = 6
_ENUM_VALUE = 2

_FieldProto = descriptor_pb2.FieldDescriptorProto

_FIELD_KINDS: Dict[int, model.FieldKind] = {
    _FieldProto.TYPE_DOUBLE: model.FieldKind.DOUBLE,
    _FieldProto.TYPE_FLOAT: model.FieldKind.FLOAT,
    _FieldProto.TYPE_INT64: model.FieldKind.INT64,
    _FieldProto.TYPE_UINT64: model.FieldKind.UINT64,
    _FieldProto.TYPE_INT32: model.FieldKind.INT32,
    _FieldProto.TYPE_FIXED64: model.FieldKind.FIXED64,
    _FieldProto.TYPE_FIXED32: model.FieldKind.FIXED32,
    _FieldProto.TYPE_BOOL: model.FieldKind.BOOL,
    _FieldProto.TYPE_STRING: model.FieldKind.STRING,
    _FieldProto.TYPE_GROUP: model.FieldKind.GROUP,
    _FieldProto.TYPE_MESSAGE: model.FieldKind.MESSAGE,
    _FieldProto.TYPE_BYTES: model.FieldKind.BYTES,
    _FieldProto.TYPE_UINT32: model.FieldKind.UINT32,
    _FieldProto.TYPE_ENUM: model.FieldKind.ENUM,
    _FieldProto.TYPE_SFIXED32: model.FieldKind.SFIXED32,
    _FieldProto.TYPE_SFIXED64: model.FieldKind.SFIXED64,
    _FieldProto.TYPE_SINT32: model.FieldKind.SINT32,
    _FieldProto.TYPE_SINT64: model.FieldKind.SINT64,
}

_CARDINALITIES: Dict[int, model.FieldCardinality] = {
    _FieldProto.LABEL_OPTIONAL: model.FieldCardinality.OPTIONAL,
    _FieldProto.LABEL_REQUIRED: model.FieldCardinality.REQUIRED,
    _FieldProto.LABEL_REPEATED: model.FieldCardinality.REPEATED,
}

_UNPACKABLE_KINDS = frozenset(
    {
        model.FieldKind.STRING,
        model.FieldKind.BYTES,
        model.FieldKind.MESSAGE,
        model.FieldKind.GROUP,
    }
)


def json_name_for(name: str) -> str:
    """Compute the lowerCamelCase JSON name protoc assigns to a field."""

    result: List[str] = []
    capitalize_next = False
    for char in name:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char)
    return "".join(result)


class DescriptorLoader:
    """Load FileDescriptorProto messages into resolved model dataclasses.

    The loader plays the part of the schema resolver: it assigns native
    identifiers, links type references across files and extracts source
    comments. The generator only ever reads what it produces.
    """

    def __init__(
        self,
        request: plugin_pb2.CodeGeneratorRequest,
        *,
        config: GeneratorConfig | None = None,
        naming_rules: NamingRules | None = None,
    ) -> None:
        self._request = request
        self._config = config or GeneratorConfig()
        rules = naming_rules or load_naming_rules(self._config.naming_config)
        self._naming_rules = rules.with_overrides(self._config.rename_overrides)
        self._loaded_files: MutableMapping[str, model.ProtoFile] = {}
        self._type_index: Dict[str, model.ProtoType] = {}
        self._pending_field_resolutions: List[Tuple[model.Field, str]] = []
        self._pending_extendee_resolutions: List[Tuple[model.Field, str]] = []
        self._loaded = False

    @property
    def files(self) -> MutableMapping[str, model.ProtoFile]:
        """Mapping of file name to :class:`ProtoFile` after :meth:`load`."""

        self.load()
        return self._loaded_files

    @property
    def files_to_generate(self) -> List[str]:
        """Return the list of files requested for generation."""

        return list(self._request.file_to_generate)

    def get_file(self, name: str) -> model.ProtoFile:
        """Return a loaded :class:`ProtoFile` by name."""

        self.load()
        return self._loaded_files[name]

    def load(self, file_names: Optional[Iterable[str]] = None) -> MutableMapping[str, model.ProtoFile]:
        """Load requested files and return the mapping of filenames to :class:`ProtoFile`.

        If ``file_names`` is ``None`` all files present in the request are loaded.
        Subsequent calls return cached results.
        """

        if not self._loaded:
            known = {fp.name for fp in self._request.proto_file}
            for file_proto in self._request.proto_file:
                proto_file = self._convert_file(file_proto, known)
                self._loaded_files[file_proto.name] = proto_file

            self._resolve_type_references()
            self._loaded = True
            _LOG.debug("Loaded %d descriptor(s)", len(self._loaded_files))

        if file_names is None:
            return self._loaded_files

        file_names = list(file_names)
        missing = sorted(name for name in file_names if name not in self._loaded_files)
        if missing:
            raise KeyError(f"Descriptor(s) not found in request: {', '.join(missing)}")
        return {name: self._loaded_files[name] for name in file_names}

    # File level -------------------------------------------------------------
    def _convert_file(
        self,
        file_proto: descriptor_pb2.FileDescriptorProto,
        known_files: set[str],
    ) -> model.ProtoFile:
        package = file_proto.package or None
        for dependency in file_proto.dependency:
            if dependency not in known_files:
                raise KeyError(
                    f"Unresolved dependency '{dependency}' referenced by {file_proto.name}"
                )

        suffix = self._config.module_suffix
        module = module_for_file(file_proto.name, suffix)
        syntax = model.Syntax.PROTO3 if file_proto.syntax == "proto3" else model.Syntax.PROTO2

        reserved = list(self._config.reserved_identifiers)
        reserved.append(self._config.runtime_module.split(".")[0])
        reserved.extend(
            module_alias(module_for_file(dependency, suffix))
            for dependency in file_proto.dependency
        )
        resolver = NameResolver(self._naming_rules, additional_reserved=reserved)

        proto_file = model.ProtoFile(
            name=file_proto.name,
            package=package,
            module=module,
            syntax=syntax,
            dependencies=list(file_proto.dependency),
            public_dependencies=[file_proto.dependency[i] for i in file_proto.public_dependency],
            deprecated=file_proto.options.deprecated,
            comments=self._collect_comments(file_proto),
            descriptor=file_proto,
        )
        scope = _FileScope(proto_file=proto_file, resolver=resolver)

        for index, enum_proto in enumerate(file_proto.enum_type):
            proto_file.enums.append(
                self._convert_enum(enum_proto, scope, [], (_FILE_ENUM_TYPE, index))
            )

        for index, message_proto in enumerate(file_proto.message_type):
            proto_file.messages.append(
                self._convert_message(message_proto, scope, [], (_FILE_MESSAGE_TYPE, index))
            )

        for index, extension_proto in enumerate(file_proto.extension):
            proto_file.extensions.append(
                self._convert_field(
                    extension_proto,
                    scope,
                    parent=None,
                    path=(_FILE_EXTENSION, index),
                )
            )

        self._assign_oneof_names(proto_file, resolver)

        _LOG.debug(
            "Converted %s: %d message(s), %d enum(s), %d extension(s)",
            file_proto.name,
            len(proto_file.messages),
            len(proto_file.enums),
            len(proto_file.extensions),
        )
        return proto_file

    def _assign_oneof_names(self, proto_file: model.ProtoFile, resolver: NameResolver) -> None:
        # Claimed once every message and enum of the file holds its identifier.
        for message in model.walk_messages(proto_file.messages):
            for oneof in message.oneofs:
                oneof.union_name = resolver.claim(f"{message.ident.name}_{oneof.camel_name}Oneof")
                for field in oneof.fields:
                    field.wrapper_name = resolver.claim(f"{message.ident.name}_{field.camel_name}")

    def _collect_comments(
        self, file_proto: descriptor_pb2.FileDescriptorProto
    ) -> Dict[Tuple[int, ...], str]:
        comments: Dict[Tuple[int, ...], str] = {}
        for location in file_proto.source_code_info.location:
            if not location.HasField("leading_comments"):
                continue
            key = tuple(location.path)
            if key not in comments:
                comments[key] = location.leading_comments
        return comments

    # Entities ---------------------------------------------------------------
    def _convert_enum(
        self,
        enum_proto: descriptor_pb2.EnumDescriptorProto,
        scope: "_FileScope",
        parents: List[str],
        path: Tuple[int, ...],
    ) -> model.Enum:
        proto_file = scope.proto_file
        full_name = self._qualify_name(proto_file.package, parents, enum_proto.name)
        ident = scope.resolver.register(full_name, camel_case(".".join(parents + [enum_proto.name])))
        enum = model.Enum(
            name=enum_proto.name,
            full_name=full_name,
            ident=model.NativeIdent(name=ident, module=proto_file.module),
            syntax=proto_file.syntax,
            deprecated=enum_proto.options.deprecated,
            path=path,
            file=proto_file.name,
            package=proto_file.package,
        )
        self._register_type(full_name, enum)

        for index, value_proto in enumerate(enum_proto.value):
            enum.values.append(
                model.EnumValue(
                    name=value_proto.name,
                    number=value_proto.number,
                    deprecated=value_proto.options.deprecated,
                    path=path + (_ENUM_VALUE, index),
                )
            )

        return enum

    def _convert_message(
        self,
        message_proto: descriptor_pb2.DescriptorProto,
        scope: "_FileScope",
        parents: List[str],
        path: Tuple[int, ...],
    ) -> model.Message:
        proto_file = scope.proto_file
        full_name = self._qualify_name(proto_file.package, parents, message_proto.name)
        parents_chain = parents + [message_proto.name]
        ident = scope.resolver.register(full_name, camel_case(".".join(parents_chain)))
        message = model.Message(
            name=message_proto.name,
            full_name=full_name,
            ident=model.NativeIdent(name=ident, module=proto_file.module),
            extension_ranges=[(r.start, r.end) for r in message_proto.extension_range],
            is_map_entry=message_proto.options.map_entry,
            deprecated=message_proto.options.deprecated,
            message_set_wire_format=message_proto.options.message_set_wire_format,
            syntax=proto_file.syntax,
            path=path,
            file=proto_file.name,
        )
        self._register_type(full_name, message)

        for oneof_proto in message_proto.oneof_decl:
            message.oneofs.append(
                model.Oneof(
                    name=oneof_proto.name,
                    full_name=f"{full_name}.{oneof_proto.name}",
                    native_name=field_attribute_name(oneof_proto.name),
                    camel_name=camel_case(oneof_proto.name),
                )
            )

        for index, nested_proto in enumerate(message_proto.nested_type):
            message.nested_messages.append(
                self._convert_message(
                    nested_proto, scope, parents_chain, path + (_MESSAGE_NESTED_TYPE, index)
                )
            )

        for index, enum_proto in enumerate(message_proto.enum_type):
            message.nested_enums.append(
                self._convert_enum(enum_proto, scope, parents_chain, path + (_MESSAGE_ENUM_TYPE, index))
            )

        for index, field_proto in enumerate(message_proto.field):
            field = self._convert_field(
                field_proto, scope, parent=message, path=path + (_MESSAGE_FIELD, index)
            )
            if field_proto.HasField("oneof_index"):
                oneof = message.oneofs[field_proto.oneof_index]
                field.oneof = oneof
                oneof.fields.append(field)
            message.fields.append(field)

        for index, extension_proto in enumerate(message_proto.extension):
            message.extensions.append(
                self._convert_field(
                    extension_proto,
                    scope,
                    parent=message,
                    path=path + (_MESSAGE_EXTENSION, index),
                )
            )

        return message

    def _convert_field(
        self,
        field_proto: descriptor_pb2.FieldDescriptorProto,
        scope: "_FileScope",
        *,
        parent: Optional[model.Message],
        path: Tuple[int, ...],
    ) -> model.Field:
        proto_file = scope.proto_file
        try:
            kind = _FIELD_KINDS[field_proto.type]
            cardinality = _CARDINALITIES[field_proto.label]
        except KeyError as exc:
            raise ValueError(
                f"Unsupported type or label for field '{field_proto.name}' in {proto_file.name}"
            ) from exc

        is_extension = field_proto.HasField("extendee")
        if field_proto.options.HasField("packed"):
            packed = field_proto.options.packed
        else:
            packed = (
                proto_file.syntax is model.Syntax.PROTO3
                and cardinality is model.FieldCardinality.REPEATED
                and kind not in _UNPACKABLE_KINDS
            )

        field = model.Field(
            name=field_proto.name,
            number=field_proto.number,
            cardinality=cardinality,
            kind=kind,
            native_name=(
                escape_identifier(field_proto.name)
                if is_extension
                else field_attribute_name(field_proto.name)
            ),
            camel_name=camel_case(field_proto.name),
            type_name=self._normalize_type_name(field_proto.type_name) or None,
            default_value=(
                field_proto.default_value if field_proto.HasField("default_value") else None
            ),
            json_name=(
                field_proto.json_name
                if field_proto.HasField("json_name")
                else json_name_for(field_proto.name)
            ),
            packed=packed,
            deprecated=field_proto.options.deprecated,
            syntax=proto_file.syntax,
            path=path,
            parent=parent,
            extendee=self._normalize_type_name(field_proto.extendee) if is_extension else None,
        )

        if kind in (model.FieldKind.MESSAGE, model.FieldKind.GROUP, model.FieldKind.ENUM):
            if not field.type_name:
                raise ValueError(
                    f"Field '{field_proto.name}' in {proto_file.name} has no type name"
                )
            self._pending_field_resolutions.append((field, field.type_name))
        if field.extendee:
            self._pending_extendee_resolutions.append((field, field.extendee))

        return field

    # Helpers ----------------------------------------------------------------
    def _normalize_type_name(self, type_name: str) -> str:
        if not type_name:
            return type_name
        return type_name[1:] if type_name.startswith(".") else type_name

    def _register_type(self, full_name: str, obj: model.ProtoType) -> None:
        self._type_index[full_name] = obj

    def _qualify_name(self, package: Optional[str], parents: List[str], name: str) -> str:
        segments: List[str] = []
        if package:
            segments.append(package)
        segments.extend(parents)
        segments.append(name)
        return ".".join(segment for segment in segments if segment)

    def _resolve_type_references(self) -> None:
        for field, type_name in self._pending_field_resolutions:
            resolved = self._type_index.get(type_name)
            if resolved is None:
                raise KeyError(f"Unable to resolve type reference '{type_name}' for field '{field.name}'")
            field.resolved_type = resolved

        for field, extendee in self._pending_extendee_resolutions:
            resolved = self._type_index.get(extendee)
            if not isinstance(resolved, model.Message):
                raise KeyError(f"Unable to resolve extendee '{extendee}' for extension '{field.name}'")
            field.extended_type = resolved


@dataclass(slots=True)
class _FileScope:
    proto_file: model.ProtoFile
    resolver: NameResolver


__all__ = ["DescriptorLoader", "json_name_for"]
