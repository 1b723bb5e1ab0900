"""Rendering of message dataclasses, oneof wrappers and default holders."""

from __future__ import annotations

from typing import Dict, List

from .. import model
from ..defaults import (
    default_holder,
    getter_default,
    has_nontrivial_default,
    storage_default,
)
from ..tags import encode_tag, json_tag
from .context import WELL_KNOWN_TYPES, FileContext, deprecation_comment, quote

# DescriptorProto.oneof_decl
_ONEOF_DECL = 8


class MessageEmitter:
    """Render one message and the module-level declarations it owns."""

    def __init__(self, context: FileContext) -> None:
        self._context = context

    def render(self, message: model.Message) -> List[str]:
        if message.is_map_entry:
            return []

        lines: List[str] = []
        for oneof in message.oneofs:
            lines.extend(self._render_oneof_types(oneof))
        lines.extend(self._render_class(message))
        lines.extend(self._render_module_values(message))
        return lines

    # Oneofs -----------------------------------------------------------------
    def _render_oneof_types(self, oneof: model.Oneof) -> List[str]:
        mapper = self._context.mapper
        lines: List[str] = []
        for field in oneof.fields:
            native = mapper.map_type(field)
            metadata = f'{{"protobuf": {quote(encode_tag(field))}}}'
            lines.append("@dataclasses.dataclass(frozen=True)")
            lines.append(f"class {field.wrapper_name}:")
            lines.append(
                f"    {field.native_name}: {native.name} = dataclasses.field(metadata={metadata})"
            )
            lines.append("")
            lines.append("")
        wrappers = ", ".join(field.wrapper_name for field in oneof.fields)
        lines.append(f"{oneof.union_name} = typing.Union[{wrappers}, proto.NotSet]")
        lines.append("")
        lines.append("")
        return lines

    # Class body -------------------------------------------------------------
    def _render_class(self, message: model.Message) -> List[str]:
        context = self._context
        name = message.ident.name
        lines: List[str] = []
        comment = context.comment_lines(message.path)
        lines.extend(comment)
        if message.deprecated:
            if comment:
                lines.append("#")
            lines.append(deprecation_comment())
        lines.append("@dataclasses.dataclass(kw_only=True)")
        lines.append(f"class {name}(proto.Message):")

        oneof_paths: Dict[int, tuple] = {
            id(oneof): message.path + (_ONEOF_DECL, index)
            for index, oneof in enumerate(message.oneofs)
        }
        for field in message.fields:
            if field.oneof is not None:
                if field is field.oneof.fields[0]:
                    lines.extend(self._render_oneof_member(field.oneof, oneof_paths[id(field.oneof)]))
                continue
            lines.extend(self._render_member(field))

        if message.extension_ranges:
            extension_metadata = '{"json": "-"}'
            if message.message_set_wire_format:
                extension_metadata = '{"protobuf_messageset": "1", "json": "-"}'
            lines.append(
                "    xxx_internal_extensions: proto.InternalExtensions = dataclasses.field("
                f"default_factory=proto.InternalExtensions, metadata={extension_metadata})"
            )
        lines.append(
            '    xxx_unrecognized: bytes = dataclasses.field(default=b"", metadata={"json": "-"})'
        )
        lines.append(
            '    xxx_sizecache: int32 = dataclasses.field(default=0, metadata={"json": "-"})'
        )
        lines.append("")
        lines.extend(self._render_methods(message))
        lines.extend(self._render_getters(message))
        lines.append("")
        lines.append("")
        return lines

    def _render_member(self, field: model.Field) -> List[str]:
        context = self._context
        mapper = context.mapper
        lines = context.comment_lines(field.path, indent="    ")
        annotation = mapper.annotation(field)
        default = storage_default(mapper, field)
        argument = f"default_factory={default.expression}" if default.factory else f"default={default.expression}"

        metadata = [
            f'"protobuf": {quote(encode_tag(field))}',
            f'"json": {quote(json_tag(field))}',
        ]
        if field.is_map:
            entry = field.message_type
            metadata.append(f'"protobuf_key": {quote(encode_tag(entry.fields[0]))}')
            metadata.append(f'"protobuf_val": {quote(encode_tag(entry.fields[1]))}')

        member = (
            f"    {field.native_name}: {annotation} = dataclasses.field("
            f"{argument}, metadata={{{', '.join(metadata)}}})"
        )
        if field.deprecated:
            member += "  " + deprecation_comment()
        lines.append(member)
        return lines

    def _render_oneof_member(self, oneof: model.Oneof, path: tuple) -> List[str]:
        lines = self._context.comment_lines(path, indent="    ")
        lines.append(f"    # Types that are valid to be assigned to {oneof.native_name}:")
        for field in oneof.fields:
            lines.append(f"    #     {field.wrapper_name}")
        lines.append(
            f"    {oneof.native_name}: {oneof.union_name} = dataclasses.field("
            f'default=proto.NOT_SET, metadata={{"protobuf_oneof": {quote(oneof.name)}}})'
        )
        return lines

    def _render_methods(self, message: model.Message) -> List[str]:
        context = self._context
        name = message.ident.name
        info = f"xxx_messageInfo_{name}"
        lines: List[str] = []

        lines.append("    def reset(self) -> None:")
        lines.append("        self.__init__()")
        lines.append("")
        lines.append("    def __str__(self) -> str:")
        lines.append("        return proto.compact_text_string(self)")
        lines.append("")
        lines.append("    @staticmethod")
        lines.append("    def descriptor() -> typing.Tuple[bytes, typing.List[int]]:")
        lines.append(
            f"        return {context.descriptor_var}, [{context.descriptor_indexes(message.path)}]"
        )
        lines.append("")

        if message.extension_ranges:
            if message.message_set_wire_format:
                lines.append("    def marshal_json(self) -> bytes:")
                lines.append(
                    "        return proto.marshal_message_set_json(self.xxx_internal_extensions)"
                )
                lines.append("")
                lines.append("    def unmarshal_json(self, buf: bytes) -> None:")
                lines.append(
                    "        proto.unmarshal_message_set_json(buf, self.xxx_internal_extensions)"
                )
                lines.append("")
            lines.append("    @staticmethod")
            lines.append("    def extension_range_array() -> typing.List[proto.ExtensionRange]:")
            lines.append(f"        return extRange_{name}")
            lines.append("")

        if message.full_name in WELL_KNOWN_TYPES:
            lines.append("    @staticmethod")
            lines.append("    def xxx_well_known_type() -> str:")
            lines.append(f"        return {quote(message.name)}")
            lines.append("")

        lines.append("    def xxx_unmarshal(self, b: bytes) -> None:")
        lines.append(f"        {info}.unmarshal(self, b)")
        lines.append("")
        lines.append("    def xxx_marshal(self, b: bytes, deterministic: bool) -> bytes:")
        lines.append(f"        return {info}.marshal(b, self, deterministic)")
        lines.append("")
        lines.append("    def xxx_merge(self, src: proto.Message) -> None:")
        lines.append(f"        {info}.merge(self, src)")
        lines.append("")
        lines.append("    def xxx_size(self) -> int:")
        lines.append(f"        return {info}.size(self)")
        lines.append("")
        lines.append("    def xxx_discard_unknown(self) -> None:")
        lines.append(f"        {info}.discard_unknown(self)")

        if message.oneofs:
            wrappers = ", ".join(
                field.wrapper_name for oneof in message.oneofs for field in oneof.fields
            )
            lines.append("")
            lines.append("    @staticmethod")
            lines.append("    def xxx_oneof_wrappers() -> typing.List[type]:")
            lines.append(f"        return [{wrappers}]")
        return lines

    # Getters ----------------------------------------------------------------
    def _render_getters(self, message: model.Message) -> List[str]:
        lines: List[str] = []
        for field in message.fields:
            oneof = field.oneof
            if oneof is not None and field is oneof.fields[0]:
                lines.append("")
                lines.append(f"    def get_{oneof.native_name}(self) -> {oneof.union_name}:")
                lines.append(f"        return self.{oneof.native_name}")
            lines.append("")
            lines.extend(self._render_getter(message, field))
        return lines

    def _render_getter(self, message: model.Message, field: model.Field) -> List[str]:
        mapper = self._context.mapper
        native = mapper.map_type(field)
        returns = native.name
        if mapper.is_nullable(field):
            returns = f"typing.Optional[{returns}]"
        default = getter_default(mapper, message, field)

        lines: List[str] = []
        if field.deprecated:
            lines.append(deprecation_comment("    "))
        lines.append(f"    def get_{field.native_name}(self) -> {returns}:")
        attribute = field.native_name
        if field.oneof is not None:
            selector = field.oneof.native_name
            lines.append(f"        if isinstance(self.{selector}, {field.wrapper_name}):")
            lines.append(f"            return self.{selector}.{attribute}")
            lines.append(f"        return {default}")
        elif field.syntax is model.Syntax.PROTO3 or default == "None":
            lines.append(f"        return self.{attribute}")
        else:
            lines.append(f"        if self.{attribute} is not None:")
            lines.append(f"            return self.{attribute}")
            lines.append(f"        return {default}")
        return lines

    # Module values ----------------------------------------------------------
    def _render_module_values(self, message: model.Message) -> List[str]:
        context = self._context
        name = message.ident.name
        lines: List[str] = []

        if message.extension_ranges:
            lines.append(f"extRange_{name} = [")
            for start, end in message.extension_ranges:
                lines.append(f"    proto.ExtensionRange(start={start}, end={end - 1}),")
            lines.append("]")
            lines.append("")

        lines.append(f"xxx_messageInfo_{name} = proto.InternalMessageInfo()")
        lines.append("")

        holders = [field for field in message.fields if has_nontrivial_default(field)]
        for field in holders:
            holder = default_holder(context.mapper, message, field)
            if holder.uses_math:
                context.uses_math = True
            lines.append(f"{holder.name}: {holder.annotation} = {holder.expression}")
        if holders:
            lines.append("")
        lines.append("")
        return lines


__all__ = ["MessageEmitter"]
