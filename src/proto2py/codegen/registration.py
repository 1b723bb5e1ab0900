"""Registration functions and the embedded, compressed file descriptor."""

from __future__ import annotations

import gzip
import logging
from typing import List, Optional

from google.protobuf import descriptor_pb2
from google.protobuf.message import EncodeError

from .. import model
from ..tags import enum_registry_name
from .context import FileContext, quote
from .extensions import ExtensionEmitter, extension_var, is_message_set_element

_LOG = logging.getLogger(__name__)

_BYTES_PER_LINE = 16


def compress_descriptor(file_descriptor: descriptor_pb2.FileDescriptorProto) -> bytes:
    """Serialize *file_descriptor* without source info and gzip it reproducibly."""

    trimmed = descriptor_pb2.FileDescriptorProto()
    trimmed.CopyFrom(file_descriptor)
    trimmed.ClearField("source_code_info")
    payload = trimmed.SerializeToString(deterministic=True)
    return gzip.compress(payload, compresslevel=9, mtime=0)


class RegistrationEmitter:
    """Render ``register_types``, ``register_file_descriptor`` and the descriptor blob."""

    def __init__(self, context: FileContext) -> None:
        self._context = context
        self._extensions = ExtensionEmitter(context)

    def render_register_types(self) -> List[str]:
        context = self._context
        if not (context.all_enums or context.all_messages or context.all_extensions):
            return []

        body: List[str] = []
        for enum in context.all_enums:
            name = enum.ident.name
            body.append(
                f"registry.register_enum({quote(enum_registry_name(enum))}, {name}_name, {name}_value)"
            )
        for message in context.all_messages:
            if message.is_map_entry:
                continue
            for extension in message.extensions:
                body.extend(self._register_extension(extension))
            body.append(f"registry.register_type({message.ident.name}, {quote(message.full_name)})")

            map_fields = [field for field in message.fields if field.is_map]
            map_fields.sort(key=lambda field: field.message_type.full_name)
            for field in map_fields:
                native = context.mapper.map_type(field)
                body.append(
                    f"registry.register_map_type({native.name}, {quote(field.message_type.full_name)})"
                )
        for extension in context.proto_file.extensions:
            body.extend(self._register_extension(extension))

        lines = ["def register_types(registry: proto.Registry) -> None:"]
        lines.extend(f"    {line}" for line in body)
        lines.append("")
        lines.append("")
        return lines

    def _register_extension(self, extension: model.Field) -> List[str]:
        lines = [f"registry.register_extension({extension_var(extension)})"]
        if is_message_set_element(extension):
            lines.append(
                "registry.register_message_set_type("
                f"{self._extensions.extension_type(extension)}, {extension.number}, "
                f"{quote(extension.parent.full_name)})"
            )
        return lines

    def render_file_descriptor(self) -> List[str]:
        context = self._context
        proto_file = context.proto_file
        blob = self._compressed_descriptor()
        if blob is None:
            return []

        lines = [
            "def register_file_descriptor(registry: proto.Registry) -> None:",
            f"    registry.register_file({quote(proto_file.name)}, {context.descriptor_var})",
            "",
            "",
            f"{context.descriptor_var} = bytes([",
            f"    # {len(blob)} bytes of a gzipped FileDescriptorProto",
        ]
        for offset in range(0, len(blob), _BYTES_PER_LINE):
            chunk = blob[offset : offset + _BYTES_PER_LINE]
            lines.append("    " + " ".join(f"0x{byte:02x}," for byte in chunk))
        lines.append("])")
        return lines

    def _compressed_descriptor(self) -> Optional[bytes]:
        proto_file = self._context.proto_file
        descriptor = proto_file.descriptor
        if descriptor is None:
            self._context.error_sink.report(f"{proto_file.name}: no file descriptor to embed")
            return None
        try:
            return compress_descriptor(descriptor)
        except EncodeError as exc:
            _LOG.warning("Failed to serialize descriptor for %s: %s", proto_file.name, exc)
            self._context.error_sink.report(f"{proto_file.name}: {exc}")
            return None


__all__ = ["RegistrationEmitter", "compress_descriptor"]
