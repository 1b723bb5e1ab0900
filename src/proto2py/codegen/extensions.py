"""Rendering of extension descriptors."""

from __future__ import annotations

from typing import List

from .. import model
from ..tags import encode_tag
from .context import FileContext, quote


def extension_var(extension: model.Field) -> str:
    """Name of the module variable holding the descriptor of *extension*."""

    name = "E_"
    if extension.parent is not None:
        name += extension.parent.ident.name + "_"
    return name + extension.camel_name


def extension_full_name(extension: model.Field, package: str | None) -> str:
    if extension.parent is not None:
        return f"{extension.parent.full_name}.{extension.name}"
    if package:
        return f"{package}.{extension.name}"
    return extension.name


def is_message_set_element(extension: model.Field) -> bool:
    """Whether *extension* is the ``message_set_extension`` of a message-set element."""

    extended = extension.extended_type
    return (
        extension.parent is not None
        and extended is not None
        and extended.message_set_wire_format
        and extension.name == "message_set_extension"
    )


class ExtensionEmitter:
    """Render ``proto.ExtensionDesc`` declarations."""

    def __init__(self, context: FileContext) -> None:
        self._context = context

    def extension_type(self, extension: model.Field) -> str:
        mapper = self._context.mapper
        native = mapper.map_type(extension)
        if native.indirect:
            return f"typing.Optional[{native.name}]"
        return native.name

    def render(self, extension: model.Field) -> List[str]:
        context = self._context
        proto_file = context.proto_file
        extended = extension.extended_type
        if extended is None:
            raise ValueError(f"Extension '{extension.name}' has no resolved extended type")

        name = extension_full_name(extension, proto_file.package)
        if is_message_set_element(extension):
            # Text format names message-set elements after the containing message.
            name = extension.parent.full_name

        lines: List[str] = []
        lines.extend(context.comment_lines(extension.path))
        lines.append(f"{extension_var(extension)} = proto.ExtensionDesc(")
        lines.append(f"    extended_type={context.mapper.qualify(extended.ident)},")
        lines.append(f"    extension_type={self.extension_type(extension)},")
        lines.append(f"    field={extension.number},")
        lines.append(f"    name={quote(name)},")
        lines.append(f"    tag={quote(encode_tag(extension))},")
        lines.append(f"    filename={quote(proto_file.name)},")
        lines.append(")")
        lines.append("")
        return lines


__all__ = [
    "ExtensionEmitter",
    "extension_full_name",
    "extension_var",
    "is_message_set_element",
]
