"""Rendering of enum classes and their name/value tables."""

from __future__ import annotations

from typing import List, Set

from .. import model
from ..naming import enum_member_name
from .context import WELL_KNOWN_TYPES, FileContext, deprecation_comment, quote


class EnumEmitter:
    """Render a generated enum declaration."""

    def __init__(self, context: FileContext) -> None:
        self._context = context

    def render(self, enum: model.Enum) -> List[str]:
        context = self._context
        name = enum.ident.name
        lines: List[str] = []
        lines.extend(context.comment_lines(enum.path))
        header = f"class {name}(enum.IntEnum):"
        if enum.deprecated:
            header += "  " + deprecation_comment()
        lines.append(header)

        seen: Set[int] = set()
        for value in enum.values:
            lines.extend(context.comment_lines(value.path, indent="    "))
            if value.number in seen:
                lines.append("    # Duplicate value")
            member = f"    {enum_member_name(value.name)} = {value.number}"
            if value.deprecated:
                member += "  " + deprecation_comment()
            lines.append(member)
            seen.add(value.number)
        lines.append("")

        lines.append("    def __str__(self) -> str:")
        lines.append(f"        return proto.enum_name({name}_name, int(self))")
        lines.append("")

        if enum.syntax is not model.Syntax.PROTO3:
            lines.append(f"    def enum(self) -> {name}:")
            lines.append("        return self")
            lines.append("")
            lines.append("    @classmethod")
            lines.append(f"    def unmarshal_json(cls, data: bytes) -> {name}:")
            lines.append(
                f"        return cls(proto.unmarshal_json_enum({name}_value, data, {quote(name)}))"
            )
            lines.append("")

        lines.append("    @staticmethod")
        lines.append("    def enum_descriptor() -> typing.Tuple[bytes, typing.List[int]]:")
        lines.append(
            f"        return {context.descriptor_var}, [{context.descriptor_indexes(enum.path)}]"
        )

        if enum.full_name in WELL_KNOWN_TYPES:
            lines.append("")
            lines.append("    @staticmethod")
            lines.append("    def xxx_well_known_type() -> str:")
            lines.append(f"        return {quote(enum.name)}")

        lines.append("")
        lines.append("")
        lines.extend(self._render_name_table(enum))
        lines.append("")
        lines.extend(self._render_value_table(enum))
        lines.append("")
        lines.append("")
        return lines

    def _render_name_table(self, enum: model.Enum) -> List[str]:
        lines = [f"{enum.ident.name}_name = {{"]
        generated: Set[int] = set()
        for value in enum.values:
            duplicate = "# Duplicate value: " if value.number in generated else ""
            lines.append(f"    {duplicate}{value.number}: {quote(value.name)},")
            generated.add(value.number)
        lines.append("}")
        return lines

    def _render_value_table(self, enum: model.Enum) -> List[str]:
        lines = [f"{enum.ident.name}_value = {{"]
        for value in enum.values:
            lines.append(f"    {quote(value.name)}: {value.number},")
        lines.append("}")
        return lines


__all__ = ["EnumEmitter"]
