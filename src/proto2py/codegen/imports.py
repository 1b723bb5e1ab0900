"""Rendering of module imports and public-import re-exports."""

from __future__ import annotations

import logging
from typing import List

from .. import model
from ..naming import module_alias
from .context import FileContext

_LOG = logging.getLogger(__name__)

_SCALAR_ALIASES = ("float32", "float64", "int32", "int64", "uint32", "uint64")


class ImportEmitter:
    """Render the import block of a generated module."""

    def __init__(self, context: FileContext) -> None:
        self._context = context

    def render_imports(self) -> List[str]:
        context = self._context
        runtime = context.config.runtime_module

        lines = ["from __future__ import annotations", ""]
        lines.append("import dataclasses")
        lines.append("import enum")
        if context.uses_math:
            lines.append("import math")
        lines.append("import typing")
        lines.append("")
        lines.append(f"from {runtime} import proto")
        lines.append(f"from {runtime}.proto import {', '.join(_SCALAR_ALIASES)}")

        # Dependencies are imported whether or not they are referenced.
        dependency_lines = []
        for dependency in self._dependencies():
            dependency_lines.append(f"import {dependency.module} as {module_alias(dependency.module)}")
        if dependency_lines:
            lines.append("")
            lines.extend(dependency_lines)
        lines.append("")
        return lines

    def render_public_aliases(self) -> List[str]:
        lines: List[str] = []
        for dependency in self._dependencies(public_only=True):
            lines.extend(self._render_public_import(dependency))
        return lines

    def _dependencies(self, *, public_only: bool = False) -> List[model.ProtoFile]:
        context = self._context
        proto_file = context.proto_file
        names = proto_file.public_dependencies if public_only else proto_file.dependencies
        resolved: List[model.ProtoFile] = []
        for name in names:
            dependency = context.dependencies.get(name)
            if dependency is None:
                raise KeyError(f"Dependency '{name}' of {proto_file.name} was not loaded")
            if dependency.module == proto_file.module:
                _LOG.debug("Skipping import of %s into its own module", name)
                continue
            resolved.append(dependency)
        return resolved

    def _render_public_import(self, dependency: model.ProtoFile) -> List[str]:
        alias = module_alias(dependency.module)
        lines: List[str] = []
        enums: List[model.Enum] = list(dependency.enums)
        for message in model.walk_messages(dependency.messages):
            enums.extend(message.nested_enums)
            if message.is_map_entry:
                continue
            name = message.ident.name
            lines.append(f"# {name} from public import {dependency.name}")
            lines.append(f"{name} = {alias}.{name}")
            for oneof in message.oneofs:
                for field in oneof.fields:
                    lines.append(f"{field.wrapper_name} = {alias}.{field.wrapper_name}")
            lines.append("")
        for enum in enums:
            name = enum.ident.name
            lines.append(f"# {name} from public import {dependency.name}")
            lines.append(f"{name} = {alias}.{name}")
            lines.append(f"{name}_name = {alias}.{name}_name")
            lines.append(f"{name}_value = {alias}.{name}_value")
            lines.append("")
        return lines


__all__ = ["ImportEmitter"]
