"""Driver that walks one schema file and assembles its generated module."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

from .. import model
from ..config import GeneratorConfig
from ..type_mapper import TypeMapper
from .context import (
    PACKAGE_COMMENT_PATH,
    CollectingErrorSink,
    ErrorSink,
    FileContext,
    descriptor_var_name,
)
from .enums import EnumEmitter
from .extensions import ExtensionEmitter
from .imports import ImportEmitter
from .messages import MessageEmitter
from .registration import RegistrationEmitter

_LOG = logging.getLogger(__name__)

GENERATED_HEADER = "# Code generated by proto2py. DO NOT EDIT."
GENERATED_CODE_VERSION = 2


def _collapse_blank_lines(lines: Iterable[str]) -> List[str]:
    result: List[str] = []
    blanks = 0
    for line in lines:
        if line:
            blanks = 0
        else:
            blanks += 1
            if blanks > 2 or not result:
                continue
        result.append(line)
    while result and not result[-1]:
        result.pop()
    return result


class FileGenerator:
    """Generate the module source for a single :class:`model.ProtoFile`.

    The file is walked once to build flat lists of its enums, messages and
    extensions, then the sections are emitted in a fixed order: header,
    imports, enums, messages, extensions, registration and finally the
    embedded descriptor.
    """

    def __init__(
        self,
        proto_file: model.ProtoFile,
        *,
        config: GeneratorConfig | None = None,
        error_sink: Optional[ErrorSink] = None,
        dependencies: Optional[Mapping[str, model.ProtoFile]] = None,
    ) -> None:
        self._proto_file = proto_file
        self._config = config or GeneratorConfig()
        self._error_sink = error_sink if error_sink is not None else CollectingErrorSink()
        self._dependencies = dict(dependencies or {})

    def _build_context(self) -> FileContext:
        proto_file = self._proto_file
        context = FileContext(
            proto_file=proto_file,
            config=self._config,
            mapper=TypeMapper(proto_file.module),
            error_sink=self._error_sink,
            dependencies=self._dependencies,
            descriptor_var=descriptor_var_name(proto_file.name),
        )
        context.all_enums.extend(proto_file.enums)
        for message in model.walk_messages(proto_file.messages):
            context.all_messages.append(message)
            context.all_enums.extend(message.nested_enums)
            context.all_extensions.extend(message.extensions)
        context.all_extensions.extend(proto_file.extensions)
        return context

    def generate(self) -> str:
        context = self._build_context()
        proto_file = self._proto_file

        body: List[str] = []
        enum_emitter = EnumEmitter(context)
        for enum in context.all_enums:
            body.extend(enum_emitter.render(enum))

        message_emitter = MessageEmitter(context)
        for message in context.all_messages:
            body.extend(message_emitter.render(message))

        # Extension descriptors reference classes by value, so they follow
        # every message of the module.
        extension_emitter = ExtensionEmitter(context)
        for extension in context.all_extensions:
            body.extend(extension_emitter.render(extension))
        body.append("")

        registration = RegistrationEmitter(context)
        body.extend(registration.render_register_types())
        body.extend(registration.render_file_descriptor())

        imports = ImportEmitter(context)
        lines: List[str] = [GENERATED_HEADER]
        if proto_file.deprecated:
            lines.append(f"# {proto_file.name} is a deprecated file.")
        else:
            lines.append(f"# source: {proto_file.name}")
        lines.append("")
        package_comment = context.comment_lines(PACKAGE_COMMENT_PATH)
        if package_comment:
            lines.extend(package_comment)
            lines.append("")
        lines.extend(imports.render_imports())
        lines.append("# A failure on the next line means the runtime package needs to be updated.")
        lines.append(
            f"_ = proto.PROTO_PACKAGE_IS_VERSION_{GENERATED_CODE_VERSION}"
            "  # please upgrade the proto package"
        )
        lines.append("")
        lines.append("")
        lines.extend(imports.render_public_aliases())
        lines.append("")
        lines.extend(body)

        _LOG.debug(
            "Generated %s: %d enum(s), %d message(s), %d extension(s)",
            proto_file.name,
            len(context.all_enums),
            len(context.all_messages),
            len(context.all_extensions),
        )
        return "\n".join(_collapse_blank_lines(lines)) + "\n"


__all__ = ["FileGenerator", "GENERATED_CODE_VERSION", "GENERATED_HEADER"]
