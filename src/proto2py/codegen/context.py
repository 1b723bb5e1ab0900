"""Shared state handed to the per-entity emitters of one generated module."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from .. import model
from ..config import GeneratorConfig
from ..type_mapper import TypeMapper

# Names of messages and enums that get an ``xxx_well_known_type`` marker.
WELL_KNOWN_TYPES = frozenset(
    {
        "google.protobuf.Any",
        "google.protobuf.Duration",
        "google.protobuf.Empty",
        "google.protobuf.Struct",
        "google.protobuf.Timestamp",
        "google.protobuf.BoolValue",
        "google.protobuf.BytesValue",
        "google.protobuf.DoubleValue",
        "google.protobuf.FloatValue",
        "google.protobuf.Int32Value",
        "google.protobuf.Int64Value",
        "google.protobuf.ListValue",
        "google.protobuf.NullValue",
        "google.protobuf.StringValue",
        "google.protobuf.UInt32Value",
        "google.protobuf.UInt64Value",
        "google.protobuf.Value",
    }
)

# FileDescriptorProto.package
PACKAGE_COMMENT_PATH: Tuple[int, ...] = (2,)


class ErrorSink(Protocol):
    """Receives errors that do not stop the generation of a file."""

    def report(self, message: str) -> None:
        ...


class CollectingErrorSink:
    """Error sink keeping every reported message in order."""

    def __init__(self) -> None:
        self._errors: List[str] = []

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    def report(self, message: str) -> None:
        self._errors.append(message)

    def has_errors(self) -> bool:
        return bool(self._errors)


def descriptor_var_name(path: str) -> str:
    """Name of the module variable holding the gzipped descriptor of *path*."""

    digest = hashlib.sha256(path.encode("utf-8")).digest()
    return f"fileDescriptor_{digest[:8].hex()}"


@dataclass(slots=True)
class FileContext:
    """Everything an emitter needs to know about the module being generated."""

    proto_file: model.ProtoFile
    config: GeneratorConfig
    mapper: TypeMapper
    error_sink: ErrorSink
    dependencies: Dict[str, model.ProtoFile] = field(default_factory=dict)
    descriptor_var: str = ""
    uses_math: bool = False
    all_enums: List[model.Enum] = field(default_factory=list)
    all_messages: List[model.Message] = field(default_factory=list)
    all_extensions: List[model.Field] = field(default_factory=list)

    def comment_lines(self, path: Sequence[int], indent: str = "") -> List[str]:
        """Return the leading comment attached to *path* as ``#`` lines."""

        text: Optional[str] = self.proto_file.comments.get(tuple(path))
        if text is None:
            return []
        if text.endswith("\n"):
            text = text[:-1]
        return [f"{indent}#{line}".rstrip() for line in text.split("\n")]

    @staticmethod
    def descriptor_indexes(path: Sequence[int]) -> str:
        """Render the descriptor index list of an entity declared at *path*."""

        return ", ".join(str(path[i]) for i in range(1, len(path), 2))


def quote(text: str) -> str:
    """Return *text* as a double-quoted Python string literal."""

    return json.dumps(text, ensure_ascii=False)


def deprecation_comment(indent: str = "") -> str:
    return f"{indent}# Deprecated: Do not use."


__all__ = [
    "CollectingErrorSink",
    "ErrorSink",
    "FileContext",
    "PACKAGE_COMMENT_PATH",
    "WELL_KNOWN_TYPES",
    "deprecation_comment",
    "descriptor_var_name",
    "quote",
]
