from __future__ import annotations

"""Dataclasses representing a resolved protobuf schema in a plugin-friendly format."""

from dataclasses import dataclass, field
from enum import Enum as _Enum
from typing import Any, Dict, List, Optional, Tuple


class Syntax(str, _Enum):
    """Schema syntax of the file declaring an entity."""

    PROTO2 = "proto2"
    PROTO3 = "proto3"


class FieldCardinality(str, _Enum):
    """Cardinality for message fields."""

    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"


class FieldKind(str, _Enum):
    """The closed set of field kinds understood by the generator."""

    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    SINT32 = "sint32"
    SINT64 = "sint64"
    FIXED32 = "fixed32"
    FIXED64 = "fixed64"
    SFIXED32 = "sfixed32"
    SFIXED64 = "sfixed64"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    BYTES = "bytes"
    ENUM = "enum"
    MESSAGE = "message"
    GROUP = "group"

    @property
    def is_message_like(self) -> bool:
        return self in (FieldKind.MESSAGE, FieldKind.GROUP)

    @property
    def is_float(self) -> bool:
        return self in (FieldKind.FLOAT, FieldKind.DOUBLE)


@dataclass(frozen=True, slots=True)
class NativeIdent:
    """A generated identifier and the module that declares it."""

    name: str
    module: str


@dataclass(slots=True)
class EnumValue:
    """Represents a value within an enum."""

    name: str
    number: int
    deprecated: bool = False
    path: Tuple[int, ...] = ()


@dataclass(slots=True)
class Enum:
    """Represents an enum type."""

    name: str
    full_name: str
    ident: NativeIdent
    values: List[EnumValue] = field(default_factory=list)
    syntax: Syntax = Syntax.PROTO2
    deprecated: bool = False
    path: Tuple[int, ...] = ()
    file: Optional[str] = None
    package: Optional[str] = None


@dataclass(eq=False, slots=True)
class Field:
    """Represents a message field or an extension declaration."""

    name: str
    number: int
    cardinality: FieldCardinality
    kind: FieldKind
    native_name: str = ""
    camel_name: str = ""
    type_name: Optional[str] = None
    resolved_type: Optional[ProtoType] = field(default=None, repr=False)
    default_value: Optional[str] = None
    json_name: Optional[str] = None
    oneof: Optional[Oneof] = field(default=None, repr=False)
    wrapper_name: str = ""
    packed: bool = False
    deprecated: bool = False
    syntax: Syntax = Syntax.PROTO2
    path: Tuple[int, ...] = ()
    parent: Optional[Message] = field(default=None, repr=False)
    extendee: Optional[str] = None
    extended_type: Optional[Message] = field(default=None, repr=False)

    @property
    def is_repeated(self) -> bool:
        return self.cardinality is FieldCardinality.REPEATED

    @property
    def is_map(self) -> bool:
        return (
            self.kind is FieldKind.MESSAGE
            and isinstance(self.resolved_type, Message)
            and self.resolved_type.is_map_entry
        )

    @property
    def is_extension(self) -> bool:
        return self.extendee is not None

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    @property
    def message_type(self) -> Optional[Message]:
        if isinstance(self.resolved_type, Message):
            return self.resolved_type
        return None

    @property
    def enum_type(self) -> Optional[Enum]:
        if isinstance(self.resolved_type, Enum):
            return self.resolved_type
        return None


@dataclass(eq=False, slots=True)
class Oneof:
    """Represents a oneof declaration."""

    name: str
    full_name: str
    native_name: str = ""
    camel_name: str = ""
    union_name: str = ""
    fields: List[Field] = field(default_factory=list)


@dataclass(eq=False, slots=True)
class Message:
    """Represents a message type."""

    name: str
    full_name: str
    ident: NativeIdent
    fields: List[Field] = field(default_factory=list)
    nested_messages: List[Message] = field(default_factory=list)
    nested_enums: List[Enum] = field(default_factory=list)
    extensions: List[Field] = field(default_factory=list)
    oneofs: List[Oneof] = field(default_factory=list)
    extension_ranges: List[Tuple[int, int]] = field(default_factory=list)
    is_map_entry: bool = False
    deprecated: bool = False
    message_set_wire_format: bool = False
    syntax: Syntax = Syntax.PROTO2
    path: Tuple[int, ...] = ()
    file: Optional[str] = None


@dataclass(slots=True)
class ProtoFile:
    """Represents a protobuf file and its declarations."""

    name: str
    package: Optional[str]
    module: str
    syntax: Syntax = Syntax.PROTO2
    dependencies: List[str] = field(default_factory=list)
    public_dependencies: List[str] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    extensions: List[Field] = field(default_factory=list)
    deprecated: bool = False
    comments: Dict[Tuple[int, ...], str] = field(default_factory=dict)
    descriptor: Any = None


ProtoType = Message | Enum


def walk_messages(messages: List[Message]):
    """Yield *messages* and all of their descendants in pre-order."""

    for message in messages:
        yield message
        yield from walk_messages(message.nested_messages)
