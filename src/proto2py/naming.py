"""Name resolution utilities used across proto2py generators."""

from __future__ import annotations

import json
import keyword
import os
from dataclasses import dataclass
from importlib import resources
from typing import Dict, Iterable, Mapping, MutableMapping, Optional, Sequence, Set

_DEFAULT_RESOURCE_PACKAGE = "proto2py.data"
_DEFAULT_CONFIG_RESOURCE = "naming_config.json"
_ENV_CONFIG_PATH = "PROTO2PY_NAMING_CONFIG"

# Attribute names a generated message class already uses for itself.
MESSAGE_METHOD_NAMES = frozenset(
    {
        "reset",
        "descriptor",
        "extension_range_array",
        "marshal_json",
        "unmarshal_json",
        "xxx_internal_extensions",
        "xxx_unrecognized",
        "xxx_sizecache",
        "xxx_unmarshal",
        "xxx_marshal",
        "xxx_merge",
        "xxx_size",
        "xxx_discard_unknown",
        "xxx_oneof_wrappers",
        "xxx_well_known_type",
    }
)


# Module-level names a generated message class body reads while it is built.
CLASS_BODY_NAMES = frozenset(
    {
        "proto",
        "dataclasses",
        "enum",
        "math",
        "typing",
        "bool",
        "bytes",
        "float",
        "int",
        "str",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "float32",
        "float64",
        "register_types",
        "register_file_descriptor",
        "staticmethod",
        "classmethod",
    }
)


def _load_json_from_path(path: str) -> Mapping[str, object]:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _load_default_json() -> Mapping[str, object]:
    data_path = resources.files(_DEFAULT_RESOURCE_PACKAGE) / _DEFAULT_CONFIG_RESOURCE
    with data_path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def camel_case(name: str) -> str:
    """Convert a schema name into the CamelCase identifier fragment.

    ``foo_bar`` becomes ``FooBar`` and ``Outer.Inner`` becomes ``Outer_Inner``.
    A leading underscore turns into ``X`` so the result always starts with a
    capital letter.
    """

    out: list[str] = []
    i = 0
    length = len(name)
    while i < length:
        c = name[i]
        nxt = name[i + 1] if i + 1 < length else ""
        if c == "." and nxt.islower() and nxt.isascii():
            pass
        elif c == ".":
            out.append("_")
        elif c == "_" and (i == 0 or name[i - 1] == "."):
            out.append("X")
        elif c == "_" and nxt.islower() and nxt.isascii():
            pass
        elif c.isdigit() and c.isascii():
            out.append(c)
        else:
            if c.islower() and c.isascii():
                c = c.upper()
            out.append(c)
            while i + 1 < length and name[i + 1].islower() and name[i + 1].isascii():
                i += 1
                out.append(name[i])
        i += 1
    return "".join(out)


def escape_identifier(name: str) -> str:
    """Return *name* suffixed with ``_`` when it is a Python keyword."""

    if keyword.iskeyword(name):
        return f"{name}_"
    return name


ENUM_METHOD_NAMES = frozenset(
    {"name", "value", "enum", "enum_descriptor", "unmarshal_json", "xxx_well_known_type"}
)


def enum_member_name(name: str) -> str:
    """Member name used for an enum value on a generated enum class."""

    escaped = escape_identifier(name)
    if escaped in ENUM_METHOD_NAMES:
        return f"{escaped}_"
    return escaped


def field_attribute_name(name: str) -> str:
    """Attribute name used for a field or oneof on a generated message class."""

    escaped = escape_identifier(name)
    if (
        escaped in MESSAGE_METHOD_NAMES
        or escaped in CLASS_BODY_NAMES
        or escaped.startswith("get_")
    ):
        return f"{escaped}_"
    return escaped


def module_for_file(proto_name: str, suffix: str) -> str:
    """Dotted module path of the generated module for *proto_name*."""

    base = proto_name[:-6] if proto_name.endswith(".proto") else proto_name
    segments = [segment.replace("-", "_").replace(".", "_") for segment in base.split("/")]
    return ".".join(segments) + suffix


def module_alias(module: str) -> str:
    """Local alias used when importing *module* into another generated module."""

    return module.replace("_", "__").replace(".", "_dot_")


@dataclass(frozen=True, slots=True)
class NamingRules:
    """Configuration describing how native names are assigned."""

    reserved_symbols: frozenset[str]
    overrides: Mapping[str, str]
    collision_suffix: str = "_"

    def with_overrides(self, overrides: Mapping[str, str]) -> "NamingRules":
        merged: Dict[str, str] = dict(self.overrides)
        merged.update({key: value for key, value in overrides.items() if value})
        return NamingRules(
            reserved_symbols=self.reserved_symbols,
            overrides=merged,
            collision_suffix=self.collision_suffix,
        )


def load_naming_rules(path: Optional[str] = None) -> NamingRules:
    """Load :class:`NamingRules` from *path* or bundled defaults.

    If *path* is ``None`` the environment variable ``PROTO2PY_NAMING_CONFIG`` is
    consulted before falling back to the packaged defaults.
    """

    config_path = path or os.environ.get(_ENV_CONFIG_PATH)
    if config_path:
        data = _load_json_from_path(config_path)
    else:
        data = _load_default_json()

    reserved = data.get("reserved_symbols", [])
    if not isinstance(reserved, Sequence) or isinstance(reserved, str):
        raise TypeError("'reserved_symbols' must be a sequence of strings")
    reserved_set: Set[str] = set()
    for entry in reserved:
        if not isinstance(entry, str):
            raise TypeError("Reserved symbol entries must be strings")
        stripped = entry.strip()
        if stripped:
            reserved_set.add(stripped)

    overrides_raw = data.get("overrides", {})
    if not isinstance(overrides_raw, Mapping):
        raise TypeError("'overrides' must be a mapping of proto names to native names")
    overrides: Dict[str, str] = {}
    for key, value in overrides_raw.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("Override keys and values must be strings")
        key_stripped = key.strip()
        value_stripped = value.strip()
        if key_stripped and value_stripped:
            overrides[key_stripped] = value_stripped

    collision_suffix = data.get("collision_suffix", "_")
    if not isinstance(collision_suffix, str) or not collision_suffix:
        collision_suffix = "_"

    return NamingRules(
        reserved_symbols=frozenset(reserved_set),
        overrides=overrides,
        collision_suffix=collision_suffix,
    )


class NameResolver:
    """Assign module-level identifiers for one generated module.

    Every generated module gets its own resolver so names only have to be
    unique within the module that declares them.
    """

    def __init__(
        self,
        rules: NamingRules,
        *,
        additional_reserved: Optional[Iterable[str]] = None,
    ) -> None:
        self._rules = rules
        self._symbols: MutableMapping[str, str] = {}
        reserved: Set[str] = set(rules.reserved_symbols)
        if additional_reserved is not None:
            for entry in additional_reserved:
                if not isinstance(entry, str):
                    continue
                stripped = entry.strip()
                if stripped:
                    reserved.add(stripped)
        self._reserved = reserved

    def register(self, full_name: str, candidate: str) -> str:
        """Register *full_name* and return its native identifier."""

        if full_name in self._symbols:
            return self._symbols[full_name]

        override = self._rules.overrides.get(full_name)
        if override:
            if override in self._reserved:
                raise ValueError(
                    f"Override '{override}' for type '{full_name}' conflicts with an existing symbol"
                )
            self._reserved.add(override)
            self._symbols[full_name] = override
            return override

        unique = self.claim(candidate)
        self._symbols[full_name] = unique
        return unique

    def claim(self, candidate: str) -> str:
        """Reserve and return *candidate*, suffixed until it is unused."""

        while not self._is_available(candidate):
            candidate += self._rules.collision_suffix
        self._reserved.add(candidate)
        return candidate

    def reserve(self, name: str) -> None:
        self._reserved.add(name)

    def lookup(self, full_name: str) -> str:
        """Return the resolved identifier for *full_name*."""

        try:
            return self._symbols[full_name]
        except KeyError as exc:
            raise KeyError(f"Type '{full_name}' has not been registered") from exc

    def _is_available(self, name: str) -> bool:
        return name not in self._reserved


__all__ = [
    "CLASS_BODY_NAMES",
    "ENUM_METHOD_NAMES",
    "MESSAGE_METHOD_NAMES",
    "NameResolver",
    "NamingRules",
    "camel_case",
    "enum_member_name",
    "escape_identifier",
    "field_attribute_name",
    "load_naming_rules",
    "module_alias",
    "module_for_file",
]
