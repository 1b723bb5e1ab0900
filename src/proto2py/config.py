"""Configuration helpers for proto2py code generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

DEFAULT_RUNTIME_MODULE = "protoruntime"
DEFAULT_MODULE_SUFFIX = "_pb"

# Inline list values may use any of these separators besides ",".
_LIST_SEPARATORS = ("|", ";")


def _parse_parameter_string(parameter: str | None) -> Dict[str, str]:
    """Split ``key=value,flag`` into a mapping; bare flags map to ``"true"``."""

    result: Dict[str, str] = {}
    for piece in (parameter or "").split(","):
        piece = piece.strip()
        if not piece:
            continue
        key, sep, value = piece.partition("=")
        result[key.strip().lower()] = value.strip() if sep else "true"
    return result


def _split_list(raw: str) -> List[str]:
    for separator in _LIST_SEPARATORS:
        raw = raw.replace(separator, ",")
    return [token.strip() for token in raw.split(",") if token.strip()]


def _read_list_file(path_value: str) -> List[str]:
    """Read one entry per line, skipping blanks and ``#`` comments."""

    lines = Path(path_value).expanduser().read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.strip().startswith("#")]


def _collect_entries(
    overrides: Mapping[str, str],
    inline_keys: Sequence[str],
    file_key: str,
) -> List[str]:
    entries: List[str] = []
    for key in inline_keys:
        if overrides.get(key):
            entries.extend(_split_list(overrides[key]))
    if overrides.get(file_key):
        entries.extend(_read_list_file(overrides[file_key]))
    return entries


def _parse_rename_entries(entries: Iterable[str]) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for entry in entries:
        proto_name, sep, native_name = entry.partition(":")
        if not sep:
            raise ValueError(
                "Rename override entries must use the form 'full.proto.Name:NativeName'"
            )
        proto_key, native_value = proto_name.strip(), native_name.strip()
        if not proto_key or not native_value:
            raise ValueError(
                "Rename override entries must include both a proto name and a native name"
            )
        if not native_value.isidentifier():
            raise ValueError(
                f"Rename override for '{proto_key}' is not a valid identifier: '{native_value}'"
            )
        mapping[proto_key] = native_value
    return mapping


def _validate_module_path(value: str, *, option: str) -> str:
    if not value or not all(part.isidentifier() for part in value.split(".")):
        raise ValueError(f"'{option}' must be a dotted module path, got '{value}'")
    return value


@dataclass(slots=True)
class GeneratorConfig:
    """Runtime configuration for proto2py generation.

    ``runtime_module`` is the package generated modules import ``proto`` from
    and ``module_suffix`` is appended to every generated module name.
    """

    runtime_module: str = DEFAULT_RUNTIME_MODULE
    module_suffix: str = DEFAULT_MODULE_SUFFIX
    reserved_identifiers: Tuple[str, ...] = ()
    rename_overrides: Dict[str, str] = field(default_factory=dict)
    naming_config: str | None = None

    @classmethod
    def from_parameter_string(cls, parameter: str | None) -> "GeneratorConfig":
        """Build a config from the parameter string protoc passes to the plugin.

        Raises :class:`ValueError` for malformed values and :class:`OSError`
        when a referenced list file cannot be read.
        """

        overrides = _parse_parameter_string(parameter)

        runtime_module = _validate_module_path(
            overrides.get("runtime_module") or DEFAULT_RUNTIME_MODULE,
            option="runtime_module",
        )

        module_suffix = overrides.get("module_suffix", DEFAULT_MODULE_SUFFIX)
        if module_suffix and not f"m{module_suffix}".isidentifier():
            raise ValueError(f"'module_suffix' must be identifier characters, got '{module_suffix}'")

        reserved = _collect_entries(
            overrides,
            ("reserved_identifiers", "extra_reserved_identifiers"),
            "reserved_identifiers_file",
        )
        renames = _collect_entries(overrides, ("rename_overrides",), "rename_overrides_file")

        return cls(
            runtime_module=runtime_module,
            module_suffix=module_suffix,
            reserved_identifiers=tuple(dict.fromkeys(reserved)),
            rename_overrides=_parse_rename_entries(renames),
            naming_config=overrides.get("naming_config") or None,
        )


__all__ = ["DEFAULT_MODULE_SUFFIX", "DEFAULT_RUNTIME_MODULE", "GeneratorConfig"]
