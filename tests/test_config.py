from __future__ import annotations

import pytest

from proto2py.config import DEFAULT_MODULE_SUFFIX, DEFAULT_RUNTIME_MODULE, GeneratorConfig


def test_generator_config_defaults() -> None:
    config = GeneratorConfig.from_parameter_string(None)
    assert config.runtime_module == DEFAULT_RUNTIME_MODULE == "protoruntime"
    assert config.module_suffix == DEFAULT_MODULE_SUFFIX == "_pb"
    assert config.reserved_identifiers == ()
    assert config.rename_overrides == {}
    assert config.naming_config is None


def test_generator_config_reads_runtime_and_suffix() -> None:
    config = GeneratorConfig.from_parameter_string(
        "runtime_module=vendor.protoruntime, module_suffix=_pb2"
    )

    assert config.runtime_module == "vendor.protoruntime"
    assert config.module_suffix == "_pb2"


def test_generator_config_rejects_invalid_runtime_module() -> None:
    with pytest.raises(ValueError):
        GeneratorConfig.from_parameter_string("runtime_module=not-a-module")


def test_generator_config_rejects_invalid_module_suffix() -> None:
    with pytest.raises(ValueError):
        GeneratorConfig.from_parameter_string("module_suffix=.pb")


def test_generator_config_allows_overriding_reserved_identifiers(tmp_path) -> None:
    reserved_file = tmp_path / "reserved.txt"
    reserved_file.write_text("ExtraType\n# comment\nAnotherType\n", encoding="utf-8")

    parameter = (
        "reserved_identifiers=CustomOne|CustomTwo,"
        "extra_reserved_identifiers=Third,"
        f"reserved_identifiers_file={reserved_file}"
    )

    config = GeneratorConfig.from_parameter_string(parameter)

    assert config.reserved_identifiers == (
        "CustomOne",
        "CustomTwo",
        "Third",
        "ExtraType",
        "AnotherType",
    )


def test_generator_config_parses_rename_overrides(tmp_path) -> None:
    rename_file = tmp_path / "renames.txt"
    rename_file.write_text(
        "physics.Vector:PhysicsVector\nphysics.Color:PhysicsColor\n",
        encoding="utf-8",
    )

    parameter = (
        "rename_overrides=demo.Widget:DemoWidget|demo.Token:DemoToken,"
        f"rename_overrides_file={rename_file}"
    )

    config = GeneratorConfig.from_parameter_string(parameter)

    assert config.rename_overrides == {
        "demo.Widget": "DemoWidget",
        "demo.Token": "DemoToken",
        "physics.Vector": "PhysicsVector",
        "physics.Color": "PhysicsColor",
    }


def test_generator_config_rename_overrides_require_separator() -> None:
    with pytest.raises(ValueError):
        GeneratorConfig.from_parameter_string("rename_overrides=invalid-entry")


def test_generator_config_rename_overrides_require_identifier() -> None:
    with pytest.raises(ValueError):
        GeneratorConfig.from_parameter_string("rename_overrides=demo.Widget:not-valid")
