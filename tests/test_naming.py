from pathlib import Path
import json

import pytest

from proto2py.naming import (
    NameResolver,
    camel_case,
    enum_member_name,
    field_attribute_name,
    load_naming_rules,
    module_alias,
    module_for_file,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("foo_bar", "FooBar"),
        ("Person", "Person"),
        ("Person.Attributes", "Person_Attributes"),
        ("_private", "XPrivate"),
        ("field2_name", "Field2Name"),
        ("Outer.inner", "OuterInner"),
    ],
)
def test_camel_case(name: str, expected: str) -> None:
    assert camel_case(name) == expected


def test_field_attribute_name_escapes_keywords_and_method_names() -> None:
    assert field_attribute_name("id") == "id"
    assert field_attribute_name("class") == "class_"
    assert field_attribute_name("reset") == "reset_"
    assert field_attribute_name("get_value") == "get_value_"


@pytest.mark.parametrize(
    "name", ["proto", "dataclasses", "typing", "int32", "staticmethod", "classmethod"]
)
def test_field_attribute_name_escapes_names_read_by_class_body(name: str) -> None:
    assert field_attribute_name(name) == f"{name}_"


def test_enum_member_name_escapes_keywords_and_enum_attributes() -> None:
    assert enum_member_name("RED") == "RED"
    assert enum_member_name("None") == "None_"
    assert enum_member_name("name") == "name_"


def test_module_paths_and_aliases() -> None:
    assert module_for_file("example/person.proto", "_pb") == "example.person_pb"
    assert module_for_file("demo/foo-bar.v1.proto", "_pb") == "demo.foo_bar_v1_pb"
    assert module_alias("example.person_pb") == "example_dot_person__pb"


def test_name_resolver_avoids_reserved_and_collisions(tmp_path: Path) -> None:
    config_path = tmp_path / "naming.json"
    config_path.write_text(
        json.dumps(
            {
                "reserved_symbols": ["Vector"],
                "collision_suffix": "_",
                "overrides": {},
            }
        )
    )

    rules = load_naming_rules(str(config_path))
    resolver = NameResolver(rules)

    name_a = resolver.register("math.Vector", "Vector")
    assert name_a == "Vector_"

    name_b = resolver.register("math.Vector2", "Vector2")
    assert name_b == "Vector2"

    # Re-registering should be idempotent
    assert resolver.register("math.Vector", "Vector") == name_a
    assert resolver.lookup("math.Vector2") == "Vector2"
    assert resolver.claim("Vector2") == "Vector2_"


def test_name_resolver_respects_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "naming.json"
    config_path.write_text(
        json.dumps(
            {
                "reserved_symbols": ["DemoType"],
                "collision_suffix": "_",
                "overrides": {"demo.Type": "DemoType"},
            }
        )
    )

    rules = load_naming_rules(str(config_path))
    resolver = NameResolver(rules)

    with pytest.raises(ValueError):
        resolver.register("demo.Type", "Type")


def test_load_naming_rules_rejects_malformed_config(tmp_path: Path) -> None:
    config_path = tmp_path / "naming.json"
    config_path.write_text(json.dumps({"reserved_symbols": "proto"}))

    with pytest.raises(TypeError):
        load_naming_rules(str(config_path))


def test_default_naming_rules_reserve_generated_module_names() -> None:
    rules = load_naming_rules()

    assert {"proto", "typing", "dataclasses", "int32", "register_types"} <= rules.reserved_symbols
    assert rules.collision_suffix == "_"
