from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("google.protobuf")

from google.protobuf import descriptor_pb2

from proto2py.codegen import generated_filename
from proto2py.tools import generate


def _write_descriptor(tmp_path: Path, *, type_name: str = ".example.Person") -> Path:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "example/person.proto"
    file_proto.package = "example"
    file_proto.syntax = "proto2"

    person_message = file_proto.message_type.add()
    person_message.name = "Person"

    id_field = person_message.field.add()
    id_field.name = "id"
    id_field.number = 1
    id_field.label = descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL
    id_field.type = descriptor_pb2.FieldDescriptorProto.TYPE_INT32

    parent_field = person_message.field.add()
    parent_field.name = "parent"
    parent_field.number = 2
    parent_field.label = descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL
    parent_field.type = descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE
    parent_field.type_name = type_name

    descriptor_set = descriptor_pb2.FileDescriptorSet()
    descriptor_set.file.append(file_proto)

    descriptor_path = tmp_path / "bundle.pb"
    descriptor_path.write_bytes(descriptor_set.SerializeToString())
    return descriptor_path


def test_generate_modules_creates_outputs(tmp_path: Path) -> None:
    descriptor_path = _write_descriptor(tmp_path)
    output_dir = tmp_path / "out"

    generated = generate.generate_modules(descriptor_path, ["example/person.proto"], output_dir)

    module_path = output_dir / Path(generated_filename("example/person.proto"))
    assert generated == [module_path]
    assert module_path.exists()

    module_text = module_path.read_text(encoding="utf-8")
    assert module_text.startswith("# Code generated by proto2py. DO NOT EDIT.\n")
    assert "class Person(proto.Message):" in module_text


def test_generate_modules_passes_parameters(tmp_path: Path) -> None:
    descriptor_path = _write_descriptor(tmp_path)
    output_dir = tmp_path / "out"

    generated = generate.generate_modules(
        descriptor_path, None, output_dir, parameter="module_suffix=_gen"
    )

    assert generated == [output_dir / "example" / "person_gen.py"]


def test_generate_modules_raises_on_errors(tmp_path: Path) -> None:
    descriptor_path = _write_descriptor(tmp_path, type_name=".example.Missing")

    with pytest.raises(generate.GenerationError):
        generate.generate_modules(descriptor_path, None, tmp_path / "out")

    assert not (tmp_path / "out").exists()


def test_main_defaults_to_all_targets(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    descriptor_path = _write_descriptor(tmp_path)
    output_dir = tmp_path / "generated"

    exit_code = generate.main([str(descriptor_path), "--out", str(output_dir)])

    assert exit_code == 0

    captured = capsys.readouterr()
    module_rel = generated_filename("example/person.proto")
    assert str(output_dir / Path(module_rel)) in captured.out
    assert (output_dir / Path(module_rel)).exists()


def test_main_returns_error_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    descriptor_path = _write_descriptor(tmp_path, type_name=".example.Missing")

    exit_code = generate.main([str(descriptor_path), "--out", str(tmp_path / "generated")])

    assert exit_code == 1
    assert capsys.readouterr().out == ""
