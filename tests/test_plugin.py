from __future__ import annotations

import io
import sys

import pytest

pytest.importorskip("google.protobuf")

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from proto2py import plugin
from proto2py.codegen import GeneratedFile
from proto2py.plugin import analyze_descriptors, generate_code

_Field = descriptor_pb2.FieldDescriptorProto


def _build_request(parameter: str | None = None) -> plugin_pb2.CodeGeneratorRequest:
    common = descriptor_pb2.FileDescriptorProto(
        name="demo/common.proto", package="demo", syntax="proto3"
    )
    status = common.enum_type.add(name="Status")
    status.value.add(name="STATUS_UNKNOWN", number=0)
    status.value.add(name="STATUS_OK", number=1)

    order = descriptor_pb2.FileDescriptorProto(
        name="demo/order.proto", package="demo", syntax="proto3"
    )
    order.dependency.append("demo/common.proto")
    message = order.message_type.add(name="Order")
    message.field.add(name="id", number=1, label=_Field.LABEL_OPTIONAL, type=_Field.TYPE_INT64)
    message.field.add(
        name="status",
        number=2,
        label=_Field.LABEL_OPTIONAL,
        type=_Field.TYPE_ENUM,
        type_name=".demo.Status",
    )
    message.field.add(
        name="line_ids", number=3, label=_Field.LABEL_REPEATED, type=_Field.TYPE_UINT32
    )

    request = plugin_pb2.CodeGeneratorRequest()
    request.proto_file.extend([common, order])
    request.file_to_generate.append("demo/order.proto")
    if parameter is not None:
        request.parameter = parameter
    return request


def test_generate_code_renders_requested_files_only() -> None:
    response = generate_code(_build_request())

    assert not response.error
    assert [file.name for file in response.file] == ["demo/order_pb.py"]
    content = response.file[0].content
    assert "import demo.common_pb as demo_dot_common__pb" in content
    assert (
        "    status: demo_dot_common__pb.Status = dataclasses.field("
        "default=demo_dot_common__pb.Status.STATUS_UNKNOWN, metadata="
        '{"protobuf": "varint,2,opt,name=status,proto3,enum=demo.Status", "json": "status,omitempty"})'
    ) in content
    assert '"protobuf": "varint,3,rep,packed,name=line_ids,json=lineIds,proto3"' in content
    assert '"protobuf": "varint,1,opt,name=id,proto3"' in content


def test_generate_code_is_deterministic() -> None:
    first = generate_code(_build_request())
    second = generate_code(_build_request())

    assert first.SerializeToString(deterministic=True) == second.SerializeToString(deterministic=True)


def test_generate_code_applies_parameters() -> None:
    response = generate_code(_build_request("runtime_module=acme.protort,module_suffix=_pb2"))

    assert not response.error
    assert [file.name for file in response.file] == ["demo/order_pb2.py"]
    content = response.file[0].content
    assert "from acme.protort import proto" in content
    assert "import demo.common_pb2 as demo_dot_common__pb2" in content


def test_generate_code_reports_invalid_parameters() -> None:
    response = generate_code(_build_request("runtime_module=not a module"))

    assert response.error
    assert not response.file


def test_generate_code_reports_unresolved_types() -> None:
    request = _build_request()
    request.proto_file[1].message_type[0].field[1].type_name = ".demo.Missing"

    response = generate_code(request)

    assert "demo.Missing" in response.error
    assert not response.file


def test_generate_code_uses_custom_renderer() -> None:
    rendered: list[str] = []

    class _Renderer:
        def render(self, proto_file):
            rendered.append(proto_file.name)
            return [GeneratedFile(name="custom.txt", content=proto_file.package or "")]

    response = generate_code(_build_request(), renderer=_Renderer())

    assert rendered == ["demo/order.proto"]
    assert [(file.name, file.content) for file in response.file] == [("custom.txt", "demo")]


def test_analyze_descriptors_returns_model_files() -> None:
    files = analyze_descriptors(_build_request())

    assert set(files) == {"demo/common.proto", "demo/order.proto"}
    assert files["demo/order.proto"].messages[0].fields[1].enum_type is files["demo/common.proto"].enums[0]


def test_main_reads_stdin_and_writes_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = _build_request().SerializeToString()
    stdout = io.BytesIO()
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(payload)))
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(stdout))

    plugin.main()

    response = plugin_pb2.CodeGeneratorResponse.FromString(stdout.getvalue())
    assert [file.name for file in response.file] == ["demo/order_pb.py"]
