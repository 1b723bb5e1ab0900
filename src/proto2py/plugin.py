"""Protocol Buffers compiler plugin entry point for proto2py."""
from __future__ import annotations

import logging
import sys
from typing import Iterable, MutableMapping

from google.protobuf.compiler import plugin_pb2

from . import model
from .codegen import CollectingErrorSink, DefaultTemplateRenderer, GeneratedFile, ITemplateRenderer
from .config import GeneratorConfig
from .descriptor_loader import DescriptorLoader

_LOG = logging.getLogger(__name__)


def analyze_descriptors(
    request: plugin_pb2.CodeGeneratorRequest,
    *,
    config: GeneratorConfig | None = None,
) -> MutableMapping[str, model.ProtoFile]:
    """Normalize descriptors into the proto2py intermediate model."""

    loader = DescriptorLoader(request, config=config)
    return loader.load()


def generate_code(
    request: plugin_pb2.CodeGeneratorRequest,
    *,
    renderer: ITemplateRenderer | None = None,
) -> plugin_pb2.CodeGeneratorResponse:
    """Run the proto2py pipeline and return a populated response message.

    Invalid parameters, unresolved references and reported generation errors
    end up in ``response.error`` rather than raising.
    """

    response = plugin_pb2.CodeGeneratorResponse()
    try:
        config = GeneratorConfig.from_parameter_string(request.parameter)
        loader = DescriptorLoader(request, config=config)
        files = loader.load()
    except (KeyError, ValueError, TypeError, OSError) as exc:
        _LOG.warning("Failed to load request: %s", exc)
        response.error = str(exc)
        return response

    files_to_generate = loader.files_to_generate
    if not files_to_generate:
        files_to_generate = list(files.keys())

    error_sink = CollectingErrorSink()
    if renderer is None:
        renderer = DefaultTemplateRenderer(config=config, error_sink=error_sink, files=files)

    try:
        for file_name in files_to_generate:
            proto_file = loader.get_file(file_name)
            generated_files: Iterable[GeneratedFile] = renderer.render(proto_file)
            for generated in generated_files:
                response_file = response.file.add()
                response_file.name = generated.name
                response_file.content = generated.content
                _LOG.debug("Rendered %s from %s", generated.name, file_name)
    except (KeyError, ValueError) as exc:
        _LOG.warning("Failed to generate code: %s", exc)
        response.error = str(exc)
        return response

    if error_sink.has_errors():
        response.error = "\n".join(error_sink.errors)
    return response


def main() -> None:
    """Execute the protoc plugin workflow."""

    request_payload = sys.stdin.buffer.read()

    request = plugin_pb2.CodeGeneratorRequest()
    if request_payload:
        request.ParseFromString(request_payload)

    response = generate_code(request)
    sys.stdout.buffer.write(response.SerializeToString())


if __name__ == "__main__":  # pragma: no cover - convenience execution entry.
    main()
