from __future__ import annotations

"""Command-line helper generating modules from a descriptor set without protoc."""

import argparse
import logging
from pathlib import Path
from typing import List, Sequence

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from proto2py.plugin import generate_code

_LOG = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Raised when the generator reports an error for the request."""


def _build_request(
    descriptor_set: descriptor_pb2.FileDescriptorSet,
    targets: Sequence[str] | None,
    parameter: str | None,
) -> plugin_pb2.CodeGeneratorRequest:
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter or "")
    request.proto_file.extend(descriptor_set.file)
    names = list(targets) if targets else [entry.name for entry in descriptor_set.file]
    request.file_to_generate.extend(names)
    return request


def generate_modules(
    descriptor_set_path: Path | str,
    targets: Sequence[str] | None,
    output_dir: Path | str,
    *,
    parameter: str | None = None,
) -> List[Path]:
    """Write the modules generated for *targets* below *output_dir*.

    *descriptor_set_path* names a serialized ``FileDescriptorSet`` such as
    ``protoc --descriptor_set_out --include_imports`` writes. ``None`` targets
    generate every file in the set. *parameter* is the plugin parameter
    string. Returns the written paths in generation order.
    """

    descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(
        Path(descriptor_set_path).read_bytes()
    )
    response = generate_code(_build_request(descriptor_set, targets, parameter))
    if response.error:
        raise GenerationError(response.error)

    written: List[Path] = []
    for generated in response.file:
        destination = Path(output_dir) / generated.name
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(generated.content, encoding="utf-8")
        _LOG.debug("Wrote %s", destination)
        written.append(destination)
    return written


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate proto2py modules from a descriptor set produced by protoc."
    )
    parser.add_argument(
        "descriptor_set",
        type=Path,
        help="FileDescriptorSet written by protoc --descriptor_set_out",
    )
    parser.add_argument(
        "--proto",
        dest="protos",
        action="append",
        help="Schema file to generate, as named in the set (repeatable; default: every file)",
    )
    parser.add_argument(
        "--out",
        dest="output",
        required=True,
        type=Path,
        help="Directory receiving the generated modules",
    )
    parser.add_argument(
        "--parameter",
        default=None,
        help="Generator parameter string, e.g. 'runtime_module=myproto,module_suffix=_pb2'",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point used by ``python -m proto2py.tools.generate``."""

    args = _build_argument_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        written = generate_modules(
            args.descriptor_set, args.protos, args.output, parameter=args.parameter
        )
    except GenerationError as exc:
        _LOG.error("%s", exc)
        return 1

    for path in written:
        print(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
