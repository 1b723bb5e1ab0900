"""Code generation backends that turn model files into Python modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Protocol

from .. import model
from ..config import DEFAULT_MODULE_SUFFIX, GeneratorConfig
from ..naming import module_for_file
from .context import CollectingErrorSink, ErrorSink
from .file import FileGenerator


@dataclass(frozen=True, slots=True)
class GeneratedFile:
    """A generated output file ready to be handed back to protoc."""

    name: str
    content: str


class ITemplateRenderer(Protocol):
    """Renders the generated files for one schema file."""

    def render(self, proto_file: model.ProtoFile) -> Iterable[GeneratedFile]:
        ...


def generated_filename(proto_name: str, suffix: str = DEFAULT_MODULE_SUFFIX) -> str:
    """Return the output path of the module generated for *proto_name*.

    ``example/person.proto`` becomes ``example/person_pb.py``.
    """

    return module_for_file(proto_name, suffix).replace(".", "/") + ".py"


class DefaultTemplateRenderer:
    """Render one Python module per schema file."""

    def __init__(
        self,
        *,
        config: GeneratorConfig | None = None,
        error_sink: Optional[ErrorSink] = None,
        files: Optional[Mapping[str, model.ProtoFile]] = None,
    ) -> None:
        self._config = config or GeneratorConfig()
        self._error_sink = error_sink if error_sink is not None else CollectingErrorSink()
        self._files = files or {}

    @property
    def error_sink(self) -> ErrorSink:
        return self._error_sink

    def render(self, proto_file: model.ProtoFile) -> List[GeneratedFile]:
        dependencies = {
            name: self._files[name] for name in proto_file.dependencies if name in self._files
        }
        generator = FileGenerator(
            proto_file,
            config=self._config,
            error_sink=self._error_sink,
            dependencies=dependencies,
        )
        content = generator.generate()
        name = generated_filename(proto_file.name, self._config.module_suffix)
        return [GeneratedFile(name=name, content=content)]


__all__ = [
    "CollectingErrorSink",
    "DefaultTemplateRenderer",
    "ErrorSink",
    "FileGenerator",
    "GeneratedFile",
    "ITemplateRenderer",
    "generated_filename",
]
