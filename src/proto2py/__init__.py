"""proto2py package initialization."""

from __future__ import annotations

from . import model

__all__ = [
    "DescriptorLoader",
    "DefaultTemplateRenderer",
    "FileGenerator",
    "GeneratedFile",
    "ITemplateRenderer",
    "GeneratorConfig",
    "model",
    "NativeType",
    "TypeMapper",
]


def __getattr__(name: str):
    if name == "DescriptorLoader":
        from .descriptor_loader import DescriptorLoader

        return DescriptorLoader

    if name in {"DefaultTemplateRenderer", "FileGenerator", "GeneratedFile", "ITemplateRenderer"}:
        from .codegen import DefaultTemplateRenderer, FileGenerator, GeneratedFile, ITemplateRenderer

        mapping = {
            "DefaultTemplateRenderer": DefaultTemplateRenderer,
            "FileGenerator": FileGenerator,
            "GeneratedFile": GeneratedFile,
            "ITemplateRenderer": ITemplateRenderer,
        }
        return mapping[name]

    if name == "GeneratorConfig":
        from .config import GeneratorConfig

        return GeneratorConfig

    if name in {"NativeType", "TypeMapper"}:
        from .type_mapper import NativeType, TypeMapper

        mapping = {"NativeType": NativeType, "TypeMapper": TypeMapper}
        return mapping[name]

    raise AttributeError(name)
