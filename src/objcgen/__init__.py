"""objcgen - Python binding generator for Objective-C headers."""

from objcgen.config import GeneratorSettings
from objcgen.errors import (
    MalformedClassHeader,
    MalformedSignature,
    ObjCGenError,
    UnreadableInput,
    UnresolvedOverload,
    UnwritableOutput,
)
from objcgen.extractors import Extractor, TextExtractor, extract_single_method, get_extractor
from objcgen.generators import generate_class_module, method_to_dict, write_class_modules
from objcgen.models import (
    ClassModel,
    ExtractionResult,
    MethodModel,
    OverloadGroup,
    ParameterModel,
    PropertyModel,
    SourceUnit,
)
from objcgen.overloads import dispatch_selector, group_overloads, initializer_group
from objcgen.reflow import reflow_path, reflow_source
from objcgen.signatures import (
    parse_class_header,
    parse_method_signature,
    parse_property_declaration,
)
from objcgen.typemap import Mapped, Opaque, map_type, render_type

__all__ = [
    "GeneratorSettings",
    "ObjCGenError",
    "MalformedSignature",
    "MalformedClassHeader",
    "UnresolvedOverload",
    "UnreadableInput",
    "UnwritableOutput",
    "Extractor",
    "TextExtractor",
    "extract_single_method",
    "get_extractor",
    "generate_class_module",
    "method_to_dict",
    "write_class_modules",
    "ClassModel",
    "ExtractionResult",
    "MethodModel",
    "OverloadGroup",
    "ParameterModel",
    "PropertyModel",
    "SourceUnit",
    "dispatch_selector",
    "group_overloads",
    "initializer_group",
    "reflow_path",
    "reflow_source",
    "parse_class_header",
    "parse_method_signature",
    "parse_property_declaration",
    "Mapped",
    "Opaque",
    "map_type",
    "render_type",
]
