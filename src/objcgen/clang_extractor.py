"""libclang-backed extractor.

Parses the header as Objective-C through `clang.cindex` and reads
declarations from the AST instead of from text. Superclasses and protocol
conformances are not read yet; classes come out as roots.
"""

from __future__ import annotations

import logging
from pathlib import Path

from clang.cindex import (
    Config,
    CursorKind,
    Diagnostic,
    Index,
    TranslationUnit,
    TranslationUnitLoadError,
)

from .config import GeneratorSettings
from .doccomments import apply_parameter_docs, parse_doc_comment
from .errors import MalformedSignature, UnreadableInput
from .extractors import Extractor
from .models import (
    ClassModel,
    ExtractionResult,
    MethodModel,
    ParameterModel,
    PropertyModel,
    SourceUnit,
)
from .signatures import clean_type, parse_availability

log = logging.getLogger(__name__)

FRAMEWORKS_DIR = "/System/Library/Frameworks"


def _tokens(cursor) -> list[str]:
    return [token.spelling for token in cursor.get_tokens()]


def _property_attributes(tokens: list[str]) -> list[str]:
    """Attributes from `@property (nonatomic, getter=isOn) ...` tokens."""
    try:
        start = tokens.index("(")
    except ValueError:
        return []
    # `@property` may arrive as one token or as `@` + `property`
    if not any(t.endswith("property") for t in tokens[:start]):
        return []

    attributes: list[str] = []
    current: list[str] = []
    for token in tokens[start + 1 :]:
        if token == ")":
            break
        if token == ",":
            attributes.append("".join(current))
            current = []
        else:
            current.append(token)
    if current:
        attributes.append("".join(current))
    return [a for a in attributes if a]


def _in_file(cursor, path: str) -> bool:
    location = cursor.location.file
    if location is None:
        return False
    return Path(location.name).resolve() == Path(path).resolve()


class ClangExtractor(Extractor):
    """Extractor using the libclang AST."""

    def __init__(self, settings: GeneratorSettings):
        self.settings = settings

    def compiler_args(self) -> list[str]:
        args = ["-x", "objective-c"]
        if self.settings.sdk_root:
            args += ["-isysroot", self.settings.sdk_root]
        args += ["-F", FRAMEWORKS_DIR]
        args += self.settings.clang_args
        return args

    def _index(self) -> Index:
        if self.settings.libclang_path and not Config.loaded:
            Config.set_library_file(self.settings.libclang_path)
        return Index.create()

    def extract(self, unit: SourceUnit) -> ExtractionResult:
        path = unit.path or "input.h"
        try:
            tu = self._index().parse(
                path,
                args=self.compiler_args(),
                unsaved_files=[(path, unit.text)],
                options=TranslationUnit.PARSE_SKIP_FUNCTION_BODIES,
            )
        except TranslationUnitLoadError as e:
            raise UnreadableInput(f"libclang could not parse {path}: {e}", path) from e

        for diagnostic in tu.diagnostics:
            if diagnostic.severity >= Diagnostic.Error:
                log.warning("%s: %s", path, diagnostic.spelling)

        return self.visit_translation_unit(tu.cursor, path)

    def visit_translation_unit(self, root, path: str) -> ExtractionResult:
        """Collect every @interface declared in path itself."""
        result = ExtractionResult()
        for cursor in root.get_children():
            if not _in_file(cursor, path):
                continue
            if cursor.kind == CursorKind.OBJC_INTERFACE_DECL:
                result.add_class(self.visit_interface(cursor, result))
        log.debug("%s: extracted %d classes, skipped %d", path, len(result.classes), result.skipped)
        return result

    def visit_interface(self, cursor, result: ExtractionResult) -> ClassModel:
        cls = ClassModel(
            name=cursor.spelling,
            documentation=parse_doc_comment(cursor.raw_comment).main,
        )
        for child in cursor.get_children():
            try:
                if child.kind == CursorKind.OBJC_INSTANCE_METHOD_DECL:
                    cls.methods.append(self.visit_method(child, is_static=False))
                elif child.kind == CursorKind.OBJC_CLASS_METHOD_DECL:
                    cls.methods.append(self.visit_method(child, is_static=True))
                elif child.kind == CursorKind.OBJC_PROPERTY_DECL:
                    cls.properties.append(self.visit_property(child))
            except MalformedSignature as e:
                log.warning("%s: skipping %s.%s: %s", cls.name, cls.name, child.spelling, e)
                result.skipped += 1
        return cls

    def visit_method(self, cursor, is_static: bool) -> MethodModel:
        return_type, return_nullable = clean_type(cursor.result_type.spelling)
        parameters = []
        for child in cursor.get_children():
            if child.kind != CursorKind.PARM_DECL:
                continue
            param_type, nullable = clean_type(child.type.spelling)
            parameters.append(
                ParameterModel(
                    name=child.spelling or f"arg{len(parameters)}",
                    type=param_type or "id",
                    is_nullable=nullable,
                )
            )

        method = MethodModel(
            selector=cursor.spelling,
            return_type=return_type or "void",
            is_static=is_static,
            parameters=parameters,
            availability=parse_availability("".join(_tokens(cursor))),
            return_nullable=return_nullable,
        )
        method.validate()
        if cursor.raw_comment:
            apply_parameter_docs(method, parse_doc_comment(cursor.raw_comment))
        return method

    def visit_property(self, cursor) -> PropertyModel:
        attributes = _property_attributes(_tokens(cursor))
        prop_type, marked_nullable = clean_type(cursor.type.spelling)
        if not cursor.spelling or not prop_type:
            raise MalformedSignature("Property without a name or type", cursor.spelling)
        return PropertyModel(
            name=cursor.spelling,
            type=prop_type,
            is_readonly="readonly" in attributes,
            is_nullable=(
                marked_nullable
                or "nullable" in attributes
                or "null_resettable" in attributes
            ),
            attributes=attributes,
            documentation=parse_doc_comment(cursor.raw_comment).main,
        )
