"""Declaration extractors for Objective-C headers."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .doccomments import apply_parameter_docs, parse_doc_comment
from .errors import MalformedClassHeader, MalformedSignature, UnreadableInput
from .models import ClassModel, ExtractionResult, MethodModel, SourceUnit
from .signatures import parse_class_header, parse_method_signature, parse_property_declaration

if TYPE_CHECKING:
    from .config import GeneratorSettings

log = logging.getLogger(__name__)


class Extractor(ABC):
    """Turns header text into an ExtractionResult."""

    @abstractmethod
    def extract(self, unit: SourceUnit) -> ExtractionResult:
        """Extract every class declared in unit.

        Malformed members and class headers are logged, counted in
        `ExtractionResult.skipped` and otherwise ignored.
        """

    def extract_path(self, path: Path) -> ExtractionResult:
        try:
            text = Path(path).read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise UnreadableInput(f"Cannot read {path}: {e}", str(path)) from e
        return self.extract(SourceUnit(text=text, path=str(path)))


class LineKind(Enum):
    BLANK = "blank"
    DOC_OPEN = "doc_open"  # /*! or /**
    COMMENT_OPEN = "comment_open"  # plain /*
    LINE_DOC = "line_doc"  # ///
    LINE_COMMENT = "line_comment"
    INTERFACE = "interface"
    PROTOCOL = "protocol"
    PROTOCOL_FORWARD = "protocol_forward"
    IMPLEMENTATION = "implementation"
    END = "end"
    PROPERTY = "property"
    METHOD = "method"
    BRACE_OPEN = "brace_open"
    OTHER = "other"


class State(Enum):
    NEUTRAL = "neutral"
    DOC_COMMENT = "doc_comment"
    COMMENT = "comment"
    IN_CLASS = "in_class"
    SKIPPED_BLOCK = "skipped_block"  # @protocol / @implementation bodies


_FORWARD_PROTOCOL_RE = re.compile(r"^@protocol\s+\w+(\s*,\s*\w+)*\s*;")

# Availability and attribute macros that may sit between a doc comment and its declaration
_ATTRIBUTE_LINE_RE = re.compile(r"^(?:[A-Z_][A-Z0-9_]*|__attribute__)\s*\(.*\)\s*;?$")


def classify_line(line: str) -> LineKind:
    """Classify one header line by its leading token."""
    line = line.strip()
    if not line:
        return LineKind.BLANK
    if line.startswith(("/*!", "/**")) and not line.startswith("/**/"):
        return LineKind.DOC_OPEN
    if line.startswith("/*"):
        return LineKind.COMMENT_OPEN
    if line.startswith("///"):
        return LineKind.LINE_DOC
    if line.startswith("//"):
        return LineKind.LINE_COMMENT
    if line.startswith("@interface"):
        return LineKind.INTERFACE
    if line.startswith("@protocol"):
        if _FORWARD_PROTOCOL_RE.match(line):
            return LineKind.PROTOCOL_FORWARD
        return LineKind.PROTOCOL
    if line.startswith("@implementation"):
        return LineKind.IMPLEMENTATION
    if line.startswith("@end"):
        return LineKind.END
    if line.startswith("@property"):
        return LineKind.PROPERTY
    if line[0] in "+-":
        return LineKind.METHOD
    if line.startswith("{"):
        return LineKind.BRACE_OPEN
    return LineKind.OTHER


def _collect_declaration(lines: list[str], start: int) -> tuple[str, int]:
    """Join lines from start until a `;`. Returns (declaration, next index)."""
    parts = [lines[start].strip()]
    index = start + 1
    while ";" not in parts[-1] and index < len(lines):
        parts.append(lines[index].strip())
        index += 1
    declaration = " ".join(p for p in parts if p)
    if ";" in declaration:
        declaration = declaration[: declaration.index(";") + 1]
    return declaration, index


def _collect_class_header(lines: list[str], start: int) -> tuple[str, int]:
    """Join an @interface line with the lines continuing its superclass or
    protocol list. Returns (header, next index)."""
    header = lines[start].strip()
    index = start + 1
    while index < len(lines) and "{" not in header:
        following = lines[index].strip()
        open_angles = header.count("<") > header.count(">")
        open_parens = header.count("(") > header.count(")")
        if not (open_angles or open_parens or following.startswith(("<", ":"))):
            break
        header = f"{header} {following}"
        index += 1
    return header, index


class TextExtractor(Extractor):
    """Line-oriented extractor driven by a small state machine.

    Recognizes @interface blocks (including categories and class
    extensions), @property and method declarations spanning several
    lines, and `/*! */`, `/** */` and `///` documentation comments.
    @protocol and @implementation bodies are skipped.
    """

    def extract(self, unit: SourceUnit) -> ExtractionResult:
        result = ExtractionResult()
        lines = unit.text.splitlines()
        origin = unit.path or "<string>"

        state = State.NEUTRAL
        resume = State.NEUTRAL  # State to return to after a block comment
        doc_lines: list[str] = []
        pending_doc: str | None = None
        previous = LineKind.BLANK
        current: ClassModel | None = None
        ivar_depth = 0

        index = 0
        while index < len(lines):
            raw = lines[index]
            line = raw.strip()
            index += 1

            if state in (State.DOC_COMMENT, State.COMMENT):
                if state is State.DOC_COMMENT:
                    doc_lines.append(line)
                if "*/" in line:
                    if state is State.DOC_COMMENT:
                        pending_doc = "\n".join(doc_lines)
                    state = resume
                continue

            if ivar_depth > 0:
                ivar_depth += line.count("{") - line.count("}")
                continue

            kind = classify_line(line)
            if kind is LineKind.BLANK:
                continue

            if kind is LineKind.DOC_OPEN:
                if "*/" in line:
                    pending_doc = line
                else:
                    doc_lines = [line]
                    resume, state = state, State.DOC_COMMENT
                previous = kind
                continue
            if kind is LineKind.COMMENT_OPEN:
                if "*/" not in line:
                    resume, state = state, State.COMMENT
                continue
            if kind is LineKind.LINE_DOC:
                if previous is LineKind.LINE_DOC and pending_doc:
                    pending_doc += "\n" + line
                else:
                    pending_doc = line
                previous = kind
                continue
            previous = kind
            if kind is LineKind.LINE_COMMENT:
                continue
            if kind is LineKind.OTHER and not _ATTRIBUTE_LINE_RE.match(line):
                pending_doc = None

            if state is State.SKIPPED_BLOCK:
                if kind is LineKind.END:
                    state = State.NEUTRAL
                    pending_doc = None
                continue

            if kind is LineKind.INTERFACE:
                if current is not None:
                    log.warning("%s: @interface %s is missing @end", origin, current.name)
                    result.add_class(current)
                    current = None
                header, index = _collect_class_header(lines, index - 1)
                try:
                    cls = parse_class_header(header)
                except MalformedClassHeader as e:
                    log.warning("%s: %s", origin, e)
                    result.skipped += 1
                    state = State.SKIPPED_BLOCK
                    pending_doc = None
                    continue

                if cls.category is not None and result.get(cls.name) is None:
                    log.warning(
                        "%s: skipping category %s(%s) of a class not declared in this input",
                        origin,
                        cls.name,
                        cls.category,
                    )
                    result.skipped += 1
                    state = State.SKIPPED_BLOCK
                    pending_doc = None
                    continue

                cls.documentation = parse_doc_comment(pending_doc).main
                pending_doc = None
                current = cls
                state = State.IN_CLASS
                ivar_depth = max(0, header.count("{") - header.count("}"))
                continue

            if kind is LineKind.PROTOCOL or kind is LineKind.IMPLEMENTATION:
                if current is not None:
                    log.warning("%s: @interface %s is missing @end", origin, current.name)
                    result.add_class(current)
                    current = None
                state = State.SKIPPED_BLOCK
                pending_doc = None
                continue

            if kind is LineKind.END:
                if current is not None:
                    result.add_class(current)
                    current = None
                state = State.NEUTRAL
                pending_doc = None
                continue

            if state is not State.IN_CLASS:
                continue

            if kind is LineKind.BRACE_OPEN:
                ivar_depth = max(0, line.count("{") - line.count("}"))
                continue

            if kind is LineKind.PROPERTY:
                declaration, index = _collect_declaration(lines, index - 1)
                self._add_property(current, declaration, pending_doc, result)
                pending_doc = None
            elif kind is LineKind.METHOD:
                declaration, index = _collect_declaration(lines, index - 1)
                self._add_method(current, declaration, pending_doc, result, origin)
                pending_doc = None

        if current is not None:
            log.warning("%s: @interface %s is missing @end", origin, current.name)
            result.add_class(current)

        log.debug("%s: extracted %d classes, skipped %d", origin, len(result.classes), result.skipped)
        return result

    def _add_property(
        self,
        cls: ClassModel,
        declaration: str,
        doc: str | None,
        result: ExtractionResult,
    ) -> None:
        prop = parse_property_declaration(declaration)
        if not prop.name:
            result.skipped += 1
            return
        prop.documentation = parse_doc_comment(doc).main
        cls.properties.append(prop)

    def _add_method(
        self,
        cls: ClassModel,
        declaration: str,
        doc: str | None,
        result: ExtractionResult,
        origin: str,
    ) -> None:
        try:
            method = parse_method_signature(declaration)
        except MalformedSignature as e:
            log.warning("%s: failed to parse method declaration: %s (%s)", origin, declaration, e)
            result.skipped += 1
            return
        if doc:
            apply_parameter_docs(method, parse_doc_comment(doc))
        cls.methods.append(method)


_DOC_BLOCK_RE = re.compile(r"/\*[!*][\s\S]*?\*/")
_COMMENTED_SIGNATURE_RE = re.compile(r"//\s*([+-][\s\S]*?;)")
_BARE_SIGNATURE_RE = re.compile(r"^\s*([+-]\s*\([\s\S]*?;)", re.MULTILINE)
_LINE_COMMENT_PREFIX_RE = re.compile(r"^\s*//\s?")


def extract_single_method(text: str) -> MethodModel:
    """Parse one documentation comment followed by one method declaration.

    The declaration may be commented out (`// - (void)foo;`) or bare. The
    doc comment is optional.
    """
    doc_match = _DOC_BLOCK_RE.search(text)
    rest = text[doc_match.end() :] if doc_match else text

    signature_match = _COMMENTED_SIGNATURE_RE.search(rest) or _BARE_SIGNATURE_RE.search(rest)
    if not signature_match:
        raise MalformedSignature("Invalid method definition: no declaration found", text)
    signature = " ".join(
        _LINE_COMMENT_PREFIX_RE.sub("", line).strip()
        for line in signature_match.group(1).splitlines()
    )

    method = parse_method_signature(signature)
    if doc_match:
        apply_parameter_docs(method, parse_doc_comment(doc_match.group(0)))
    return method


def get_extractor(settings: GeneratorSettings) -> Extractor:
    """Extractor for the configured strategy."""
    if settings.strategy == "ast":
        from .clang_extractor import ClangExtractor

        return ClangExtractor(settings)
    return TextExtractor()
