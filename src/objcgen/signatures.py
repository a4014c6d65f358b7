"""Parsers for isolated method, property and class-header declarations."""

from __future__ import annotations

import logging
import re

from .errors import MalformedClassHeader, MalformedSignature
from .lexer import ELLIPSIS, IDENT, TokenStream
from .models import ClassModel, MethodModel, ParameterModel, PropertyModel

log = logging.getLogger(__name__)

NULLABLE_MARKERS = frozenset({"nullable", "_Nullable", "__nullable", "_Nullable_result"})
NONNULL_MARKERS = frozenset({"nonnull", "_Nonnull", "__nonnull"})

# Tokens dropped from a type before it is stored
_TYPE_QUALIFIERS = (
    NULLABLE_MARKERS
    | NONNULL_MARKERS
    | {
        "null_unspecified",
        "_Null_unspecified",
        "__null_unspecified",
        "__kindof",
        "const",
        "__strong",
        "__weak",
        "__unsafe_unretained",
        "__autoreleasing",
        "oneway",
        "inout",
        "bycopy",
        "byref",
        "IBOutlet",
        "IBInspectable",
    }
)
_QUALIFIER_RE = re.compile(
    r"(?<![\w])(" + "|".join(sorted(_TYPE_QUALIFIERS, key=len, reverse=True)) + r")(?![\w])"
)
_WORD_RE = re.compile(r"[A-Za-z_]\w*")
_AVAILABILITY_MACRO = "API_AVAILABLE("


def clean_type(text: str) -> tuple[str, bool]:
    """Strip nullability markers, qualifiers and pointer decoration.

    Returns (canonical type, nullable).
    """
    nullable = any(word in NULLABLE_MARKERS for word in _WORD_RE.findall(text))
    cleaned = _QUALIFIER_RE.sub(" ", text)
    cleaned = " ".join(cleaned.split())
    if cleaned.endswith("*"):
        cleaned = cleaned[:-1].rstrip()
    return cleaned, nullable


def parse_availability(text: str) -> str:
    """Return the argument of an API_AVAILABLE(...) call, or "".

    A call cut off before its closing parentheses is closed.
    """
    start = text.find(_AVAILABILITY_MACRO)
    if start == -1:
        return ""
    pos = start + len(_AVAILABILITY_MACRO)
    depth = 1
    inner = []
    while pos < len(text):
        char = text[pos]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                break
        inner.append(char)
        pos += 1
    availability = "".join(inner).strip()
    missing = availability.count("(") - availability.count(")")
    if missing > 0:
        availability += ")" * missing
    return availability


def _strip_terminator(text: str) -> str:
    text = text.strip()
    if text.endswith(";"):
        text = text[:-1].rstrip()
    return text


def _parse_parameter(stream: TokenStream) -> ParameterModel:
    if stream.check("("):
        raw_type = stream.balanced()
    else:
        # Untyped Objective-C arguments default to id
        raw_type = "id"
    name = stream.peek()
    if name is None or name.kind != IDENT:
        raise MalformedSignature("Parameter without a name", stream.text)
    stream.next()
    param_type, nullable = clean_type(raw_type)
    return ParameterModel(name=name.value, type=param_type or "id", is_nullable=nullable)


def parse_method_signature(signature: str) -> MethodModel:
    """Parse `- (void)foo:(NSObject *)bar;`-style declarations.

    Documentation fields of the returned model are left empty.
    """
    signature = _strip_terminator(signature)
    stream = TokenStream(signature)

    sigil = stream.peek()
    if sigil is None or sigil.value not in ("+", "-"):
        raise MalformedSignature(
            f"Missing +/- sigil in signature: {signature}", signature
        )
    stream.next()
    is_static = sigil.value == "+"

    if not stream.check("("):
        raise MalformedSignature(
            f"Failed to parse return type from signature: {signature}", signature
        )
    return_type, return_nullable = clean_type(stream.balanced())

    base = stream.peek()
    if base is None or base.kind != IDENT:
        raise MalformedSignature(
            f"Failed to parse method name from signature: {signature}", signature
        )
    stream.next()

    labels: list[str] = []
    parameters: list[ParameterModel] = []
    if stream.accept(":"):
        labels.append(base.value)
        parameters.append(_parse_parameter(stream))
        while not stream.at_end():
            if stream.check_kind(IDENT) and stream.check(":", 1):
                labels.append(stream.next().value)
                stream.next()
                parameters.append(_parse_parameter(stream))
            elif stream.check(":"):
                # Anonymous label: `- (void)foo:(id)a :(id)b`
                stream.next()
                labels.append("")
                parameters.append(_parse_parameter(stream))
            elif stream.check(",") and stream.check_kind(ELLIPSIS, 1):
                stream.next()
                stream.next()
            else:
                break

    selector = "".join(f"{label}:" for label in labels) if labels else base.value
    method = MethodModel(
        selector=selector,
        return_type=return_type,
        is_static=is_static,
        parameters=parameters,
        availability=parse_availability(signature),
        return_nullable=return_nullable,
    )
    method.validate()
    return method


_PROPERTY_RE = re.compile(r"^@property\s*(?:\((?P<attrs>[^)]*)\))?\s*(?P<rest>.+)$", re.DOTALL)
_MACRO_NAME_RE = re.compile(r"^[A-Z][A-Z0-9]*_[A-Z0-9_]*$")


def _strip_trailing_macros(text: str) -> str:
    """Drop `API_AVAILABLE(...)`, `NS_REFINED_FOR_SWIFT` and similar suffixes."""
    while True:
        text = text.rstrip()
        if text.endswith(")"):
            index = _matching_open(text)
            if index > 0:
                head = text[:index].rstrip()
                word = re.search(r"([A-Za-z_]\w*)$", head)
                if word and _MACRO_NAME_RE.match(word.group(1)):
                    text = head[: word.start()]
                    continue
            return text
        words = text.split()
        if len(words) > 1 and _MACRO_NAME_RE.match(words[-1]):
            text = text[: -len(words[-1])]
            continue
        return text


def _matching_open(text: str) -> int:
    """Index of the parenthesis that opens the group closing at the end of text."""
    depth = 0
    for index in range(len(text) - 1, -1, -1):
        if text[index] == ")":
            depth += 1
        elif text[index] == "(":
            depth -= 1
            if depth == 0:
                return index
    return -1


def parse_property_declaration(declaration: str) -> PropertyModel:
    """Parse `@property (attrs) Type name;`.

    Never raises: an unparseable declaration produces an empty-named
    property and a warning.
    """
    try:
        text = _strip_terminator(declaration)
        match = _PROPERTY_RE.match(text)
        if not match:
            raise MalformedSignature(
                f"Failed to extract basic property declaration from: {text}", text
            )

        attrs_text = match.group("attrs") or ""
        attributes = [a.strip() for a in attrs_text.split(",") if a.strip()]
        is_readonly = "readonly" in attributes

        type_and_name = _strip_trailing_macros(match.group("rest").strip())
        name_match = re.search(r"(\w+)\s*$", type_and_name)
        if not name_match:
            raise MalformedSignature(
                f"Failed to extract property name from: {type_and_name}", text
            )
        name = name_match.group(1)
        raw_type = type_and_name[: name_match.start()].strip()
        if not raw_type:
            raise MalformedSignature(f"Property {name} has no type", text)

        words = set(_WORD_RE.findall(raw_type))
        explicit_nonnull = "nonnull" in attributes or bool(words & NONNULL_MARKERS)
        prop_type, marked_nullable = clean_type(raw_type)
        is_nullable = (
            "nullable" in attributes
            or "null_resettable" in attributes
            or marked_nullable
            or ("*" in raw_type and not explicit_nonnull)
        )

        return PropertyModel(
            name=name,
            type=prop_type,
            is_readonly=is_readonly,
            is_nullable=is_nullable,
            attributes=attributes,
        )
    except MalformedSignature as e:
        log.warning("Error parsing property declaration: %s (%s)", declaration.strip(), e)
        return PropertyModel(name="", type="id")


_CLASS_HEADER_RE = re.compile(
    r"@interface\s+(?P<name>\w+)"
    r"\s*(?:<(?P<generics>[^>]*)>)?"
    r"\s*(?:\(\s*(?P<category>\w*)\s*\))?"
    r"\s*(?::\s*(?P<super>\w+))?"
    r"\s*(?:<(?P<angle1>[^>]*)>)?"
    r"\s*(?:<(?P<angle2>[^>]*)>)?"
)


def _split_names(text: str | None) -> list[str]:
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def parse_class_header(line: str) -> ClassModel:
    """Parse an @interface line into a ClassModel without members."""
    line = line.strip()
    match = _CLASS_HEADER_RE.search(line)
    if not match:
        raise MalformedClassHeader(f"Failed to parse class declaration: {line}", line)

    generics = {
        g.split()[-1] for g in _split_names(match.group("generics")) if g.split()
    }
    angle1 = _split_names(match.group("angle1"))
    angle2 = _split_names(match.group("angle2"))
    protocols = angle1
    if match.group("super") and angle1:
        # `: NSArray<ObjectType>` carries type arguments, not protocols
        stripped = [a.replace("*", "").split()[-1] for a in angle1 if a.split()]
        if angle2 or (generics and set(stripped) <= generics):
            protocols = angle2

    category = match.group("category")
    return ClassModel(
        name=match.group("name"),
        superclass=match.group("super"),
        protocols=protocols,
        availability=parse_availability(line),
        category=category,
    )
