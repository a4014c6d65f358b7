"""Native type name to Python annotation mapping."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .signatures import clean_type

OPAQUE_NAME = "id"

_SCALARS: dict[str, str] = {
    "void": "None",
    "BOOL": "bool",
    "bool": "bool",
    "_Bool": "bool",
    "Boolean": "bool",
    "NSInteger": "int",
    "NSUInteger": "int",
    "int": "int",
    "long": "int",
    "short": "int",
    "unsigned": "int",
    "unsigned int": "int",
    "unsigned long": "int",
    "unsigned short": "int",
    "long long": "int",
    "unsigned long long": "int",
    "int8_t": "int",
    "int16_t": "int",
    "int32_t": "int",
    "int64_t": "int",
    "uint8_t": "int",
    "uint16_t": "int",
    "uint32_t": "int",
    "uint64_t": "int",
    "size_t": "int",
    "unichar": "int",
    "CGFloat": "float",
    "double": "float",
    "float": "float",
    "NSTimeInterval": "float",
    "NSNumber": "float",
    "NSString": "str",
    "NSMutableString": "str",
    "char": "str",
    "unsigned char": "str",
    "SEL": "str",
}

_SEQUENCES = {
    "NSArray": "list",
    "NSMutableArray": "list",
    "NSOrderedSet": "list",
    "NSMutableOrderedSet": "list",
    "NSSet": "set",
    "NSMutableSet": "set",
}
_MAPPINGS = frozenset({"NSDictionary", "NSMutableDictionary"})

_GENERIC_RE = re.compile(r"^(?P<base>\w+)\s*<(?P<args>.*)>$")


@dataclass(frozen=True)
class Mapped:
    """A native type with a direct Python counterpart."""

    expr: str

    def render(self) -> str:
        return self.expr


@dataclass(frozen=True)
class Opaque:
    """A native reference type passed through as an opaque handle."""

    native_name: str

    def render(self) -> str:
        return OPAQUE_NAME


TargetType = Union[Mapped, Opaque]


def _split_generic_args(text: str) -> list[str]:
    args: list[str] = []
    depth = 0
    current = ""
    for char in text:
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
        if char == "," and depth == 0:
            args.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        args.append(current.strip())
    return args


def map_type(native: str) -> TargetType:
    """Map a native type name; unknown names become Opaque."""
    name, _ = clean_type(native or "void")
    if not name:
        return Mapped("None")
    if "(^" in name:
        return Mapped("Callable[..., Any]")

    generic = _GENERIC_RE.match(name)
    if generic:
        base = generic.group("base")
        args = [map_type(a).render() for a in _split_generic_args(generic.group("args"))]
        if base in _SEQUENCES and len(args) == 1:
            return Mapped(f"{_SEQUENCES[base]}[{args[0]}]")
        if base in _MAPPINGS and len(args) == 2:
            return Mapped(f"dict[{args[0]}, {args[1]}]")
        return Opaque(name)

    if name in _SCALARS:
        return Mapped(_SCALARS[name])
    if name in _SEQUENCES:
        return Mapped(f"{_SEQUENCES[name]}[Any]")
    if name in _MAPPINGS:
        return Mapped("dict[str, Any]")
    return Opaque(name)


def render_type(native: str, nullable: bool = False) -> str:
    """Render a native type as a Python annotation.

    The `| None` suffix is added at most once.
    """
    rendered = map_type(native).render()
    if nullable and "None" not in rendered:
        rendered += " | None"
    return rendered
