"""Exception taxonomy for objcgen.

Member- and class-level failures (MalformedSignature, MalformedClassHeader)
are always contained by the extractors and logged. I/O failures
(UnreadableInput, UnwritableOutput) abort the run. UnresolvedOverload is
raised by generated bindings at call time, never by the generator.
"""

from __future__ import annotations


class ObjCGenError(Exception):
    """Base exception for objcgen operations."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class MalformedSignature(ObjCGenError):
    """Raised when a method or property declaration does not have the expected shape."""

    pass


class MalformedClassHeader(ObjCGenError):
    """Raised when an @interface line cannot be parsed."""

    pass


class UnresolvedOverload(ObjCGenError):
    """Raised by generated code when no overload matches the call-site arity."""

    def __init__(self, method: str, arg_count: int):
        super().__init__(
            f"Invalid number of arguments for method {method}: {arg_count}"
        )
        self.method = method
        self.arg_count = arg_count


class UnreadableInput(ObjCGenError):
    """Raised when the primary input cannot be read."""

    pass


class UnwritableOutput(ObjCGenError):
    """Raised when a generated file cannot be written."""

    pass
