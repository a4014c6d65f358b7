"""Support symbols imported by generated binding modules."""

from __future__ import annotations

from typing import Any

from .errors import UnresolvedOverload

# Opaque native object handle
id = Any


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marks an overload parameter the caller did not pass
UNSET: Any = _Unset()


class NativeObject:
    """Root of generated wrapper classes.

    Subclasses set `_native_class` and assign `pointer` in `__init__`.
    """

    _native_class: Any = None
    pointer: Any = None

    @classmethod
    def from_pointer(cls, pointer: Any) -> "NativeObject":
        """Wrap an existing native handle without running an initializer."""
        instance = cls.__new__(cls)
        instance.pointer = pointer
        return instance

    def to_pointer(self) -> Any:
        return self.pointer

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.pointer!r}>"


__all__ = ["NativeObject", "UNSET", "UnresolvedOverload", "id"]
