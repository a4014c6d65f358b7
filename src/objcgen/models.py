"""Intermediate model shared by the extractors and the code generator."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import MalformedSignature

ROOT_CLASSES = frozenset({"NSObject", "NSProxy"})


@dataclass
class ParameterModel:
    """One selector argument, in colon order."""

    name: str
    type: str  # Canonical native type, marker and pointer stripped
    is_nullable: bool = False
    documentation: str = ""


@dataclass
class MethodModel:
    """A method declaration."""

    selector: str  # "initWithFrame:" or "shared"
    return_type: str
    is_static: bool = False
    parameters: list[ParameterModel] = field(default_factory=list)
    availability: str = ""
    documentation: str = ""
    return_documentation: str = ""
    return_nullable: bool = False

    @property
    def base_name(self) -> str:
        return self.selector.split(":")[0]

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def is_initializer(self) -> bool:
        return self.base_name.startswith("init")

    @property
    def is_setter(self) -> bool:
        """True for `setTitle:`-shaped single-argument methods."""
        name = self.selector
        return (
            name.startswith("set")
            and len(self.parameters) == 1
            and len(name) > 4
            and name[3] == name[3].upper()
            and name.endswith(":")
            and name.count(":") == 1
        )

    @property
    def setter_property_name(self) -> str:
        """Property name derived from a setter selector (`setTitle:` -> `title`)."""
        stem = self.selector[3:-1]
        return stem[:1].lower() + stem[1:]

    def validate(self) -> None:
        """Check that the selector encodes the parameter count."""
        colons = self.selector.count(":")
        if colons != len(self.parameters):
            raise MalformedSignature(
                f"Selector {self.selector!r} has {colons} components "
                f"but {len(self.parameters)} parameters",
                self.selector,
            )


@dataclass
class PropertyModel:
    """A @property declaration."""

    name: str
    type: str
    is_readonly: bool = False
    is_nullable: bool = False
    attributes: list[str] = field(default_factory=list)  # "nonatomic", "copy", ...
    documentation: str = ""

    def _attribute_value(self, key: str) -> str | None:
        for attr in self.attributes:
            name, sep, value = attr.partition("=")
            if sep and name.strip() == key:
                return value.strip()
        return None

    @property
    def getter_selector(self) -> str:
        return self._attribute_value("getter") or self.name

    @property
    def setter_selector(self) -> str | None:
        """Native setter selector, None for read-only properties."""
        if self.is_readonly:
            return None
        custom = self._attribute_value("setter")
        if custom:
            return custom if custom.endswith(":") else custom + ":"
        return f"set{self.name[:1].upper()}{self.name[1:]}:"


@dataclass
class ClassModel:
    """An @interface declaration with its members in declaration order."""

    name: str
    superclass: str | None = None
    protocols: list[str] = field(default_factory=list)
    properties: list[PropertyModel] = field(default_factory=list)
    methods: list[MethodModel] = field(default_factory=list)
    documentation: str = ""
    availability: str = ""
    category: str | None = None  # Set for `@interface Name (Category)` headers

    @property
    def is_root(self) -> bool:
        return not self.superclass or self.superclass in ROOT_CLASSES


@dataclass
class OverloadGroup:
    """Methods sharing (is_static, base_name), in declaration order."""

    is_static: bool
    base_name: str
    methods: list[MethodModel] = field(default_factory=list)

    @property
    def key(self) -> tuple[bool, str]:
        return (self.is_static, self.base_name)

    @property
    def is_overloaded(self) -> bool:
        return len(self.methods) > 1


@dataclass
class SourceUnit:
    """Header text handed to an extractor."""

    text: str
    path: str | None = None


@dataclass
class ExtractionResult:
    """Accumulator for one extraction run."""

    classes: list[ClassModel] = field(default_factory=list)
    skipped: int = 0  # Members or classes dropped with a warning

    def get(self, name: str) -> ClassModel | None:
        for cls in self.classes:
            if cls.name == name:
                return cls
        return None

    def add_class(self, cls: ClassModel) -> ClassModel:
        """Append a class, merging into an existing class of the same name.

        Returns the model that now owns the members.
        """
        existing = self.get(cls.name)
        if existing is None:
            self.classes.append(cls)
            return cls
        existing.properties.extend(cls.properties)
        existing.methods.extend(cls.methods)
        for proto in cls.protocols:
            if proto not in existing.protocols:
                existing.protocols.append(proto)
        if not existing.superclass and cls.superclass:
            existing.superclass = cls.superclass
        return existing

    @property
    def class_names(self) -> set[str]:
        return {c.name for c in self.classes}
