"""Python binding generators.

One module per extracted class. Generated code forwards every call to the
runtime bridge (`invoke`, `allocate`, `lookup_class`) imported under the
name `objc`.
"""

from __future__ import annotations

import keyword
import logging
import textwrap
from pathlib import Path
from typing import Any

from .config import GeneratorSettings
from .errors import UnwritableOutput
from .models import ClassModel, ExtractionResult, MethodModel, OverloadGroup, PropertyModel
from .overloads import group_overloads, initializer_group
from .reflow import INCOMPLETE_MARKER, reflow_source
from .typemap import Opaque, map_type, render_type

log = logging.getLogger(__name__)

INDENT = "    "
BODY = INDENT * 2

# Receiver names, the overload catch-all and attributes owned by NativeObject
_RESERVED = frozenset({"self", "cls", "args", "pointer", "to_pointer", "from_pointer"})

# Names the generated method bodies reference; parameters must not shadow them
_BODY_NAMES = frozenset({"objc", "type", "len", "list", "UNSET", "UnresolvedOverload", "call_args"})


def _py_name(name: str) -> str:
    """Make a native name usable as a Python identifier."""
    if keyword.iskeyword(name) or name in _RESERVED:
        return f"{name}_"
    return name


def _param_name(name: str) -> str:
    if name in _BODY_NAMES:
        return f"{name}_"
    return _py_name(name)


def _docstring(paragraphs: list[str], indent: str) -> list[str]:
    """Render a docstring from non-empty paragraphs (lines within are kept)."""
    paragraphs = [p for p in paragraphs if p]
    if not paragraphs:
        return []
    text = "\n\n".join(paragraphs).replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    lines = text.split("\n")
    if len(lines) == 1 and not lines[0].endswith('"'):
        return [f'{indent}"""{lines[0]}"""']
    out = [f'{indent}"""{lines[0]}']
    out.extend(f"{indent}{line}" if line else "" for line in lines[1:])
    out.append(f'{indent}"""')
    return out


def _method_doc(method: MethodModel) -> list[str]:
    paragraphs = [method.documentation]
    documented = [p for p in method.parameters if p.documentation]
    if documented:
        args = ["Args:"]
        args.extend(f"    {_param_name(p.name)}: {p.documentation}" for p in documented)
        paragraphs.append("\n".join(args))
    if method.return_documentation:
        paragraphs.append(f"Returns:\n    {method.return_documentation}")
    if method.availability:
        paragraphs.append(f"Available: {method.availability}")
    return paragraphs


def _signature_params(method: MethodModel) -> list[str]:
    return [
        f"{_param_name(p.name)}: {render_type(p.type, p.is_nullable)}"
        for p in method.parameters
    ]


def _def_line(name: str, params: list[str], returns: str, is_static: bool, suffix: str = "") -> str:
    receiver = "cls" if is_static else "self"
    joined = ", ".join([receiver, *params])
    return f"{INDENT}def {name}({joined}) -> {returns}:{suffix}"


def _target(is_static: bool) -> str:
    return "cls._native_class" if is_static else "self.pointer"


def _invoke(target: str, selector: str, args: str) -> str:
    if args:
        return f'objc.invoke({target}, "{selector}", {args})'
    return f'objc.invoke({target}, "{selector}")'


def _is_valid(lines: list[str]) -> bool:
    try:
        compile(textwrap.dedent("\n".join(lines)), "<generated>", "exec")
    except SyntaxError:
        return False
    return True


def _incomplete(name: str, is_static: bool) -> list[str]:
    static = " static" if is_static else ""
    return [f"{INDENT}# {INCOMPLETE_MARKER} {name}{static}"]


def render_method(method: MethodModel, name: str) -> list[str]:
    """A single, non-overloaded method forwarding its full selector."""
    returns = render_type(method.return_type, method.return_nullable)
    lines = []
    if method.is_static:
        lines.append(f"{INDENT}@classmethod")
    lines.append(_def_line(name, _signature_params(method), returns, method.is_static))
    lines.extend(_docstring(_method_doc(method), BODY))
    args = ", ".join(_param_name(p.name) for p in method.parameters)
    call = _invoke(_target(method.is_static), method.selector, args)
    lines.append(f"{BODY}{call}" if returns == "None" else f"{BODY}return {call}")
    return lines


def _overload_doc(group: OverloadGroup) -> list[str]:
    """One paragraph per documented member, headed by its selector."""
    paragraphs = []
    for method in group.methods:
        parts = [p for p in _method_doc(method) if p]
        if parts:
            body = textwrap.indent("\n\n".join(parts), INDENT)
            paragraphs.append(f"{method.selector}\n{body}")
    return paragraphs


def _union_parameters(group: OverloadGroup) -> list[str]:
    names: list[str] = []
    for method in group.methods:
        for param in method.parameters:
            name = _param_name(param.name)
            if name not in names:
                names.append(name)
    return names


def _dispatch_body(group: OverloadGroup, names: list[str], target: str, construct: bool) -> list[str]:
    lines = []
    if names:
        collected = ", ".join(names) + ("," if len(names) == 1 else "")
        lines.append(f"{BODY}call_args = [arg for arg in ({collected}) if arg is not UNSET]")
        lines.append(f"{BODY}call_args.extend(args)")
    else:
        lines.append(f"{BODY}call_args = list(args)")

    seen: set[int] = set()
    keyword_ = "if"
    for method in group.methods:
        if method.arity in seen:
            continue
        seen.add(method.arity)
        lines.append(f"{BODY}{keyword_} len(call_args) == {method.arity}:")
        call = _invoke(target, method.selector, "*call_args")
        if construct:
            lines.append(f"{BODY}{INDENT}self.pointer = {call}")
            lines.append(f"{BODY}{INDENT}return")
        else:
            lines.append(f"{BODY}{INDENT}return {call}")
        keyword_ = "elif"
    lines.append(f'{BODY}raise UnresolvedOverload("{group.base_name}", len(call_args))')
    return lines


def render_overloads(group: OverloadGroup, name: str) -> list[str]:
    """`@overload` stubs in declaration order, then the shared implementation."""
    lines: list[str] = []
    for method in group.methods:
        lines.append(f"{INDENT}@overload")
        if group.is_static:
            lines.append(f"{INDENT}@classmethod")
        returns = render_type(method.return_type, method.return_nullable)
        lines.append(_def_line(name, _signature_params(method), returns, group.is_static, " ..."))
        lines.append("")

    names = _union_parameters(group)
    params = [f"{n}: Any = UNSET" for n in names] + ["*args: Any"]
    if group.is_static:
        lines.append(f"{INDENT}@classmethod")
    lines.append(_def_line(name, params, "Any", group.is_static))
    lines.extend(_docstring(_overload_doc(group), BODY))
    lines.extend(_dispatch_body(group, names, _target(group.is_static), construct=False))
    return lines


def render_initializer(group: OverloadGroup) -> list[str]:
    """`__init__` allocating the native class and running the matching initializer."""
    memory = "objc.allocate(type(self)._native_class)"
    if not group.is_overloaded:
        method = group.methods[0]
        lines = [_def_line("__init__", _signature_params(method), "None", False)]
        lines.extend(_docstring(_method_doc(method), BODY))
        args = ", ".join(_param_name(p.name) for p in method.parameters)
        lines.append(f"{BODY}self.pointer = {_invoke(memory, method.selector, args)}")
        return lines

    lines = []
    for method in group.methods:
        lines.append(f"{INDENT}@overload")
        lines.append(_def_line("__init__", _signature_params(method), "None", False, " ..."))
        lines.append("")
    names = _union_parameters(group)
    params = [f"{n}: Any = UNSET" for n in names] + ["*args: Any"]
    lines.append(_def_line("__init__", params, "None", False))
    lines.extend(_docstring(_overload_doc(group), BODY))
    lines.extend(_dispatch_body(group, names, memory, construct=True))
    return lines


def render_property(
    prop: PropertyModel, getter: str | None = None, setter: str | None = None
) -> list[str]:
    """Getter, plus a setter unless the property is read-only."""
    name = _py_name(prop.name)
    annotation = render_type(prop.type, prop.is_nullable)
    paragraphs = [prop.documentation]
    if prop.attributes:
        paragraphs.append(f"Attributes: {', '.join(prop.attributes)}")

    lines = [
        f"{INDENT}@property",
        _def_line(name, [], annotation, False),
    ]
    lines.extend(_docstring(paragraphs, BODY))
    lines.append(f"{BODY}return {_invoke('self.pointer', getter or prop.getter_selector, '')}")

    setter = setter or prop.setter_selector
    if setter and not prop.is_readonly:
        lines.append("")
        lines.append(f"{INDENT}@{name}.setter")
        lines.append(_def_line(name, [f"value: {annotation}"], "None", False))
        lines.append(f"{BODY}{_invoke('self.pointer', setter, 'value')}")
    return lines


def render_setter_accessor(method: MethodModel, name: str) -> list[str]:
    """Write-only accessor for a `setX:` method without a declared property."""
    param = method.parameters[0]
    annotation = render_type(param.type, param.is_nullable)
    lines = [_def_line(f"_set_{name}", [f"value: {annotation}"], "None", False)]
    lines.extend(_docstring(_method_doc(method), BODY))
    lines.append(f"{BODY}{_invoke('self.pointer', method.selector, 'value')}")
    lines.append("")
    lines.append(f"{INDENT}{name} = property(fset=_set_{name})")
    return lines


def _class_doc(cls: ClassModel) -> list[str]:
    paragraphs = [cls.documentation]
    if cls.availability:
        paragraphs.append(f"Available: {cls.availability}")
    if cls.protocols:
        paragraphs.append(f"Protocols: {', '.join(cls.protocols)}")
    return paragraphs


def _class_members(cls: ClassModel) -> list[list[str]]:
    """Render the member blocks of a class in emission order."""
    blocks: list[list[str]] = []
    properties = {p.name: p for p in cls.properties if p.name}
    groups = group_overloads(cls.methods)
    instance_groups = {g.base_name: g for g in groups if not g.is_static}

    # Setter-shaped groups become accessors; one per derived property name
    setters: dict[str, MethodModel] = {}
    for group in groups:
        first = group.methods[0]
        if group.is_static or not first.is_setter:
            continue
        prop_name = first.setter_property_name
        declared = properties.get(prop_name)
        if declared is not None and declared.is_readonly:
            continue
        if declared is not None or prop_name in setters:
            group.methods = []
            continue
        setters[prop_name] = first
        group.methods = []

    init = initializer_group(cls)
    block = render_initializer(init)
    blocks.append(block if _is_valid(block) else _incomplete("__init__", False))

    taken: set[str] = set()
    for prop in properties.values():
        name = _py_name(prop.name)
        taken.add(name)
        block = render_property(prop)
        if _is_valid(block):
            blocks.append(block)
        else:
            log.warning("Skipping property %s.%s: generated code does not compile", cls.name, prop.name)

    for prop_name, method in setters.items():
        name = _py_name(prop_name)
        getter = instance_groups.get(prop_name)
        if getter is not None and len(getter.methods) == 1 and getter.methods[0].arity == 0:
            # `- (T)x` plus `- (void)setX:(T)x` read and write one property
            getter_method = getter.methods[0]
            getter.methods = []
            param = method.parameters[0]
            prop = PropertyModel(
                name=prop_name,
                type=getter_method.return_type,
                is_nullable=getter_method.return_nullable or param.is_nullable,
                documentation=getter_method.documentation or method.documentation,
            )
            block = render_property(prop, getter=getter_method.selector, setter=method.selector)
        else:
            block = render_setter_accessor(method, name)
        taken.add(name)
        if _is_valid(block):
            blocks.append(block)
        else:
            log.warning("Skipping accessor %s.%s: generated code does not compile", cls.name, prop_name)

    for group in groups:
        if not group.methods:
            continue
        name = _py_name(group.base_name)
        if not group.is_static and name in taken:
            if not group.is_overloaded and group.methods[0].arity == 0:
                continue  # Already covered by a property getter
            name = f"{name}_"
        if group.is_static and name in taken | set(instance_groups):
            name = f"{name}_static"
        taken.add(name)

        if group.is_overloaded:
            block = render_overloads(group, name)
        else:
            block = render_method(group.methods[0], name)
        if _is_valid(block):
            blocks.append(block)
        else:
            log.warning(
                "Generated code for %s.%s does not compile; leaving it incomplete",
                cls.name,
                group.base_name,
            )
            blocks.append(_incomplete(name, group.is_static))
    return blocks


def generate_class_module(
    cls: ClassModel,
    known_classes: set[str],
    settings: GeneratorSettings,
    source: str | None = None,
) -> str:
    """Generate the Python module binding one class."""
    origin = f" from {source}" if source else ""
    lines = [
        f"# AUTO-GENERATED by objcgen{origin}. DO NOT EDIT.",
        "",
        "from __future__ import annotations",
        "",
        "from typing import Any, Callable, overload  # noqa: F401",
        "",
        f"import {settings.bridge_module} as objc",
        "from objcgen.runtime import UNSET, NativeObject, UnresolvedOverload, id  # noqa: F401",
    ]

    base = "NativeObject"
    if cls.superclass and cls.superclass in known_classes and cls.superclass != cls.name:
        base = cls.superclass
        lines.extend(["", f"from .{base} import {base}"])

    lines.extend(["", "", f"class {cls.name}({base}):"])
    doc = _docstring(_class_doc(cls), INDENT)
    if doc:
        lines.extend(doc)
        lines.append("")
    lines.append(f'{INDENT}_native_class = objc.lookup_class("{cls.name}")')

    for block in _class_members(cls):
        lines.append("")
        lines.extend(block)

    lines.append("")
    return "\n".join(lines)


def method_to_dict(method: MethodModel) -> dict[str, Any]:
    """JSON-ready description of one method with mapped types."""

    def describe(native: str, nullable: bool) -> dict[str, Any]:
        target = map_type(native)
        return {
            "type": render_type(native, nullable),
            "native_type": native,
            "opaque": isinstance(target, Opaque),
        }

    return {
        "kind": "method",
        "is_static": method.is_static,
        "name": method.selector,
        "parameters": [
            {
                "kind": "parameter",
                "name": p.name,
                **describe(p.type, p.is_nullable),
                "documentation": p.documentation,
                "is_optional": p.is_nullable,
            }
            for p in method.parameters
        ],
        "return_type": render_type(method.return_type, method.return_nullable),
        "native_return_type": method.return_type,
        "documentation": method.documentation,
        "return_documentation": method.return_documentation,
        "availability": method.availability,
    }


def write_class_modules(
    result: ExtractionResult,
    settings: GeneratorSettings,
    source: str | None = None,
) -> list[Path]:
    """Write one module per class into the output directory."""
    out_dir = Path(settings.output_dir)
    known = result.class_names
    written: list[Path] = []
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        package_init = out_dir / "__init__.py"
        if not package_init.exists():
            package_init.write_text("# AUTO-GENERATED by objcgen. DO NOT EDIT.\n")
    except OSError as e:
        raise UnwritableOutput(f"Cannot prepare {out_dir}: {e}", str(out_dir)) from e

    for cls in result.classes:
        text = generate_class_module(cls, known, settings, source)
        if settings.reflow:
            text = reflow_source(text)
        path = out_dir / f"{cls.name}.py"
        try:
            path.write_text(text)
        except OSError as e:
            raise UnwritableOutput(f"Cannot write {path}: {e}", str(path)) from e
        log.debug("Generated %s", path)
        written.append(path)
    return written
