"""Grouping of method declarations into overload sets."""

from __future__ import annotations

from .errors import UnresolvedOverload
from .models import ClassModel, MethodModel, OverloadGroup


def group_overloads(
    methods: list[MethodModel], include_initializers: bool = False
) -> list[OverloadGroup]:
    """Group methods by (is_static, base name).

    Groups come out in first-seen order and keep their members in
    declaration order. Initializers are left out unless asked for.
    """
    groups: dict[tuple[bool, str], OverloadGroup] = {}
    for method in methods:
        if method.is_initializer and not include_initializers:
            continue
        key = (method.is_static, method.base_name)
        if key not in groups:
            groups[key] = OverloadGroup(is_static=method.is_static, base_name=method.base_name)
        groups[key].methods.append(method)
    return list(groups.values())


def initializer_group(cls: ClassModel) -> OverloadGroup:
    """Instance initializers of a class, as one group driving construction.

    A zero-argument `init` is added in front when the class does not
    declare one.
    """
    inits = [m for m in cls.methods if m.is_initializer and not m.is_static]
    if not any(m.arity == 0 for m in inits):
        inits.insert(0, MethodModel(selector="init", return_type="instancetype"))
    return OverloadGroup(is_static=False, base_name="init", methods=inits)


def dispatch_selector(group: OverloadGroup, arg_count: int) -> MethodModel:
    """First member, in declaration order, whose arity equals arg_count."""
    for method in group.methods:
        if method.arity == arg_count:
            return method
    raise UnresolvedOverload(group.base_name, arg_count)
