"""Post-emission normalization of generated modules.

Works on rendered source text:

1. `# objcgen: incomplete <name> [static]` markers left by the generator are
   replaced with a fallback implementation that raises UnresolvedOverload.
2. `@overload` stubs that are not directly above their implementation are
   moved there, keeping their original order.
3. Stubs without any implementation get the fallback implementation.

Anything that cannot be located is left as emitted.
"""

from __future__ import annotations

import ast
import logging
import re
from pathlib import Path

from .errors import UnreadableInput, UnwritableOutput

log = logging.getLogger(__name__)

INCOMPLETE_MARKER = "objcgen: incomplete"

_MARKER_RE = re.compile(
    r"^(?P<indent>[ \t]*)# " + re.escape(INCOMPLETE_MARKER) + r" (?P<name>\w+)(?P<static> static)?[ \t]*$",
    re.MULTILINE,
)


def _fallback(name: str, is_static: bool, indent: str) -> list[str]:
    returns = "None" if name == "__init__" else "Any"
    receiver = "cls" if is_static else "self"
    lines = [f"{indent}@classmethod"] if is_static else []
    lines.append(f"{indent}def {name}({receiver}, *args: Any) -> {returns}:")
    lines.append(f'{indent}    raise UnresolvedOverload("{name}", len(args))')
    return lines


def _replace_markers(text: str) -> str:
    def substitute(match: re.Match) -> str:
        name = match.group("name")
        log.debug("Filling in incomplete declaration %s", name)
        return "\n".join(_fallback(name, bool(match.group("static")), match.group("indent")))

    return _MARKER_RE.sub(substitute, text)


def _decorator_names(node: ast.FunctionDef) -> set[str]:
    names = set()
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Name):
            names.add(decorator.id)
        elif isinstance(decorator, ast.Attribute):
            names.add(decorator.attr)
    return names


def _span(node: ast.FunctionDef) -> tuple[int, int]:
    """0-based (first, last) line indices including decorators."""
    first = min([node.lineno] + [d.lineno for d in node.decorator_list])
    return first - 1, node.end_lineno - 1


class _Group:
    def __init__(self, name: str):
        self.name = name
        self.signatures: list[ast.FunctionDef] = []
        self.implementation: ast.FunctionDef | None = None


def _overload_groups(tree: ast.Module) -> list[_Group]:
    groups: list[_Group] = []
    for cls in ast.walk(tree):
        if not isinstance(cls, ast.ClassDef):
            continue
        by_name: dict[str, _Group] = {}
        for node in cls.body:
            if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                continue
            group = by_name.setdefault(node.name, _Group(node.name))
            if "overload" in _decorator_names(node):
                group.signatures.append(node)
            elif group.implementation is None:
                group.implementation = node
        groups.extend(g for g in by_name.values() if g.signatures)
    return groups


def _is_blank(lines: list[str], start: int, end: int) -> bool:
    return all(not line.strip() for line in lines[start:end])


def _is_grouped(group: _Group, lines: list[str]) -> bool:
    blocks = [_span(node) for node in group.signatures]
    blocks.append(_span(group.implementation))
    for (_, prev_end), (next_start, _) in zip(blocks, blocks[1:]):
        if next_start <= prev_end or not _is_blank(lines, prev_end + 1, next_start):
            return False
    return True


def _move_signatures(group: _Group, lines: list[str]) -> list[str]:
    spans = [_span(node) for node in group.signatures]
    dropped: set[int] = set()
    moved: list[str] = []
    for start, end in spans:
        dropped.update(range(start, end + 1))
        if end + 1 < len(lines) and not lines[end + 1].strip():
            dropped.add(end + 1)
        moved.extend(lines[start : end + 1])
        moved.append("")

    impl_start, _ = _span(group.implementation)
    out: list[str] = []
    for index, line in enumerate(lines):
        if index == impl_start:
            out.extend(moved)
        if index not in dropped:
            out.append(line)
    return out


def _add_implementation(group: _Group, lines: list[str]) -> list[str]:
    last = group.signatures[-1]
    _, end = _span(last)
    indent = " " * last.col_offset
    is_static = "classmethod" in _decorator_names(last)
    return lines[: end + 1] + [""] + _fallback(group.name, is_static, indent) + lines[end + 1 :]


def reflow_source(text: str) -> str:
    """Normalize generated source text. Idempotent."""
    text = _replace_markers(text)

    # Each pass repairs one group, then re-parses
    for _ in range(text.count("@overload") + 1):
        try:
            tree = ast.parse(text)
        except SyntaxError as e:
            log.warning("Cannot reflow unparseable source: %s", e)
            return text

        lines = text.split("\n")
        for group in _overload_groups(tree):
            if group.implementation is None:
                lines = _add_implementation(group, lines)
                break
            if not _is_grouped(group, lines):
                lines = _move_signatures(group, lines)
                break
        else:
            return text
        text = "\n".join(lines)
    return text


def reflow_file(path: Path) -> bool:
    """Reflow one file in place. Returns True when it changed."""
    try:
        original = path.read_text()
    except OSError as e:
        raise UnreadableInput(f"Cannot read {path}: {e}", str(path)) from e

    updated = reflow_source(original)
    if updated == original:
        return False
    try:
        path.write_text(updated)
    except OSError as e:
        raise UnwritableOutput(f"Cannot write {path}: {e}", str(path)) from e
    return True


def reflow_path(path: Path) -> list[Path]:
    """Reflow a file, or every .py file under a directory (depth-first).

    Returns the files that changed.
    """
    path = Path(path)
    if path.is_file():
        return [path] if reflow_file(path) else []
    if not path.is_dir():
        raise UnreadableInput(f"{path} is neither a file nor a directory", str(path))

    changed: list[Path] = []
    for entry in sorted(path.iterdir()):
        if entry.is_dir():
            changed.extend(reflow_path(entry))
        elif entry.suffix == ".py":
            if reflow_file(entry):
                changed.append(entry)
    return changed
