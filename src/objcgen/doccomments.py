"""HeaderDoc-style documentation comment parser."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .models import MethodModel

_DELIMITERS_RE = re.compile(r"/\*[!*]|\s*\*/|^\s*///?!?|^\s*\*+", re.MULTILINE)
_PARAM_RE = re.compile(r"@param\s+(\w+)\s*(.*)")
_INLINE_PARAM_RE = re.compile(r"@param\s+(\w+)\s+([^@]+)")
_INLINE_RETURN_RE = re.compile(r"@returns?\s+([^@]+)")
_RETURN_TAG_RE = re.compile(r"^@returns?\b")
_MAIN_TAG_RE = re.compile(r"^@(abstract|discussion|brief)\b\s*")


@dataclass
class ParsedDocComment:
    """Main description plus per-parameter and return documentation."""

    main: str = ""
    params: dict[str, str] = field(default_factory=dict)
    returns: str = ""


def _clean_lines(comment: str) -> list[str]:
    cleaned = _DELIMITERS_RE.sub("", comment)
    return [line.strip() for line in cleaned.splitlines() if line.strip()]


def _parse_inline(line: str) -> ParsedDocComment:
    result = ParsedDocComment()
    result.main = line.split("@param", 1)[0].strip()
    for match in _INLINE_PARAM_RE.finditer(line):
        result.params[match.group(1)] = match.group(2).strip()
    return_match = _INLINE_RETURN_RE.search(line)
    if return_match:
        result.returns = return_match.group(1).strip()
    return result


def parse_doc_comment(comment: str | None) -> ParsedDocComment:
    """Parse a documentation comment block.

    Missing tags give empty values; this never fails.
    """
    if not comment:
        return ParsedDocComment()

    lines = _clean_lines(comment)
    if len(lines) == 1 and "@param" in lines[0]:
        return _parse_inline(lines[0])

    result = ParsedDocComment()
    main_lines: list[str] = []
    return_lines: list[str] = []
    current_param = ""
    current_doc: list[str] = []
    in_return = False

    def flush_param() -> None:
        nonlocal current_param, current_doc
        if current_param:
            result.params[current_param] = " ".join(current_doc).strip()
        current_param = ""
        current_doc = []

    for line in lines:
        param_match = _PARAM_RE.match(line)
        if param_match:
            flush_param()
            in_return = False
            current_param = param_match.group(1)
            current_doc = [param_match.group(2)] if param_match.group(2) else []
        elif _RETURN_TAG_RE.match(line):
            flush_param()
            in_return = True
            return_lines = [_RETURN_TAG_RE.sub("", line).strip()]
        elif _MAIN_TAG_RE.match(line):
            flush_param()
            in_return = False
            text = _MAIN_TAG_RE.sub("", line).strip()
            if text:
                main_lines.append(text)
        elif current_param:
            current_doc.append(line)
        elif in_return:
            return_lines.append(line)
        elif not line.startswith("@"):
            main_lines.append(line)
    flush_param()

    result.main = " ".join(main_lines).strip()
    result.returns = " ".join(part for part in return_lines if part).strip()
    return result


def apply_parameter_docs(method: MethodModel, parsed: ParsedDocComment) -> MethodModel:
    """Attach parsed documentation to a method and its parameters.

    Parameters are matched by name; @param entries whose name matches no
    parameter are assigned to the remaining parameters by position.
    """
    method.documentation = parsed.main
    method.return_documentation = parsed.returns

    unused = [name for name in parsed.params if name not in {p.name for p in method.parameters}]
    for param in method.parameters:
        if param.name in parsed.params:
            param.documentation = parsed.params[param.name]
        elif unused:
            param.documentation = parsed.params[unused.pop(0)]
    return method
