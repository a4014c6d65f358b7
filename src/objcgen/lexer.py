"""Tokenizer for single Objective-C declarations."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import MalformedSignature

IDENT = "IDENT"
NUMBER = "NUMBER"
STRING = "STRING"
PUNCT = "PUNCT"
ELLIPSIS = "ELLIPSIS"

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<line_comment>//[^\n]*)
  | (?P<block_comment>/\*.*?(?:\*/|\Z))
  | (?P<ellipsis>\.\.\.)
  | (?P<ident>@?[A-Za-z_]\w*)
  | (?P<number>\d+(?:\.\d+)*)
  | (?P<string>@?"(?:[^"\\]|\\.)*")
  | (?P<punct>[()\[\]{}:;,*^<>+\-=&|.!~?/%#'])
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    start: int
    end: int


def tokenize(text: str) -> list[Token]:
    """Split a declaration into tokens, dropping whitespace and comments."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise MalformedSignature(
                f"Unexpected character {text[pos]!r} at offset {pos}", text
            )
        kind = match.lastgroup
        value = match.group()
        if kind == "ident":
            tokens.append(Token(IDENT, value, match.start(), match.end()))
        elif kind == "number":
            tokens.append(Token(NUMBER, value, match.start(), match.end()))
        elif kind == "string":
            tokens.append(Token(STRING, value, match.start(), match.end()))
        elif kind == "ellipsis":
            tokens.append(Token(ELLIPSIS, value, match.start(), match.end()))
        elif kind == "punct":
            tokens.append(Token(PUNCT, value, match.start(), match.end()))
        pos = match.end()
    return tokens


class TokenStream:
    """Cursor over a token list for recursive-descent parsing."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def peek(self, offset: int = 0) -> Token | None:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def next(self) -> Token:
        token = self.peek()
        if token is None:
            raise MalformedSignature("Unexpected end of declaration", self.text)
        self.pos += 1
        return token

    def check(self, value: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token is not None and token.kind != STRING and token.value == value

    def check_kind(self, kind: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token is not None and token.kind == kind

    def accept(self, value: str) -> Token | None:
        if self.check(value):
            return self.next()
        return None

    def expect(self, value: str, what: str) -> Token:
        token = self.accept(value)
        if token is None:
            raise MalformedSignature(f"Expected {what}", self.text)
        return token

    def balanced(self, open_: str = "(", close: str = ")") -> str:
        """Consume a balanced group starting at `open_`, returning the inner source text.

        Inner text is sliced from the original declaration with runs of
        whitespace collapsed.
        """
        first = self.expect(open_, f"'{open_}'")
        depth = 1
        while True:
            token = self.next()
            if token.kind == PUNCT and token.value == open_:
                depth += 1
            elif token.kind == PUNCT and token.value == close:
                depth -= 1
                if depth == 0:
                    inner = self.text[first.end : token.start]
                    return " ".join(inner.split())
