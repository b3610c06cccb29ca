"""
Tokenizer for PromQL expressions.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

NUMBER = "number"
DURATION = "duration"
STRING = "string"
IDENT = "ident"
OP = "op"
EOF = "eof"


class ParseError(ValueError):
    def __init__(self, message: str, pos: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.pos = pos

    def __str__(self) -> str:
        return f"parse error at char {self.pos + 1}: {self.message}"


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    pos: int
    end: int


_TOKEN_RE = re.compile(
    r"""
     (?P<ws>\s+|\#[^\n]*)
    |(?P<duration>(?:\d+(?:ms|[smhdwy]))+(?![A-Za-z0-9_.]))
    |(?P<number>0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    |(?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*'|`[^`]*`)
    |(?P<ident>[A-Za-z_:][A-Za-z0-9_:]*)
    |(?P<op>=~|!~|!=|==|>=|<=|[-+*/%^=<>(){}\[\],:@])
    """,
    re.VERBOSE,
)

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_ESCAPE_RE = re.compile(
    r"\\(?:x([0-9a-fA-F]{2})|u([0-9a-fA-F]{4})|U([0-9a-fA-F]{8})|([0-7]{3})|(.))",
    re.DOTALL,
)


def unquote(literal: str, pos: int = 0) -> str:
    """Strip quotes from a string token and resolve its escape sequences."""
    quote_char, body = literal[0], literal[1:-1]
    if quote_char == "`":
        return body

    def _replace(m: "re.Match[str]") -> str:
        hx, u4, u8, octal, ch = m.groups()
        if hx:
            return chr(int(hx, 16))
        if u4 or u8:
            return chr(int(u4 or u8, 16))
        if octal:
            return chr(int(octal, 8))
        if ch in _ESCAPES:
            return _ESCAPES[ch]
        raise ParseError(f"unknown escape sequence \\{ch}", pos + m.start() + 1)

    return _ESCAPE_RE.sub(_replace, body)


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    # inside [...] a colon separates subquery range and step, it never starts a name
    bracket_depth = 0
    while pos < len(text):
        if bracket_depth and text[pos] == ":":
            tokens.append(Token(OP, ":", pos, pos + 1))
            pos += 1
            continue
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ParseError(f"unexpected character {text[pos]!r}", pos)
        kind = m.lastgroup
        value = m.group()
        if kind != "ws":
            tokens.append(Token(kind, value, pos, m.end()))
            if kind == OP and value == "[":
                bracket_depth += 1
            elif kind == OP and value == "]" and bracket_depth:
                bracket_depth -= 1
        pos = m.end()
    tokens.append(Token(EOF, "", len(text), len(text)))
    return tokens
