"""
Label matchers as written inside a PromQL selector.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Tuple

import re2


class MatchOp(str, Enum):
    equal = "="
    not_equal = "!="
    regex = "=~"
    not_regex = "!~"


# Prometheus evaluates matcher regexes with RE2 syntax
@lru_cache(maxsize=512)
def _compile(pattern: str) -> Any:
    return re2.compile(pattern)


def quote(value: str) -> str:
    """Double-quote ``value`` the way Go's ``%q`` does for printable text."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


@dataclass(frozen=True)
class Matcher:
    name: str
    op: MatchOp
    value: str

    def __post_init__(self) -> None:
        if self.op in (MatchOp.regex, MatchOp.not_regex):
            try:
                _compile(self.value)
            except re2.error as exc:
                raise ValueError(f"invalid regular expression {self.value!r}: {exc}") from exc

    def matches(self, value: str) -> bool:
        if self.op is MatchOp.equal:
            return value == self.value
        if self.op is MatchOp.not_equal:
            return value != self.value
        hit = _compile(self.value).fullmatch(value) is not None
        return hit if self.op is MatchOp.regex else not hit

    def __str__(self) -> str:
        return f"{self.name}{self.op.value}{quote(self.value)}"


SelectorGroup = Tuple[Matcher, ...]


def format_selector(matchers: SelectorGroup) -> str:
    return "{" + ",".join(str(m) for m in matchers) + "}"
