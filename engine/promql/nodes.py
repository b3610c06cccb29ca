"""
Syntax tree produced by the PromQL parser.

Every node carries its ``span``, the ``[start, end)`` character offsets of the
source text it was parsed from. Spans are excluded from equality so that two
parses of differently formatted but equivalent queries compare equal.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

from engine.promql.labels import SelectorGroup

Span = Tuple[int, int]
# an ``@`` modifier is either a unix timestamp or one of "start" / "end"
AtModifier = Union[float, str]


def _span() -> Span:
    return field(default=(0, 0), compare=False, repr=False)


class Expr:
    span: Span

    def children(self) -> Tuple["Expr", ...]:
        return ()


@dataclass(frozen=True)
class NumberLiteral(Expr):
    value: float
    span: Span = _span()


@dataclass(frozen=True)
class StringLiteral(Expr):
    value: str
    span: Span = _span()


@dataclass(frozen=True)
class VectorSelector(Expr):
    name: Optional[str]
    matchers: SelectorGroup
    offset: Optional[float] = None
    at: Optional[AtModifier] = None
    span: Span = _span()


@dataclass(frozen=True)
class MatrixSelector(Expr):
    vector_selector: VectorSelector
    range: float
    span: Span = _span()

    def children(self) -> Tuple[Expr, ...]:
        return (self.vector_selector,)


@dataclass(frozen=True)
class SubqueryExpr(Expr):
    expr: Expr
    range: float
    step: Optional[float] = None
    offset: Optional[float] = None
    at: Optional[AtModifier] = None
    span: Span = _span()

    def children(self) -> Tuple[Expr, ...]:
        return (self.expr,)


@dataclass(frozen=True)
class ParenExpr(Expr):
    expr: Expr
    span: Span = _span()

    def children(self) -> Tuple[Expr, ...]:
        return (self.expr,)


@dataclass(frozen=True)
class UnaryExpr(Expr):
    op: str
    expr: Expr
    span: Span = _span()

    def children(self) -> Tuple[Expr, ...]:
        return (self.expr,)


@dataclass(frozen=True)
class VectorMatching:
    card: str
    labels: Tuple[str, ...] = ()
    on: bool = False
    include: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BinaryExpr(Expr):
    op: str
    lhs: Expr
    rhs: Expr
    return_bool: bool = False
    matching: Optional[VectorMatching] = None
    span: Span = _span()

    def children(self) -> Tuple[Expr, ...]:
        return (self.lhs, self.rhs)


@dataclass(frozen=True)
class AggregateExpr(Expr):
    op: str
    expr: Expr
    param: Optional[Expr] = None
    grouping: Tuple[str, ...] = ()
    without: bool = False
    span: Span = _span()

    def children(self) -> Tuple[Expr, ...]:
        if self.param is None:
            return (self.expr,)
        return (self.param, self.expr)


@dataclass(frozen=True)
class Call(Expr):
    func: str
    args: Tuple[Expr, ...] = ()
    span: Span = _span()

    def children(self) -> Tuple[Expr, ...]:
        return self.args


def walk(node: Expr) -> Iterator[Expr]:
    """Yield ``node`` and its descendants depth-first, left to right."""
    yield node
    for child in node.children():
        yield from walk(child)
