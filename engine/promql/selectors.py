"""
Selector extraction and alert-expression helpers built on the PromQL parser.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import List

from engine.promql.labels import SelectorGroup
from engine.promql.nodes import BinaryExpr, Expr, NumberLiteral, ParenExpr, UnaryExpr, VectorSelector, walk
from engine.promql.parser import COMPARISON_OPS

log = logging.getLogger(__name__)


def extract_selector_groups(expr: Expr) -> List[SelectorGroup]:
    """One matcher group per vector selector, in pre-order, left to right.

    Matrix selectors contribute the group of the vector selector they wrap.
    ``offset`` and ``@`` modifiers are not reflected in the result.
    """
    groups: List[SelectorGroup] = []
    for node in walk(expr):
        if isinstance(node, VectorSelector):
            if node.offset is not None or node.at is not None:
                log.debug("ignoring time modifiers on selector %s", node.name or node.matchers)
            groups.append(node.matchers)
    return groups


def _is_number(expr: Expr) -> bool:
    if isinstance(expr, NumberLiteral):
        return True
    if isinstance(expr, (ParenExpr, UnaryExpr)):
        return _is_number(expr.expr)
    return False


def strip_alert_threshold(expression: str, expr: Expr) -> str:
    """Drop the numeric threshold comparison an alerting rule ends with.

    ``sum(rate(x[1m])) > 0.3`` becomes ``sum(rate(x[1m]))``. Expressions whose
    top level is not a plain comparison against a number are returned as-is.
    """
    if isinstance(expr, BinaryExpr) and expr.op in COMPARISON_OPS and not expr.return_bool:
        if _is_number(expr.rhs) and not _is_number(expr.lhs):
            start, end = expr.lhs.span
            return expression[start:end].strip()
        if _is_number(expr.lhs) and not _is_number(expr.rhs):
            start, end = expr.rhs.span
            return expression[start:end].strip()
    return expression.strip()
