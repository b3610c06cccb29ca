"""
Recursive descent parser for PromQL expressions.

Operator precedence, lowest first: ``or``; ``and`` ``unless``; comparisons;
``+`` ``-``; ``*`` ``/`` ``%`` ``atan2``; unary ``+`` ``-``; ``^`` (right
associative). Keywords are matched case-insensitively, function names are not.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Tuple

from config import NAME_LABEL
from engine.promql.duration import parse_duration
from engine.promql.labels import Matcher, MatchOp
from engine.promql.lexer import DURATION, EOF, IDENT, NUMBER, OP, STRING, ParseError, Token, tokenize, unquote
from engine.promql.nodes import (
    AggregateExpr,
    BinaryExpr,
    Call,
    Expr,
    MatrixSelector,
    NumberLiteral,
    ParenExpr,
    StringLiteral,
    SubqueryExpr,
    UnaryExpr,
    VectorMatching,
    VectorSelector,
)

COMPARISON_OPS = frozenset({"==", "!=", "<=", "<", ">=", ">"})
SET_OPS = frozenset({"and", "or", "unless"})

_BINARY_LEVELS: List[frozenset] = [
    frozenset({"or"}),
    frozenset({"and", "unless"}),
    COMPARISON_OPS,
    frozenset({"+", "-"}),
    frozenset({"*", "/", "%", "atan2"}),
]

AGGREGATORS = frozenset({
    "sum", "avg", "count", "min", "max", "group", "stddev", "stdvar",
    "topk", "bottomk", "count_values", "quantile", "limitk", "limit_ratio",
})
_PARAM_AGGREGATORS = frozenset({"topk", "bottomk", "count_values", "quantile", "limitk", "limit_ratio"})

_KEYWORDS = frozenset({
    "by", "without", "on", "ignoring", "group_left", "group_right", "offset", "bool",
    "and", "or", "unless", "atan2",
})

_MATCH_OPS = {op.value: op for op in MatchOp}


def _number(text: str) -> float:
    if text[:2].lower() == "0x":
        return float(int(text, 16))
    return float(text)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.i = 0
        self.last_end = 0

    # token helpers

    def _peek(self, ahead: int = 0) -> Token:
        return self.tokens[min(self.i + ahead, len(self.tokens) - 1)]

    def _next(self) -> Token:
        tok = self.tokens[self.i]
        if tok.kind != EOF:
            self.i += 1
            self.last_end = tok.end
        return tok

    def _at_op(self, *values: str, ahead: int = 0) -> bool:
        tok = self._peek(ahead)
        return tok.kind == OP and tok.value in values

    def _at_keyword(self, *names: str, ahead: int = 0) -> bool:
        tok = self._peek(ahead)
        return tok.kind == IDENT and tok.value.lower() in names

    def _expect_op(self, value: str, context: str) -> Token:
        tok = self._peek()
        if tok.kind != OP or tok.value != value:
            raise ParseError(f"unexpected {self._describe(tok)} in {context}, expected {value!r}", tok.pos)
        return self._next()

    @staticmethod
    def _describe(tok: Token) -> str:
        if tok.kind == EOF:
            return "end of input"
        return f"{tok.kind} {tok.value!r}"

    # entry point

    def parse(self) -> Expr:
        if self._peek().kind == EOF:
            raise ParseError("no expression found in input", 0)
        expr = self._parse_expr()
        tok = self._peek()
        if tok.kind != EOF:
            raise ParseError(f"unexpected {self._describe(tok)}", tok.pos)
        return expr

    def _parse_expr(self) -> Expr:
        return self._parse_binary(0)

    # binary operators

    def _binary_op_at(self, level: int) -> bool:
        tok = self._peek()
        if tok.kind == OP:
            return tok.value in _BINARY_LEVELS[level]
        if tok.kind == IDENT:
            return tok.value.lower() in _BINARY_LEVELS[level]
        return False

    def _parse_binary(self, level: int) -> Expr:
        if level == len(_BINARY_LEVELS):
            return self._parse_unary()
        lhs = self._parse_binary(level + 1)
        while self._binary_op_at(level):
            op = self._next().value.lower()
            return_bool, matching = self._parse_binary_modifiers(op)
            rhs = self._parse_binary(level + 1)
            lhs = self._binary(op, lhs, rhs, return_bool, matching)
        return lhs

    def _binary(
        self,
        op: str,
        lhs: Expr,
        rhs: Expr,
        return_bool: bool,
        matching: Optional[VectorMatching],
    ) -> BinaryExpr:
        if op in SET_OPS:
            for side in (lhs, rhs):
                if isinstance(side, (NumberLiteral, StringLiteral)):
                    raise ParseError(f"set operator {op!r} not allowed in binary scalar expression", side.span[0])
        return BinaryExpr(op, lhs, rhs, return_bool, matching, span=(lhs.span[0], rhs.span[1]))

    def _parse_binary_modifiers(self, op: str) -> Tuple[bool, Optional[VectorMatching]]:
        return_bool = False
        if self._at_keyword("bool"):
            tok = self._next()
            if op not in COMPARISON_OPS:
                raise ParseError("bool modifier can only be used on comparison operators", tok.pos)
            return_bool = True

        matching = None
        if self._at_keyword("on", "ignoring"):
            on = self._next().value.lower() == "on"
            labels = self._parse_label_list()
            card = "one-to-one"
            include: Tuple[str, ...] = ()
            if self._at_keyword("group_left", "group_right"):
                tok = self._next()
                if op in SET_OPS:
                    raise ParseError("no grouping allowed for set operations", tok.pos)
                card = "many-to-one" if tok.value.lower() == "group_left" else "one-to-many"
                if self._at_op("("):
                    include = self._parse_label_list()
            matching = VectorMatching(card=card, labels=labels, on=on, include=include)
        return return_bool, matching

    def _parse_label_list(self) -> Tuple[str, ...]:
        self._expect_op("(", "grouping opts")
        labels: List[str] = []
        while not self._at_op(")"):
            tok = self._next()
            if tok.kind == IDENT:
                labels.append(tok.value)
            elif tok.kind == STRING:
                labels.append(unquote(tok.value, tok.pos))
            else:
                raise ParseError(f"unexpected {self._describe(tok)} in grouping opts, expected label", tok.pos)
            if not self._at_op(")"):
                self._expect_op(",", "grouping opts")
        self._next()
        return tuple(labels)

    # unary, power and postfix modifiers

    def _parse_unary(self) -> Expr:
        if self._at_op("+", "-"):
            tok = self._next()
            operand = self._parse_unary()
            span = (tok.pos, operand.span[1])
            if isinstance(operand, NumberLiteral):
                value = -operand.value if tok.value == "-" else operand.value
                return NumberLiteral(value, span=span)
            return UnaryExpr(tok.value, operand, span=span)
        return self._parse_power()

    def _parse_power(self) -> Expr:
        lhs = self._parse_postfix()
        if self._at_op("^"):
            self._next()
            return_bool, matching = self._parse_binary_modifiers("^")
            rhs = self._parse_unary()
            return self._binary("^", lhs, rhs, return_bool, matching)
        return lhs

    def _parse_postfix(self) -> Expr:
        expr = self._parse_primary()
        while True:
            if self._at_op("["):
                expr = self._parse_range(expr)
            elif self._at_keyword("offset"):
                expr = self._parse_offset(expr)
            elif self._at_op("@"):
                expr = self._parse_at(expr)
            else:
                return expr

    def _parse_duration_token(self, context: str) -> float:
        tok = self._next()
        try:
            if tok.kind == DURATION:
                return parse_duration(tok.value)
            if tok.kind == NUMBER:
                return _number(tok.value)
        except ValueError as exc:
            raise ParseError(str(exc), tok.pos) from exc
        raise ParseError(f"unexpected {self._describe(tok)} in {context}, expected duration", tok.pos)

    def _parse_range(self, expr: Expr) -> Expr:
        open_tok = self._next()
        rng = self._parse_duration_token("range")
        if self._at_op(":"):
            self._next()
            step = None
            if not self._at_op("]"):
                step = self._parse_duration_token("subquery step")
            self._expect_op("]", "subquery selector")
            return SubqueryExpr(expr, rng, step, span=(expr.span[0], self.last_end))
        self._expect_op("]", "matrix selector")
        if not isinstance(expr, VectorSelector):
            raise ParseError("ranges only allowed for vector selectors", open_tok.pos)
        if expr.offset is not None or expr.at is not None:
            raise ParseError("no offset or @ modifiers allowed before range", open_tok.pos)
        return MatrixSelector(expr, rng, span=(expr.span[0], self.last_end))

    def _modifier_target(self, expr: Expr, modifier: str, pos: int) -> Expr:
        target = expr.vector_selector if isinstance(expr, MatrixSelector) else expr
        if not isinstance(target, (VectorSelector, SubqueryExpr)):
            raise ParseError(
                f"{modifier} modifier must be preceded by an instant vector selector "
                "or range vector selector or a subquery",
                pos,
            )
        return target

    def _with_modifier(self, expr: Expr, **changes) -> Expr:
        span = (expr.span[0], self.last_end)
        if isinstance(expr, MatrixSelector):
            vs = replace(expr.vector_selector, **changes)
            return replace(expr, vector_selector=vs, span=span)
        return replace(expr, span=span, **changes)

    def _parse_offset(self, expr: Expr) -> Expr:
        tok = self._next()
        target = self._modifier_target(expr, "offset", tok.pos)
        if target.offset is not None:
            raise ParseError("offset may not be set multiple times", tok.pos)
        sign = 1.0
        if self._at_op("-"):
            self._next()
            sign = -1.0
        offset = sign * self._parse_duration_token("offset")
        return self._with_modifier(expr, offset=offset)

    def _parse_at(self, expr: Expr) -> Expr:
        tok = self._next()
        target = self._modifier_target(expr, "@", tok.pos)
        if target.at is not None:
            raise ParseError("@ <timestamp> may not be set multiple times", tok.pos)
        if self._at_keyword("start", "end") and self._at_op("(", ahead=1):
            at = self._next().value.lower()
            self._expect_op("(", "@ modifier")
            self._expect_op(")", "@ modifier")
            return self._with_modifier(expr, at=at)
        sign = 1.0
        if self._at_op("+", "-"):
            sign = -1.0 if self._next().value == "-" else 1.0
        ts_tok = self._next()
        if ts_tok.kind != NUMBER:
            raise ParseError(f"unexpected {self._describe(ts_tok)} in @, expected timestamp", ts_tok.pos)
        return self._with_modifier(expr, at=sign * _number(ts_tok.value))

    # primary expressions

    def _parse_primary(self) -> Expr:
        tok = self._peek()
        if tok.kind == NUMBER:
            self._next()
            return NumberLiteral(_number(tok.value), span=(tok.pos, tok.end))
        if tok.kind == DURATION:
            self._next()
            return NumberLiteral(parse_duration(tok.value), span=(tok.pos, tok.end))
        if tok.kind == STRING:
            self._next()
            return StringLiteral(unquote(tok.value, tok.pos), span=(tok.pos, tok.end))
        if tok.kind == OP and tok.value == "(":
            self._next()
            inner = self._parse_expr()
            self._expect_op(")", "paren expression")
            return ParenExpr(inner, span=(tok.pos, self.last_end))
        if tok.kind == OP and tok.value == "{":
            return self._parse_vector_selector(None, tok.pos)
        if tok.kind == IDENT:
            return self._parse_identifier(tok)
        raise ParseError(f"unexpected {self._describe(tok)}", tok.pos)

    def _parse_identifier(self, tok: Token) -> Expr:
        low = tok.value.lower()
        followed_by_paren = self._at_op("(", ahead=1)
        if low in AGGREGATORS and (followed_by_paren or self._at_keyword("by", "without", ahead=1)):
            return self._parse_aggregate()
        if low in _KEYWORDS:
            raise ParseError(f"unexpected keyword {tok.value!r}", tok.pos)
        if followed_by_paren:
            return self._parse_call()
        if low in ("inf", "nan") and not self._at_op("{", ahead=1):
            self._next()
            return NumberLiteral(float(low), span=(tok.pos, tok.end))
        self._next()
        return self._parse_vector_selector(tok.value, tok.pos)

    def _parse_aggregate(self) -> AggregateExpr:
        op_tok = self._next()
        op = op_tok.value.lower()
        grouping: Tuple[str, ...] = ()
        without = False
        grouped = False
        if self._at_keyword("by", "without"):
            without = self._next().value.lower() == "without"
            grouping = self._parse_label_list()
            grouped = True
        args = self._parse_args(f"aggregation {op!r}")
        if not grouped and self._at_keyword("by", "without"):
            without = self._next().value.lower() == "without"
            grouping = self._parse_label_list()

        want = 2 if op in _PARAM_AGGREGATORS else 1
        if len(args) != want:
            raise ParseError(f"wrong number of arguments for aggregate expression provided, expected {want}, got {len(args)}", op_tok.pos)
        param, body = (args[0], args[1]) if want == 2 else (None, args[0])
        return AggregateExpr(op, body, param, grouping, without, span=(op_tok.pos, self.last_end))

    def _parse_call(self) -> Call:
        # function names are not validated
        name_tok = self._next()
        args = self._parse_args(f"function {name_tok.value!r}")
        return Call(name_tok.value, tuple(args), span=(name_tok.pos, self.last_end))

    def _parse_args(self, context: str) -> List[Expr]:
        self._expect_op("(", context)
        args: List[Expr] = []
        while not self._at_op(")"):
            args.append(self._parse_expr())
            if not self._at_op(")"):
                self._expect_op(",", context)
        self._next()
        return args

    def _parse_vector_selector(self, name: Optional[str], start: int) -> VectorSelector:
        matchers: List[Matcher] = []
        if name is not None:
            matchers.append(Matcher(NAME_LABEL, MatchOp.equal, name))
        if self._at_op("{"):
            for m in self._parse_matchers():
                if name is not None and m.name == NAME_LABEL:
                    raise ParseError(f"metric name must not be set twice: {name!r} or {m.value!r}", start)
                matchers.append(m)
                if name is None and m.name == NAME_LABEL and m.op is MatchOp.equal:
                    name = m.value
        if not any(not m.matches("") for m in matchers):
            raise ParseError("vector selector must contain at least one non-empty matcher", start)
        return VectorSelector(name, tuple(matchers), span=(start, self.last_end))

    def _parse_matchers(self) -> List[Matcher]:
        self._expect_op("{", "label matching")
        matchers: List[Matcher] = []
        while not self._at_op("}"):
            label_tok = self._next()
            if label_tok.kind == IDENT:
                label = label_tok.value
            elif label_tok.kind == STRING:
                label = unquote(label_tok.value, label_tok.pos)
            else:
                raise ParseError(f"unexpected {self._describe(label_tok)} in label matching, expected label", label_tok.pos)

            if label_tok.kind == STRING and self._at_op(",", "}"):
                # {"metric.name"} selects by a quoted metric name
                matchers.append(Matcher(NAME_LABEL, MatchOp.equal, label))
            else:
                op_tok = self._next()
                if op_tok.kind != OP or op_tok.value not in _MATCH_OPS:
                    raise ParseError(f"unexpected {self._describe(op_tok)} in label matching, expected label matching operator", op_tok.pos)
                value_tok = self._next()
                if value_tok.kind != STRING:
                    raise ParseError(f"unexpected {self._describe(value_tok)} in label matching, expected string", value_tok.pos)
                try:
                    matchers.append(Matcher(label, _MATCH_OPS[op_tok.value], unquote(value_tok.value, value_tok.pos)))
                except ValueError as exc:
                    if isinstance(exc, ParseError):
                        raise
                    raise ParseError(str(exc), value_tok.pos) from exc

            if not self._at_op("}"):
                self._expect_op(",", "label matching")
        self._next()
        return matchers


def parse(expression: str) -> Expr:
    """Parse ``expression`` into a syntax tree, raising ParseError on bad input."""
    return _Parser(expression or "").parse()
