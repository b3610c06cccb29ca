"""
Test Suite for the PromQL parser

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest

from engine.promql import Matcher, MatchOp, ParseError, parse
from engine.promql.lexer import tokenize
from engine.promql.nodes import (
    AggregateExpr,
    BinaryExpr,
    Call,
    MatrixSelector,
    NumberLiteral,
    ParenExpr,
    StringLiteral,
    SubqueryExpr,
    UnaryExpr,
    VectorSelector,
)


def name(metric):
    return Matcher("__name__", MatchOp.equal, metric)


def vs(metric, *matchers):
    return VectorSelector(metric, (name(metric),) + matchers)


def test_bare_metric_name():
    assert parse("up") == vs("up")


def test_selector_with_all_matcher_ops():
    expr = parse('http_requests_total{job="ping", code!="200", path=~"/api/.*", method!~"GET|HEAD"}')
    assert expr == vs(
        "http_requests_total",
        Matcher("job", MatchOp.equal, "ping"),
        Matcher("code", MatchOp.not_equal, "200"),
        Matcher("path", MatchOp.regex, "/api/.*"),
        Matcher("method", MatchOp.not_regex, "GET|HEAD"),
    )


def test_name_matcher_inside_braces_sets_name():
    expr = parse('{__name__="up", job="ping"}')
    assert isinstance(expr, VectorSelector)
    assert expr.name == "up"
    assert expr.matchers == (name("up"), Matcher("job", MatchOp.equal, "ping"))


def test_quoted_metric_name_inside_braces():
    expr = parse('{"my.metric", job="a"}')
    assert expr.matchers[0] == name("my.metric")


def test_trailing_comma_and_single_quotes():
    expr = parse("up{job='ping',}")
    assert expr == vs("up", Matcher("job", MatchOp.equal, "ping"))


def test_string_escapes_are_resolved():
    expr = parse(r'up{path="a\"b\\c"}')
    assert expr.matchers[1].value == 'a"b\\c'


def test_raw_string_keeps_backslashes():
    expr = parse(r"up{path=~`\d+`}")
    assert expr.matchers[1].value == r"\d+"


def test_alert_rule_expression():
    expr = parse('sum by (job) (rate(http_requests_total{job="ping", code="500"}[5m])) > 0.3')
    assert isinstance(expr, BinaryExpr)
    assert expr.op == ">"
    assert expr.rhs == NumberLiteral(0.3)
    agg = expr.lhs
    assert isinstance(agg, AggregateExpr)
    assert agg.op == "sum"
    assert agg.grouping == ("job",)
    call = agg.expr
    assert isinstance(call, Call) and call.func == "rate"
    matrix = call.args[0]
    assert isinstance(matrix, MatrixSelector)
    assert matrix.range == 300.0
    assert matrix.vector_selector.name == "http_requests_total"


def test_grouping_after_aggregate_body():
    expr = parse("sum(up) without (instance)")
    assert isinstance(expr, AggregateExpr)
    assert expr.grouping == ("instance",)
    assert expr.without is True


def test_parameterized_aggregation():
    expr = parse("topk(3, up)")
    assert isinstance(expr, AggregateExpr)
    assert expr.param == NumberLiteral(3.0)
    assert expr.expr == vs("up")


def test_aggregation_argument_count_is_checked():
    with pytest.raises(ParseError):
        parse("topk(up)")


def test_operator_precedence():
    expr = parse("a + b * c")
    assert expr == BinaryExpr("+", vs("a"), BinaryExpr("*", vs("b"), vs("c")))


def test_left_associativity():
    expr = parse("a - b - c")
    assert expr == BinaryExpr("-", BinaryExpr("-", vs("a"), vs("b")), vs("c"))


def test_power_is_right_associative():
    expr = parse("2 ^ 3 ^ 2")
    assert expr == BinaryExpr("^", NumberLiteral(2.0), BinaryExpr("^", NumberLiteral(3.0), NumberLiteral(2.0)))


def test_unary_minus_folds_into_number():
    assert parse("-1") == NumberLiteral(-1.0)
    assert parse("-up") == UnaryExpr("-", vs("up"))


def test_set_operators_have_lowest_precedence():
    expr = parse("a > 1 or b < 2 and c")
    assert isinstance(expr, BinaryExpr)
    assert expr.op == "or"
    assert expr.rhs.op == "and"


def test_bool_modifier_and_vector_matching():
    expr = parse("a == bool on (job) group_left (team) b")
    assert expr.return_bool is True
    assert expr.matching.on is True
    assert expr.matching.labels == ("job",)
    assert expr.matching.card == "many-to-one"
    assert expr.matching.include == ("team",)


def test_bool_only_on_comparisons():
    with pytest.raises(ParseError):
        parse("a + bool b")


def test_set_operator_rejects_scalars():
    with pytest.raises(ParseError):
        parse("up and 1")


def test_offset_and_at_modifiers():
    expr = parse("rate(up[5m] offset 1h @ 1700000000)")
    matrix = expr.args[0]
    assert matrix.vector_selector.offset == 3600.0
    assert matrix.vector_selector.at == 1700000000.0


def test_negative_offset_and_at_start():
    expr = parse("up offset -5m @ start()")
    assert expr.offset == -300.0
    assert expr.at == "start"


def test_subquery():
    expr = parse("max_over_time(rate(up[1m])[30m:1m])")
    sub = expr.args[0]
    assert isinstance(sub, SubqueryExpr)
    assert sub.range == 1800.0
    assert sub.step == 60.0


def test_subquery_without_step():
    sub = parse("rate(up[1m])[5m:]")
    assert isinstance(sub, SubqueryExpr)
    assert sub.step is None


def test_recording_rule_names_with_colons():
    expr = parse("job:http_requests:rate5m > 10")
    assert expr.lhs == vs("job:http_requests:rate5m")


def test_paren_and_string_literals():
    assert parse("(up)") == ParenExpr(vs("up"))
    assert parse('"hello"') == StringLiteral("hello")


def test_spans_cover_source_text():
    text = "sum(rate(x[1m])) > 0.3"
    expr = parse(text)
    start, end = expr.lhs.span
    assert text[start:end] == "sum(rate(x[1m]))"


def test_equal_trees_ignore_formatting():
    assert parse('up{job="a"}') == parse('up {  job = "a" }')


def test_keywords_are_case_insensitive():
    expr = parse("sum BY (job) (up)")
    assert expr.grouping == ("job",)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "sum(",
        "up{job=}",
        'up{job="a"',
        "rate(up[5x])",
        'by(up)',
        '{job=~".*"}',
        "up[5m] [1m]",
        "(up) offset 5m",
        'up{job=~"("}',
        "1 +",
        "up up",
    ],
)
def test_malformed_expressions_raise(text):
    with pytest.raises(ParseError):
        parse(text)


def test_parse_error_reports_position():
    with pytest.raises(ParseError) as ei:
        parse("up{job=}")
    assert ei.value.pos == 7
    assert str(ei.value).startswith("parse error at char 8:")


def test_tokenizer_treats_colon_inside_brackets_as_operator():
    kinds = [(t.kind, t.value) for t in tokenize("x[5m:1m]")]
    assert ("op", ":") in kinds
    assert ("duration", "5m") in kinds
    assert ("duration", "1m") in kinds


def test_comments_are_skipped():
    assert parse("up # trailing comment") == vs("up")


def test_any_identifier_before_paren_parses_as_call():
    expr = parse("ts_of_max_over_time(up[5m]) > 0")
    assert isinstance(expr, BinaryExpr)
    assert expr.lhs == Call("ts_of_max_over_time", (MatrixSelector(vs("up"), 300.0),))
