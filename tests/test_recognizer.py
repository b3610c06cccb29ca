"""
Tests for recognizing the selection behind a backend UI link.
"""

from __future__ import annotations

from urllib.parse import urlencode

import pytest

from config import Settings
from engine.enums import BackendKind
from engine.errors import InvalidInput, InvalidQuery
from engine.promql import format_selector
from engine.recognizer import recognize_url
from engine.sources import Source

NOW = 1700000000.0
SETTINGS = Settings()

SOURCES = [
    Source(BackendKind.metrics, "thanos-query:9090", "http://localhost:9090"),
    Source(BackendKind.traces, "jaeger:16686", "http://localhost:16686"),
]


def graph_url(**params):
    return "http://localhost:9090/graph?" + urlencode(params)


def test_recognizes_first_panel_expression_and_range():
    url = graph_url(**{"g0.expr": 'rate(http_requests_total{job="ping"}[5m]) / up', "g0.range_input": "2h"})
    found = recognize_url(SOURCES, url, SETTINGS, now=NOW)
    assert found.kind is BackendKind.metrics
    assert [format_selector(g) for g in found.selector_groups] == [
        '{__name__="http_requests_total",job="ping"}',
        '{__name__="up"}',
    ]
    assert found.window.end == NOW
    assert found.window.start == NOW - 7200


def test_missing_range_defaults_to_half_an_hour():
    found = recognize_url(SOURCES, graph_url(**{"g0.expr": "up"}), SETTINGS, now=NOW)
    assert found.window.duration == 1800


def test_link_produced_for_other_host_is_still_read():
    url = "http://prometheus.example.com/graph?" + urlencode({"g0.expr": "up"})
    assert recognize_url(SOURCES, url, SETTINGS, now=NOW) is not None


def test_empty_query_on_known_host_is_invalid_input():
    with pytest.raises(InvalidInput):
        recognize_url(SOURCES, "http://localhost:9090/graph", SETTINGS, now=NOW)


def test_unknown_url_is_not_recognized():
    assert recognize_url(SOURCES, "http://localhost:16686/trace/abc", SETTINGS, now=NOW) is None


def test_bad_expression_is_invalid_query():
    with pytest.raises(InvalidQuery):
        recognize_url(SOURCES, graph_url(**{"g0.expr": "sum("}), SETTINGS, now=NOW)


def test_bad_range_is_invalid_input():
    with pytest.raises(InvalidInput):
        recognize_url(SOURCES, graph_url(**{"g0.expr": "up", "g0.range_input": "soon"}), SETTINGS, now=NOW)


def test_no_metrics_source_recognizes_nothing():
    only_traces = [SOURCES[1]]
    assert recognize_url(only_traces, graph_url(**{"g0.expr": "up"}), SETTINGS, now=NOW) is None


def test_default_window_comes_from_settings():
    custom = Settings(recognizer_default_window_seconds=600)
    found = recognize_url(SOURCES, graph_url(**{"g0.expr": "up"}), custom, now=NOW)
    assert found.window.start == NOW - 600
