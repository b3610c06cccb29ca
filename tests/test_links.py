"""
Test Suite for the deep-link builders

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import json
from urllib.parse import parse_qs, urlsplit

import pytest

from config import Settings
from engine.enums import BackendKind
from engine.errors import ConfigError
from engine.links import logs, metrics, profiles, render, traces
from engine.models import AlertQuery, CorrelationContext, ExemplarPivot, TimeWindow
from engine.promql import Matcher, MatchOp
from engine.sources import Source

NOW = 1700000000.0

MATCHERS = (
    Matcher("__name__", MatchOp.equal, "ping_requests_total"),
    Matcher("job", MatchOp.equal, "ping"),
)

ALERT = AlertQuery(
    alert_name="PingTooManyErrors",
    rule_expression='rate(ping_requests_total{job="ping"}[1m]) > 0.3',
    firing_labels={"job": "ping", "instance": "ping:8080"},
)

IDENTITY = {"job": "ping", "instance": "ping:8080"}


def make_ctx(pivot=None, identity=None, matchers=MATCHERS, settings=None):
    if pivot is not None:
        window = TimeWindow.around(pivot.timestamp, 300, NOW)
    else:
        window = TimeWindow.lookback(3600, NOW)
    return CorrelationContext(
        alert=ALERT,
        matchers=matchers,
        rule_expression='rate(ping_requests_total{job="ping"}[1m])',
        identity=IDENTITY if identity is None else identity,
        window=window,
        settings=settings or Settings(),
        pivot=pivot,
    )


PIVOT = ExemplarPivot(series_labels=IDENTITY, external_id="abc123", timestamp=NOW - 100)


def query_of(url):
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


def test_metrics_link_has_two_panels():
    source = Source(BackendKind.metrics, "thanos-query:9090", "http://localhost:9090")
    url = metrics.build(source, make_ctx())
    assert url.startswith("http://localhost:9090/graph?")
    q = query_of(url)
    assert q["g0.expr"] == 'rate({__name__="ping_requests_total",job="ping"}[1m])'
    assert q["g1.expr"] == 'rate(ping_requests_total{job="ping"}[1m])'
    assert q["g0.range_input"] == "1h"
    assert q["g0.end_input"] == "2023-11-14 22:13:20"
    assert q["g0.tab"] == "0"
    assert q["g1.max_source_resolution"] == "0s"


def test_metrics_selector_not_wrapped_for_gauges():
    gauge = (Matcher("__name__", MatchOp.equal, "up"), Matcher("job", MatchOp.equal, "ping"))
    assert metrics.selector_query(gauge, "1m") == '{__name__="up",job="ping"}'


def test_metrics_external_endpoint_gets_scheme():
    source = Source(BackendKind.metrics, "", "localhost:9090")
    assert metrics.build(source, make_ctx()).startswith("http://localhost:9090/graph?")


def test_metrics_description():
    assert metrics.describe(make_ctx()) == "Metric view for the source of the alert [Prometheus UI]"


def test_logs_link_without_pivot():
    source = Source(BackendKind.logs, "loki:3100", "http://grafana:3000")
    url = logs.build(source, make_ctx())
    assert url.startswith("http://grafana:3000/explore?")
    q = query_of(url)
    assert q["orgId"] == "1"
    assert json.loads(q["left"]) == ["now-1h", "now", "Logging", {"refId": "A", "expr": '{job="ping"}'}]
    assert logs.describe(make_ctx()) == "Log view for the same job and time [Loki via Grafana]"


def test_logs_link_with_pivot_filters_on_trace_id():
    source = Source(BackendKind.logs, "loki:3100", "http://grafana:3000")
    ctx = make_ctx(pivot=PIVOT)
    left = json.loads(query_of(logs.build(source, ctx))["left"])
    assert left[0] == str(int((NOW - 400) * 1000))
    assert left[1] == str(int(NOW * 1000))
    assert left[3]["expr"] == '{job="ping"} |= "abc123"'
    assert logs.describe(ctx) == "Log view connected to the exemplar [Loki via Grafana]"


def test_logs_query_without_job():
    assert logs.logql(make_ctx(identity={})) == '{job=~".+"}'


def test_traces_link_with_pivot():
    source = Source(BackendKind.traces, "jaeger:16686", "http://jaeger:16686")
    assert traces.build(source, make_ctx(pivot=PIVOT)) == "http://jaeger:16686/trace/abc123"


def test_traces_pivot_id_is_path_escaped():
    source = Source(BackendKind.traces, "", "http://jaeger:16686")
    pivot = ExemplarPivot(series_labels={}, external_id="a/b c", timestamp=NOW)
    assert traces.build(source, make_ctx(pivot=pivot)) == "http://jaeger:16686/trace/a%2Fb%20c"


def test_traces_search_without_pivot():
    source = Source(BackendKind.traces, "", "http://jaeger:16686")
    url = traces.build(source, make_ctx())
    assert url.startswith("http://jaeger:16686/search?")
    q = query_of(url)
    assert q["service"] == "ping"
    assert q["start"] == str(int((NOW - 3600) * 1_000_000))
    assert q["end"] == str(int(NOW * 1_000_000))
    assert q["lookback"] == "custom"
    assert q["limit"] == "20"
    assert traces.describe(make_ctx()) == "Trace search for the same service and time [Jaeger]"


def test_traces_search_without_job_has_no_service():
    source = Source(BackendKind.traces, "", "http://jaeger:16686")
    assert "service" not in query_of(traces.build(source, make_ctx(identity={})))


def test_profiles_link_without_pivot():
    source = Source(BackendKind.profiles, "parca:7070", "http://parca:7070")
    q = query_of(profiles.build(source, make_ctx()))
    assert q["expression_a"] == (
        'process_cpu:cpu:nanoseconds:cpu:nanoseconds:delta{job="ping", instance="ping:8080"}'
    )
    assert q["time_selection_a"] == "relative:minute|60"
    assert q["currentProfileView"] == "icicle"
    assert q["merge_a"] == "true"


def test_profiles_link_with_pivot():
    source = Source(BackendKind.profiles, "parca:7070", "http://parca:7070")
    ctx = make_ctx(pivot=PIVOT)
    q = query_of(profiles.build(source, ctx))
    assert q["expression_a"] == (
        'process_cpu:cpu:nanoseconds:cpu:nanoseconds:delta{profile_label_trace_id="abc123", job="ping"}'
    )
    assert q["from_a"] == str(int((NOW - 400) * 1000))
    assert q["to_a"] == str(int(NOW * 1000))
    assert "time_selection_a" not in q
    assert profiles.describe(ctx) == "Profiles view connected to the exemplar [Parca]"


def test_profiles_link_uses_configured_profile_type_and_trace_label():
    source = Source(BackendKind.profiles, "parca:7070", "http://parca:7070")
    custom = Settings(profiles_profile_type="memory:inuse_space:bytes", profiles_trace_id_label="trace_id")
    q = query_of(profiles.build(source, make_ctx(pivot=PIVOT, settings=custom)))
    assert q["expression_a"] == 'memory:inuse_space:bytes{trace_id="abc123", job="ping"}'


def test_render_reports_missing_external_endpoint():
    source = Source(BackendKind.traces, "jaeger:16686", "")
    entry = render(source, make_ctx())
    assert entry.url == ""
    assert "no external endpoint" in entry.error
    assert entry.description.endswith("[Jaeger]")


def test_render_success_has_no_error():
    source = Source(BackendKind.metrics, "", "http://localhost:9090")
    entry = render(source, make_ctx())
    assert entry.error is None
    assert entry.url.startswith("http://localhost:9090/graph?")


def test_source_external_url_raises_config_error():
    with pytest.raises(ConfigError):
        Source(BackendKind.logs, "loki:3100", "  ").external_url


def test_pivot_window_is_clamped_to_now():
    window = TimeWindow.around(NOW - 10, 300, NOW)
    assert window.start == NOW - 310
    assert window.end == NOW
