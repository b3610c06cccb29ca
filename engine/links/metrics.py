"""
Metrics view: Prometheus / Thanos graph page with two panels.

Panel ``g0`` plots the alerting series selected by the active matchers, panel
``g1`` the rule expression without its alerting threshold.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Tuple
from urllib.parse import urlencode

from config import NAME_LABEL
from engine.models import CorrelationContext, TimeWindow
from engine.promql.duration import format_duration
from engine.promql.labels import SelectorGroup, format_selector
from engine.sources import Source

UI_NAME = "Prometheus UI"


def selector_query(matchers: SelectorGroup, rate_window: str) -> str:
    query = format_selector(matchers)
    for m in matchers:
        if m.name == NAME_LABEL and m.value.endswith("_total"):
            return f"rate({query}[{rate_window}])"
    return query


def _ui_time(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _panel(index: int, expr: str, window: TimeWindow) -> List[Tuple[str, str]]:
    prefix = f"g{index}."
    return [
        (f"{prefix}expr", expr),
        (f"{prefix}tab", "0"),
        (f"{prefix}stacked", "0"),
        (f"{prefix}range_input", format_duration(window.duration)),
        (f"{prefix}end_input", _ui_time(window.end)),
        (f"{prefix}max_source_resolution", "0s"),
    ]


def describe(ctx: CorrelationContext) -> str:
    return f"Metric view for the source of the alert [{UI_NAME}]"


def build(source: Source, ctx: CorrelationContext) -> str:
    params = _panel(0, selector_query(ctx.matchers, ctx.settings.metrics_rate_window), ctx.window)
    params += _panel(1, ctx.rule_expression, ctx.window)
    return f"{source.external_url}/graph?{urlencode(params)}"
