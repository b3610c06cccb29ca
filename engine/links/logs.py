"""
Logs view: Grafana Explore over a Loki datasource.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
from urllib.parse import urlencode

from engine.models import CorrelationContext
from engine.promql.duration import format_duration
from engine.promql.labels import quote
from engine.sources import Source

UI_NAME = "Loki via Grafana"


def logql(ctx: CorrelationContext) -> str:
    job = ctx.identity.get("job")
    selector = f"{{job={quote(job)}}}" if job else '{job=~".+"}'
    if ctx.pivot is not None:
        return f"{selector} |= {quote(ctx.pivot.external_id)}"
    return selector


def _range(ctx: CorrelationContext) -> tuple[str, str]:
    if ctx.pivot is not None:
        return str(int(ctx.window.start * 1000)), str(int(ctx.window.end * 1000))
    return f"now-{format_duration(ctx.window.duration)}", "now"


def describe(ctx: CorrelationContext) -> str:
    if ctx.pivot is not None:
        return f"Log view connected to the exemplar [{UI_NAME}]"
    return f"Log view for the same job and time [{UI_NAME}]"


def build(source: Source, ctx: CorrelationContext) -> str:
    start, end = _range(ctx)
    left = json.dumps(
        [start, end, ctx.settings.grafana_loki_datasource, {"refId": "A", "expr": logql(ctx)}],
        separators=(",", ":"),
    )
    params = {"orgId": ctx.settings.grafana_org_id, "left": left}
    return f"{source.external_url}/explore?{urlencode(params)}"
