"""
Traces view: Jaeger UI.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, Union
from urllib.parse import quote, urlencode

from engine.models import CorrelationContext
from engine.sources import Source

UI_NAME = "Jaeger"


def describe(ctx: CorrelationContext) -> str:
    if ctx.pivot is not None:
        return f"Trace view connected to the exemplar [{UI_NAME}]"
    return f"Trace search for the same service and time [{UI_NAME}]"


def build(source: Source, ctx: CorrelationContext) -> str:
    base = source.external_url
    if ctx.pivot is not None:
        return f"{base}/trace/{quote(ctx.pivot.external_id, safe='')}"

    # Jaeger takes microseconds
    params: Dict[str, Union[str, int]] = {
        "start": int(ctx.window.start * 1_000_000),
        "end": int(ctx.window.end * 1_000_000),
        "lookback": "custom",
        "limit": ctx.settings.jaeger_search_limit,
    }
    job = ctx.identity.get("job")
    if job:
        params["service"] = job
    return f"{base}/search?{urlencode(params)}"
