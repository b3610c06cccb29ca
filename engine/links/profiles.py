"""
Profiles view: Parca icicle graph.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List, Tuple
from urllib.parse import urlencode

from config import IDENTITY_LABELS
from engine.models import CorrelationContext
from engine.promql.labels import quote
from engine.sources import Source

UI_NAME = "Parca"


def profile_expression(ctx: CorrelationContext) -> str:
    parts: List[str] = []
    if ctx.pivot is not None:
        # profiles only carry the trace label when the sampler caught that request
        parts.append(f"{ctx.settings.profiles_trace_id_label}={quote(ctx.pivot.external_id)}")
        if "job" in ctx.identity:
            parts.append(f"job={quote(ctx.identity['job'])}")
    else:
        parts.extend(f"{name}={quote(ctx.identity[name])}" for name in IDENTITY_LABELS if name in ctx.identity)
    selector = ", ".join(parts)
    return f"{ctx.settings.profiles_profile_type}{{{selector}}}"


def describe(ctx: CorrelationContext) -> str:
    if ctx.pivot is not None:
        return f"Profiles view connected to the exemplar [{UI_NAME}]"
    return f"Profiles view for the same job and time [{UI_NAME}]"


def build(source: Source, ctx: CorrelationContext) -> str:
    params: List[Tuple[str, str]] = [
        ("currentProfileView", "icicle"),
        ("expression_a", profile_expression(ctx)),
        ("merge_a", "true"),
    ]
    if ctx.pivot is not None:
        params += [
            ("from_a", str(int(ctx.window.start * 1000))),
            ("to_a", str(int(ctx.window.end * 1000))),
        ]
    else:
        minutes = max(1, int(round(ctx.window.duration / 60)))
        params.append(("time_selection_a", f"relative:minute|{minutes}"))
    return f"{source.external_url}/?{urlencode(params)}"
