"""
Exemplar resolution: find a trace identifier attached to the alerting series.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from datasources.exceptions import DataSourceError
from engine.errors import UpstreamError
from engine.models import ExemplarPivot, TimeWindow, format_labels
from engine.promql.labels import SelectorGroup

log = logging.getLogger(__name__)


def series_matches(labels: Mapping[str, str], matchers: SelectorGroup) -> bool:
    """True if every matcher whose label the series carries holds.

    Matchers on labels the series does not have are skipped.
    """
    for m in matchers:
        value = labels.get(m.name)
        if value is None:
            continue
        if not m.matches(value):
            return False
    return True


def _as_labels(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items()}


def _timestamp(raw: Any, default: float) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


async def resolve_exemplar(
    metrics: Any,
    expression: str,
    matchers: SelectorGroup,
    window: TimeWindow,
    trace_id_label: str,
) -> Optional[ExemplarPivot]:
    """Best-effort, first-match exemplar lookup.

    Returns ``None`` when no series is returned, none matches ``matchers``, or
    the first exemplar of the matching series lacks ``trace_id_label``.
    Transport failures raise UpstreamError.
    """
    try:
        series = await metrics.query_exemplars(query=expression, start=window.start, end=window.end)
    except DataSourceError as exc:
        raise UpstreamError(f"exemplars: {exc}") from exc

    if not series:
        log.warning("no exemplars found for series in question, query=%s", expression)
        return None
    log.debug("found exemplars for %d series, query=%s", len(series), expression)

    chosen = None
    for entry in series:
        if not isinstance(entry, dict):
            continue
        labels = _as_labels(entry.get("seriesLabels"))
        if series_matches(labels, matchers):
            chosen = (labels, entry.get("exemplars") or [])
            break

    if chosen is None:
        log.warning("no exemplar series matching %s", ",".join(str(m) for m in matchers))
        return None

    labels, exemplars = chosen
    if not exemplars or not isinstance(exemplars[0], dict):
        log.warning("matching series %s carries no exemplars", format_labels(labels))
        return None

    first = exemplars[0]
    external_id = _as_labels(first.get("labels")).get(trace_id_label, "")
    if not external_id:
        log.warning("no %s key in exemplar labels of series %s", trace_id_label, format_labels(labels))
        return None

    log.debug("found exemplar %s=%s on series %s", trace_id_label, external_id, format_labels(labels))
    return ExemplarPivot(
        series_labels=labels,
        external_id=external_id,
        timestamp=_timestamp(first.get("timestamp"), window.end),
    )
