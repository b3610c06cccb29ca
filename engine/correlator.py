"""
Correlation engine: from a firing alert to deep links into every telemetry backend.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

from api.responses import CorrelationEntry, CorrelationResult
from config import IDENTITY_LABELS, Settings, settings as default_settings
from datasources.exceptions import DataSourceError
from engine.alerts import find_firing_alert
from engine.enums import BackendKind
from engine.errors import Canceled, ConfigError, InvalidInput, InvalidQuery, NoSelectors, UpstreamError
from engine.exemplars import resolve_exemplar
from engine.links import render
from engine.models import AlertQuery, CorrelationContext, ExemplarPivot, TimeWindow, format_labels
from engine.promql import (
    MatchOp,
    ParseError,
    SelectorGroup,
    extract_selector_groups,
    format_duration,
    format_selector,
    parse,
    strip_alert_threshold,
)
from engine.sources import Source

log = logging.getLogger(__name__)


def identity_labels(
    alert: AlertQuery,
    matchers: SelectorGroup,
    pivot: Optional[ExemplarPivot] = None,
) -> Dict[str, str]:
    """Job/instance of the entity behind the alert.

    Looked up on the exemplar series first, then on the firing alert, then on
    an equality matcher of the active selector.
    """
    candidates: List[Mapping[str, str]] = [alert.firing_labels]
    if pivot is not None:
        candidates.insert(0, pivot.series_labels)

    out: Dict[str, str] = {}
    for name in IDENTITY_LABELS:
        value = next((labels[name] for labels in candidates if labels.get(name)), "")
        if not value:
            value = next((m.value for m in matchers if m.name == name and m.op is MatchOp.equal and m.value), "")
        if value:
            out[name] = value
    return out


class Correlator:
    def __init__(
        self,
        metrics: Any,
        sources: Mapping[BackendKind, Source],
        settings: Settings = default_settings,
    ) -> None:
        if BackendKind.metrics not in sources:
            raise ConfigError("a metrics source is required")
        self.metrics = metrics
        self.sources: Dict[BackendKind, Source] = dict(sources)
        self.settings = settings

    @classmethod
    def from_provider(cls, provider: Any, settings: Settings = default_settings) -> Correlator:
        return cls(provider.metrics, provider.sources, settings)

    async def correlate(
        self,
        alert_name: str,
        include_exemplar_pivot: bool = False,
        timeout: Optional[float] = None,
    ) -> CorrelationResult:
        """Resolve ``alert_name`` and link its evidence across backends.

        Any failure before link building aborts the whole call. A missing
        exemplar only adds a discovery, and a misconfigured backend only marks
        its own entry with an error.
        """
        log.debug("correlating alert=%s exemplar_pivot=%s", alert_name, include_exemplar_pivot)
        if not alert_name or not alert_name.strip():
            raise InvalidInput("not enough information: alert name is required")
        try:
            return await asyncio.wait_for(self._correlate(alert_name, include_exemplar_pivot), timeout)
        except asyncio.TimeoutError as exc:
            raise Canceled(f"correlating {alert_name!r} did not finish within {timeout}s") from exc

    async def _correlate(self, alert_name: str, include_exemplar_pivot: bool) -> CorrelationResult:
        discoveries: List[str] = []

        alert = await self._find_alert(alert_name)
        log.debug("found firing alert %s labels=%s", alert_name, alert.firing_labels)
        discoveries.append(f"Alert {alert_name} is indeed firing. Its labels: {format_labels(alert.firing_labels)}")

        try:
            expr = parse(alert.rule_expression)
        except ParseError as exc:
            raise InvalidQuery(f"expression of rule {alert_name!r} does not parse: {exc}") from exc

        # TODO: correlate on every selector group instead of the first one only
        groups = extract_selector_groups(expr)
        if not groups:
            raise NoSelectors(f"no series selectors found in {alert.rule_expression!r}")
        matchers = groups[0]

        now = time.time()
        pivot: Optional[ExemplarPivot] = None
        if include_exemplar_pivot:
            pivot = await self._resolve_pivot(alert, matchers, now)
            if pivot is None:
                discoveries.append(
                    f"No exemplar with a {self.settings.trace_id_label} label matched "
                    f"{format_selector(matchers)} in the last "
                    f"{format_duration(self.settings.exemplar_lookback_seconds)}; "
                    "links use the job and instance of the alert instead"
                )
            else:
                discoveries.append(f"We found an example trace/request ID for you: {pivot.external_id}")

        if pivot is not None:
            window = TimeWindow.around(pivot.timestamp, self.settings.pivot_padding_seconds, now)
        else:
            window = TimeWindow.lookback(self.settings.default_lookback_seconds, now)

        ctx = CorrelationContext(
            alert=alert,
            matchers=matchers,
            rule_expression=strip_alert_threshold(alert.rule_expression, expr),
            identity=identity_labels(alert, matchers, pivot),
            window=window,
            settings=self.settings,
            pivot=pivot,
        )
        return CorrelationResult(discoveries=discoveries, correlations=self._links(ctx))

    async def _find_alert(self, alert_name: str) -> AlertQuery:
        try:
            groups = await self.metrics.rules()
        except DataSourceError as exc:
            raise UpstreamError(f"rules: {exc}") from exc
        return find_firing_alert(groups, alert_name)

    async def _resolve_pivot(self, alert: AlertQuery, matchers: SelectorGroup, now: float) -> Optional[ExemplarPivot]:
        window = TimeWindow.lookback(self.settings.exemplar_lookback_seconds, now)
        return await resolve_exemplar(
            self.metrics,
            alert.rule_expression,
            matchers,
            window,
            self.settings.trace_id_label,
        )

    def _links(self, ctx: CorrelationContext) -> List[CorrelationEntry]:
        entries: List[CorrelationEntry] = []
        for kind in BackendKind.link_order():
            source = self.sources.get(kind)
            if source is None:
                continue
            entries.append(render(source, ctx))
        return entries
