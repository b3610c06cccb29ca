"""
Reverse direction: recognize what a backend UI URL is looking at.

Only the metrics graph page is understood; links into other backends are
reported as not recognized.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional
from urllib.parse import parse_qs, urlsplit

from config import Settings
from engine.enums import BackendKind
from engine.errors import InvalidInput, InvalidQuery
from engine.models import TimeWindow
from engine.promql import ParseError, SelectorGroup, extract_selector_groups, parse, parse_duration
from engine.sources import Source

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognizedRequest:
    kind: BackendKind
    selector_groups: List[SelectorGroup]
    window: TimeWindow


def _host(url: str) -> str:
    parts = urlsplit(url if "://" in url else f"http://{url}")
    return (parts.netloc or "").lower()


def _recognize_metrics(source: Source, url: str, settings: Settings, now: Optional[float]) -> Optional[RecognizedRequest]:
    parts = urlsplit(url)
    query = parse_qs(parts.query)
    # only the first panel is considered
    expr = (query.get("g0.expr") or [""])[0]
    if not expr:
        if parts.netloc.lower() in {_host(source.internal_endpoint), _host(source.external_endpoint)}:
            raise InvalidInput("can't deduce much, nothing was queried")
        return None

    try:
        tree = parse(expr)
    except ParseError as exc:
        raise InvalidQuery(f"parse g0.expr {expr!r}: {exc}") from exc

    window_seconds = settings.recognizer_default_window_seconds
    range_input = (query.get("g0.range_input") or [""])[0]
    if range_input:
        try:
            window_seconds = parse_duration(range_input)
        except ValueError as exc:
            raise InvalidInput(f"parse g0.range_input {range_input!r}: {exc}") from exc
    else:
        log.warning("couldn't figure out the time range of %s, assuming the last %ss", url, window_seconds)

    return RecognizedRequest(
        kind=BackendKind.metrics,
        selector_groups=extract_selector_groups(tree),
        window=TimeWindow.lookback(window_seconds, now),
    )


def recognize_url(
    sources: Iterable[Source],
    url: str,
    settings: Settings,
    now: Optional[float] = None,
) -> Optional[RecognizedRequest]:
    """Return what ``url`` selects, or None when no configured backend recognizes it."""
    for source in sources:
        if source.kind is BackendKind.metrics:
            found = _recognize_metrics(source, url, settings, now)
            if found is not None:
                return found
    return None
