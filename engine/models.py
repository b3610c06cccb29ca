"""
Value types passed between the correlation engine and the link builders.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, Optional

from config import Settings
from engine.promql.labels import SelectorGroup


def format_labels(labels: Dict[str, str]) -> str:
    inner = ", ".join(f'{k}="{v}"' for k, v in sorted(labels.items()))
    return "{" + inner + "}"


@dataclass(frozen=True)
class TimeWindow:
    start: float
    end: float

    @classmethod
    def lookback(cls, seconds: float, now: Optional[float] = None) -> TimeWindow:
        end = time.time() if now is None else now
        return cls(start=end - seconds, end=end)

    @classmethod
    def around(cls, ts: float, padding: float, now: Optional[float] = None) -> TimeWindow:
        end = ts + padding
        if now is not None:
            end = min(end, max(now, ts))
        return cls(start=ts - padding, end=end)

    @property
    def duration(self) -> float:
        return max(0.0, self.end - self.start)


@dataclass(frozen=True)
class AlertQuery:
    alert_name: str
    rule_expression: str
    firing_labels: Dict[str, str]


@dataclass(frozen=True)
class ExemplarPivot:
    series_labels: Dict[str, str]
    external_id: str
    timestamp: float


@dataclass(frozen=True)
class CorrelationContext:
    alert: AlertQuery
    matchers: SelectorGroup
    rule_expression: str
    identity: Dict[str, str]
    window: TimeWindow
    settings: Settings
    pivot: Optional[ExemplarPivot] = None
