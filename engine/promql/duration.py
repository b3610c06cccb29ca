"""
Prometheus duration strings such as ``5m`` or ``1h30m``.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import re
from typing import List, Tuple

_UNITS: List[Tuple[str, float]] = [
    ("y", 365 * 24 * 3600.0),
    ("w", 7 * 24 * 3600.0),
    ("d", 24 * 3600.0),
    ("h", 3600.0),
    ("m", 60.0),
    ("s", 1.0),
    ("ms", 0.001),
]

_DURATION_RE = re.compile(
    r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$"
)


def parse_duration(text: str) -> float:
    """Return the duration in seconds; units must appear largest first."""
    if text == "0":
        return 0.0
    m = _DURATION_RE.match(text or "")
    if not m or not any(m.groups()):
        raise ValueError(f"not a valid duration string: {text!r}")
    return sum(float(v) * mult for v, (_, mult) in zip(m.groups(), _UNITS) if v)


def format_duration(seconds: float) -> str:
    ms = int(round(seconds * 1000))
    if ms <= 0:
        return "0s"
    out = []
    for unit, mult in _UNITS:
        unit_ms = int(mult * 1000)
        n, ms = divmod(ms, unit_ms)
        if n:
            out.append(f"{n}{unit}")
    return "".join(out)
