"""
Deep-link builders, one per backend kind.

Each builder module exposes ``describe(ctx)`` and ``build(source, ctx)``;
builders only format URLs and never perform I/O.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from types import ModuleType
from typing import Dict

from api.responses import CorrelationEntry
from engine.enums import BackendKind
from engine.errors import ConfigError
from engine.links import logs, metrics, profiles, traces
from engine.models import CorrelationContext
from engine.sources import Source

log = logging.getLogger(__name__)

BUILDERS: Dict[BackendKind, ModuleType] = {
    BackendKind.metrics: metrics,
    BackendKind.logs: logs,
    BackendKind.traces: traces,
    BackendKind.profiles: profiles,
}


def render(source: Source, ctx: CorrelationContext) -> CorrelationEntry:
    """Build the link for ``source``; misconfiguration becomes an entry error."""
    builder = BUILDERS[source.kind]
    description = builder.describe(ctx)
    try:
        url = builder.build(source, ctx)
    except ConfigError as exc:
        log.warning("cannot build %s link: %s", source.kind.value, exc)
        return CorrelationEntry(description=description, error=str(exc))
    return CorrelationEntry(description=description, url=url)


__all__ = ["BUILDERS", "render"]
