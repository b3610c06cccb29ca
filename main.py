"""
Entry point for the alert correlator API server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Tuple

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from api.routes import router
from config import READY_PATHS, settings
from datasources.data_config import DataSourceSettings
from datasources.exceptions import BackendStartupTimeout
from datasources.provider import DataSourceProvider
from engine.correlator import Correlator
from engine.enums import BackendKind

logging.basicConfig(
    level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)

_backend_ready = False
_backend_status: Dict[str, str] = {}

Probe = Tuple[str, str, Dict[str, str]]


async def wait_for(
    name: str,
    url: str,
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
    accept_status: tuple = (200,),
) -> None:
    deadline = time.monotonic() + timeout
    attempt = 0
    async with httpx.AsyncClient() as client:
        while time.monotonic() < deadline:
            attempt += 1
            try:
                resp = await client.get(url, headers=headers or {}, timeout=3.0)
            except httpx.HTTPError as exc:
                log.debug("%s unreachable at %s (attempt %d): %s", name, url, attempt, exc)
            else:
                if resp.status_code in accept_status:
                    log.info("%s ready after %d probe(s)", name, attempt)
                    return
                log.debug("%s answered %d (attempt %d)", name, resp.status_code, attempt)
            await asyncio.sleep(2)
    raise BackendStartupTimeout(f"{name} did not become ready within {timeout}s")


def readiness_probes(provider: DataSourceProvider) -> List[Probe]:
    """Metrics through its connector, other kinds through their internal endpoint."""
    connector = provider.metrics
    probes: List[Probe] = [(BackendKind.metrics.value, connector.health_url, connector._headers())]
    for kind, source in provider.sources.items():
        if kind is BackendKind.metrics or not source.internal_url:
            continue
        probes.append((kind.value, f"{source.internal_url}{READY_PATHS[kind.value]}", {}))
    return probes


async def _wait_for_backends_bg(provider: DataSourceProvider, timeout: float) -> None:
    global _backend_ready

    probes = readiness_probes(provider)
    for name, _, _ in probes:
        _backend_status[name] = "waiting"
    log.info("Readiness check of %s starting (timeout=%ds)", ",".join(p[0] for p in probes), timeout)

    results = await asyncio.gather(
        *[wait_for(name, url, timeout, headers=headers) for name, url, headers in probes],
        return_exceptions=True,
    )
    for (name, _, _), result in zip(probes, results):
        if isinstance(result, BaseException):
            log.error("%s failed readiness: %s", name, result)
            _backend_status[name] = f"failed: {result}"
        else:
            _backend_status[name] = "ready"

    # links to the other backends are built without contacting them
    _backend_ready = _backend_status.get(BackendKind.metrics.value) == "ready"
    if not _backend_ready:
        log.warning("metrics backend is not ready; correlations will fail until it answers")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    ds_settings = DataSourceSettings()
    provider = DataSourceProvider(ds_settings)
    app.state.correlator = Correlator.from_provider(provider, settings)
    log.info(
        "Correlator configured: metrics backend %s, sources %s",
        ds_settings.metrics_backend,
        ",".join(kind.value for kind in provider.sources),
    )

    readiness_task = asyncio.create_task(_wait_for_backends_bg(provider, ds_settings.startup_timeout))
    try:
        yield
    finally:
        readiness_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await readiness_task


app = FastAPI(
    title="Alert Correlator",
    description="Deep links from a firing alert into metrics, logs, traces and profiles.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


@app.get("/api/v1/ready", tags=["health"], summary="Backend readiness probe")
async def ready() -> JSONResponse:
    return JSONResponse(
        status_code=200 if _backend_ready else 503,
        content={"ready": _backend_ready, "backends": _backend_status},
    )


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
