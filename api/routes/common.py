"""
Shared dependencies for API route modules.

The correlator is built once at startup (see ``main.lifespan``) and kept on
``app.state``; routes receive it through :func:`get_correlator`.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from engine.correlator import Correlator


def get_correlator(request: Request) -> Correlator:
    correlator = getattr(request.app.state, "correlator", None)
    if correlator is None:
        raise HTTPException(status_code=503, detail="correlator is not initialised")
    return correlator
