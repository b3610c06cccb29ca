"""
Health check route.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from api.routes.common import get_correlator
from api.routes.exception import handle_exceptions
from engine.correlator import Correlator

router = APIRouter(tags=["Health"])


@router.get("/health")
@handle_exceptions
async def health(correlator: Correlator = Depends(get_correlator)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "sources": [kind.value for kind in correlator.sources],
    }
