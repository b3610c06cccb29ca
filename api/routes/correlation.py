
from fastapi import APIRouter, Depends, HTTPException

from api.requests import CorrelateRequest, RecognizeRequest
from api.responses import CorrelationResult, RecognizedSelection
from api.routes.common import get_correlator
from api.routes.exception import handle_exceptions
from engine.correlator import Correlator
from engine.promql import format_selector
from engine.recognizer import recognize_url

router = APIRouter(tags=["Correlation"])


@router.post("/correlate", response_model=CorrelationResult, summary="Deep links into every backend for a firing alert")
@handle_exceptions
async def correlate_alert(
    req: CorrelateRequest,
    correlator: Correlator = Depends(get_correlator),
) -> CorrelationResult:
    return await correlator.correlate(
        req.alert_name,
        include_exemplar_pivot=req.use_exemplar,
        timeout=correlator.settings.correlate_timeout_seconds,
    )


@router.post("/recognize", response_model=RecognizedSelection, summary="Series selected by a backend UI link")
@handle_exceptions
async def recognize(
    req: RecognizeRequest,
    correlator: Correlator = Depends(get_correlator),
) -> RecognizedSelection:
    found = recognize_url(correlator.sources.values(), req.url, correlator.settings)
    if found is None:
        raise HTTPException(status_code=404, detail="no configured backend recognizes this URL")
    return RecognizedSelection(
        kind=found.kind,
        start=found.window.start,
        end=found.window.end,
        selectors=[format_selector(g) for g in found.selector_groups],
    )
