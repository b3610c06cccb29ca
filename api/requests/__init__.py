from __future__ import annotations

from pydantic import BaseModel, Field


class CorrelateRequest(BaseModel):
    alert_name: str = Field(default="", description="Name of the firing alerting rule")
    use_exemplar: bool = False


class RecognizeRequest(BaseModel):
    url: str
