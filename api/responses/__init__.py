"""
Response models for API endpoints and internal data structures.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from engine.enums import BackendKind


class CorrelationEntry(BaseModel):

    description: str
    url: str = ""
    error: Optional[str] = None


class CorrelationResult(BaseModel):

    discoveries: List[str] = Field(default_factory=list)
    correlations: List[CorrelationEntry] = Field(default_factory=list)


class RecognizedSelection(BaseModel):

    kind: BackendKind
    start: float
    end: float
    selectors: List[str]
