"""
Data source settings: where each telemetry backend is reachable.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from typing import Dict
from pydantic import field_validator
from pydantic_settings import BaseSettings
from config import (
    METRICS_BACKEND_MIMIR,
    METRICS_BACKEND_PROMETHEUS,
    METRICS_BACKEND_THANOS,
    CORRELATOR_METRICS_BACKEND,
    CORRELATOR_METRICS_INTERNAL_URL,
    CORRELATOR_METRICS_EXTERNAL_URL,
    CORRELATOR_LOGS_INTERNAL_URL,
    CORRELATOR_LOGS_EXTERNAL_URL,
    CORRELATOR_TRACES_INTERNAL_URL,
    CORRELATOR_TRACES_EXTERNAL_URL,
    CORRELATOR_PROFILES_INTERNAL_URL,
    CORRELATOR_PROFILES_EXTERNAL_URL,
    CORRELATOR_CONNECTOR_TIMEOUT,
    CORRELATOR_STARTUP_TIMEOUT,
    CORRELATOR_TENANT_ID,
)
from engine.enums import BackendKind
from engine.sources import Source

class DataSourceSettings(BaseSettings):
    metrics_backend: str = CORRELATOR_METRICS_BACKEND
    metrics_internal_url: str = CORRELATOR_METRICS_INTERNAL_URL
    metrics_external_url: str = CORRELATOR_METRICS_EXTERNAL_URL
    logs_internal_url: str = CORRELATOR_LOGS_INTERNAL_URL
    logs_external_url: str = CORRELATOR_LOGS_EXTERNAL_URL
    traces_internal_url: str = CORRELATOR_TRACES_INTERNAL_URL
    traces_external_url: str = CORRELATOR_TRACES_EXTERNAL_URL
    profiles_internal_url: str = CORRELATOR_PROFILES_INTERNAL_URL
    profiles_external_url: str = CORRELATOR_PROFILES_EXTERNAL_URL
    tenant_id: str = CORRELATOR_TENANT_ID
    connector_timeout: int = CORRELATOR_CONNECTOR_TIMEOUT
    startup_timeout: int = CORRELATOR_STARTUP_TIMEOUT

    @field_validator(
        "metrics_internal_url", "metrics_external_url",
        "logs_internal_url", "logs_external_url",
        "traces_internal_url", "traces_external_url",
        "profiles_internal_url", "profiles_external_url",
        mode="before",
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return str(v or "").strip().rstrip("/")

    @field_validator("metrics_backend", mode="before")
    @classmethod
    def validate_metrics_backend(cls, v: str) -> str:
        value = str(v or "").strip().lower()
        if value not in {METRICS_BACKEND_PROMETHEUS, METRICS_BACKEND_THANOS, METRICS_BACKEND_MIMIR}:
            raise ValueError(f"Unsupported metrics backend: {value!r}")
        return value

    def sources(self) -> Dict[BackendKind, Source]:
        """Source descriptors for every configured backend.

        The metrics backend is always present. Other kinds are left out when
        neither of their endpoints is set; a kind with only one endpoint is
        kept so that link building can report the misconfiguration.
        """
        out: Dict[BackendKind, Source] = {}
        for kind in BackendKind.link_order():
            internal = getattr(self, f"{kind.value}_internal_url")
            external = getattr(self, f"{kind.value}_external_url")
            if kind is not BackendKind.metrics and not internal and not external:
                continue
            out[kind] = Source(kind=kind, internal_endpoint=internal, external_endpoint=external)
        return out

    model_config = {"env_prefix": "CORRELATOR_", "extra": "ignore"}
