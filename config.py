"""
Constants and configuration for the alert correlator.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import List

from pydantic_settings import BaseSettings


METRICS_BACKEND_PROMETHEUS = "prometheus"
METRICS_BACKEND_THANOS = "thanos"
METRICS_BACKEND_MIMIR = "mimir"


CORRELATOR_METRICS_BACKEND = os.getenv("CORRELATOR_METRICS_BACKEND", METRICS_BACKEND_THANOS).lower()
CORRELATOR_METRICS_INTERNAL_URL = os.getenv("CORRELATOR_METRICS_INTERNAL_URL", "http://thanos-query:9090").rstrip("/")
CORRELATOR_METRICS_EXTERNAL_URL = os.getenv("CORRELATOR_METRICS_EXTERNAL_URL", "http://localhost:9090").rstrip("/")

# logs are browsed through Grafana Explore, so the external URL is the Grafana UI
CORRELATOR_LOGS_INTERNAL_URL = os.getenv("CORRELATOR_LOGS_INTERNAL_URL", "").rstrip("/")
CORRELATOR_LOGS_EXTERNAL_URL = os.getenv("CORRELATOR_LOGS_EXTERNAL_URL", "").rstrip("/")

CORRELATOR_TRACES_INTERNAL_URL = os.getenv("CORRELATOR_TRACES_INTERNAL_URL", "").rstrip("/")
CORRELATOR_TRACES_EXTERNAL_URL = os.getenv("CORRELATOR_TRACES_EXTERNAL_URL", "").rstrip("/")

CORRELATOR_PROFILES_INTERNAL_URL = os.getenv("CORRELATOR_PROFILES_INTERNAL_URL", "").rstrip("/")
CORRELATOR_PROFILES_EXTERNAL_URL = os.getenv("CORRELATOR_PROFILES_EXTERNAL_URL", "").rstrip("/")

CORRELATOR_CONNECTOR_TIMEOUT = int(os.getenv("CORRELATOR_CONNECTOR_TIMEOUT", "30"))
CORRELATOR_STARTUP_TIMEOUT = int(os.getenv("CORRELATOR_STARTUP_TIMEOUT", "120"))

# Mimir requires a tenant; plain Prometheus and Thanos ignore the header
CORRELATOR_TENANT_ID = os.getenv("CORRELATOR_TENANT_ID", "")

DATASOURCE_TIMEOUT = 30
HEALTH_PATH = "/-/ready"
MIMIR_HEALTH_PATH = "/ready"

# startup probes against the internal endpoints of the non-metrics backends
READY_PATHS = {
    "logs": "/ready",
    "traces": "/",
    "profiles": "/",
}

# labels that identify the monitored entity across backends
IDENTITY_LABELS: List[str] = ["job", "instance"]
NAME_LABEL = "__name__"


class Settings(BaseSettings):
    log_level: str = os.getenv("CORRELATOR_LOG_LEVEL", "INFO")
    host: str = "0.0.0.0"
    port: int = 8080

    # whole-request deadline for one correlation
    correlate_timeout_seconds: float = 30.0

    # exemplars are looked up over the last five minutes ending now
    exemplar_lookback_seconds: float = 300.0
    trace_id_label: str = "traceID"

    # window used by identity-only links when no exemplar pivot exists
    default_lookback_seconds: float = 3600.0
    # window around the exemplar timestamp used by pivot links
    pivot_padding_seconds: float = 300.0
    # window assumed by the URL recognizer when the UI gives none
    recognizer_default_window_seconds: float = 1800.0

    metrics_rate_window: str = "1m"

    grafana_org_id: int = 1
    grafana_loki_datasource: str = "Logging"

    jaeger_search_limit: int = 20

    profiles_profile_type: str = "process_cpu:cpu:nanoseconds:cpu:nanoseconds:delta"
    profiles_trace_id_label: str = "profile_label_trace_id"

    model_config = {
        "env_prefix": "CORRELATOR_",
        "extra": "ignore",
    }


settings = Settings()
