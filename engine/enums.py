"""
Enumerations for backend kinds and error codes.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum


class BackendKind(str, Enum):
    metrics = "metrics"
    logs = "logs"
    traces = "traces"
    profiles = "profiles"

    @classmethod
    def link_order(cls) -> tuple[BackendKind, ...]:
        # the metrics view always comes first, the rest follow in this order
        return (cls.metrics, cls.logs, cls.traces, cls.profiles)


class ErrorCode(str, Enum):
    invalid_input = "invalid_input"
    not_found = "not_found"
    no_active_instance = "no_active_instance"
    invalid_query = "invalid_query"
    no_selectors = "no_selectors"
    upstream_error = "upstream_error"
    config_error = "config_error"
    canceled = "canceled"
