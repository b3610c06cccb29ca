"""
Error taxonomy raised by the correlation engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from engine.enums import ErrorCode


class CorrelationError(Exception):
    code: ErrorCode = ErrorCode.invalid_input


class InvalidInput(CorrelationError):
    code = ErrorCode.invalid_input


class NotFound(CorrelationError):
    code = ErrorCode.not_found


class NoActiveInstance(CorrelationError):
    code = ErrorCode.no_active_instance


class InvalidQuery(CorrelationError):
    code = ErrorCode.invalid_query


class NoSelectors(CorrelationError):
    code = ErrorCode.no_selectors


class UpstreamError(CorrelationError):
    code = ErrorCode.upstream_error


class ConfigError(CorrelationError):
    code = ErrorCode.config_error


class Canceled(CorrelationError):
    code = ErrorCode.canceled
