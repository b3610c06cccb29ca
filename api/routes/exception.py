"""
Centralized exception handling decorator for API route functions.

The :func:`handle_exceptions` decorator wraps an endpoint handler and converts
exceptions into :class:`fastapi.HTTPException` responses.  HTTPExceptions
raised by the handler are propagated untouched.  Correlation errors map to a
status code chosen by their error code, with the code repeated in the
response detail so that clients can tell ``not_found`` from
``no_active_instance``.  Anything else becomes a ``500``.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any, Callable, Dict, TypeVar, cast

from fastapi import HTTPException

from engine.enums import ErrorCode
from engine.errors import CorrelationError

F = TypeVar("F", bound=Callable[..., Any])

STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.invalid_input: 400,
    ErrorCode.not_found: 404,
    ErrorCode.no_active_instance: 409,
    ErrorCode.invalid_query: 422,
    ErrorCode.no_selectors: 422,
    ErrorCode.upstream_error: 502,
    ErrorCode.config_error: 500,
    ErrorCode.canceled: 504,
}


def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, CorrelationError):
        return HTTPException(
            status_code=STATUS_BY_CODE.get(exc.code, 500),
            detail={"code": exc.code.value, "message": str(exc)},
        )
    return HTTPException(status_code=500, detail=str(exc))


def handle_exceptions(func: F) -> F:
    """Decorator that converts uncaught exceptions to HTTP errors.

    The decorator works with both regular and async functions.
    """

    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as exc:
                raise to_http_exception(exc) from exc

        return cast(F, async_wrapper)

    @wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as exc:
            raise to_http_exception(exc) from exc

    return cast(F, sync_wrapper)
