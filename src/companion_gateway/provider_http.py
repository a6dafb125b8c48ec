from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog

from .errors import ProviderApiError, ProviderAuthError
from .metrics import provider_errors_total

log = structlog.get_logger()

# Checks receive the response and its already-parsed JSON body (None when the body is not JSON).
AuthErrorCheck = Callable[[httpx.Response, Any], bool]
JsonErrorMessage = Callable[[Any], str | None]


def _default_is_auth_error(response: httpx.Response, _body: Any) -> bool:
    return response.status_code == 401


def _response_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def _record_failure(provider: str, tag: str, status_code: int) -> None:
    provider_errors_total.labels(provider=provider, status=str(status_code)).inc()
    log.warning("provider_request_failed", provider=provider, tag=tag, status_code=status_code)


def error_from_response(
    response: httpx.Response,
    *,
    is_auth_error: AuthErrorCheck | None = None,
    get_json_error_message: JsonErrorMessage | None = None,
) -> ProviderApiError:
    """
    Build the error an adapter should raise for a failed provider response.

    Providers disagree on how a revoked token looks (some answer 400 or 403),
    so `is_auth_error` can override the plain 401 check.
    """
    body = _response_json(response)
    if (is_auth_error or _default_is_auth_error)(response, body):
        return ProviderAuthError()

    message: str | None = None
    if get_json_error_message is not None:
        message = get_json_error_message(body)
    if not isinstance(message, str) or not message:
        message = response.reason_phrase or "request to provider failed"
    return ProviderApiError(message, response.status_code)


def raise_for_provider_status(
    response: httpx.Response,
    *,
    provider: str,
    tag: str,
    is_auth_error: AuthErrorCheck | None = None,
    get_json_error_message: JsonErrorMessage | None = None,
) -> httpx.Response:
    if response.status_code < 400:
        return response
    _record_failure(provider, tag, response.status_code)
    raise error_from_response(
        response,
        is_auth_error=is_auth_error,
        get_json_error_message=get_json_error_message,
    )


@asynccontextmanager
async def provider_error_handling(
    provider: str,
    *,
    tag: str,
    is_auth_error: AuthErrorCheck | None = None,
    get_json_error_message: JsonErrorMessage | None = None,
) -> AsyncIterator[None]:
    """Convert `httpx.HTTPStatusError` raised by an adapter call into a provider error."""
    try:
        yield
    except httpx.HTTPStatusError as e:
        _record_failure(provider, tag, e.response.status_code)
        raise error_from_response(
            e.response,
            is_auth_error=is_auth_error,
            get_json_error_message=get_json_error_message,
        ) from e
