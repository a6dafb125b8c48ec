from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from .errors import ProviderError, ProviderErrorKind


@dataclass(frozen=True)
class ErrorResponse:
    status_code: int
    body: Any


class ResponseSink(Protocol):
    def send_json(self, status_code: int, body: Any) -> None: ...


class JSONResponseSink:
    """Collects the written error as a FastAPI `JSONResponse`."""

    def __init__(self) -> None:
        self.response = None

    def send_json(self, status_code: int, body: Any) -> None:
        from fastapi.responses import JSONResponse

        self.response = JSONResponse(status_code=status_code, content=body)


def error_to_response(err: object) -> ErrorResponse | None:
    """
    Convert a provider error to an HTTP status code and JSON body.

    Returns None for anything this module does not recognize, including API
    errors below 400; the caller has to fall back to its generic handling.
    """
    if not isinstance(err, ProviderError):
        return None

    kind = getattr(err, "kind", None)
    if kind is ProviderErrorKind.AUTH_ERROR:
        return ErrorResponse(401, {"message": err.message})

    if kind is ProviderErrorKind.API_ERROR:
        if err.status_code >= 500:
            # bad gateway, i.e. the provider's gateway
            return ErrorResponse(502, {"message": err.message})
        if err.status_code >= 400:
            # failed dependency
            return ErrorResponse(424, {"message": err.message})
        return None

    if kind is ProviderErrorKind.USER_ERROR:
        return ErrorResponse(400, err.json)

    return None


def respond_with_error(err: object, sink: ResponseSink) -> bool:
    resp = error_to_response(err)
    if resp is None:
        return False
    sink.send_json(resp.status_code, resp.body)
    return True
