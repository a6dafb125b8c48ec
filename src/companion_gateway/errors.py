from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ProviderErrorKind(str, Enum):
    API_ERROR = "apiError"
    USER_ERROR = "userError"
    AUTH_ERROR = "authError"


class ProviderError(Exception):
    """Base error for provider failures that can be turned into an HTTP response."""

    kind: ClassVar[ProviderErrorKind]


class ProviderApiError(ProviderError):
    """The provider API answered a request with an HTTP error."""

    kind = ProviderErrorKind.API_ERROR

    def __init__(self, message: str, status_code: int):
        if isinstance(status_code, bool) or not isinstance(status_code, int) or status_code < 100:
            raise ValueError(f"Invalid HTTP status code: {status_code!r}")
        # status code is part of the message to make debugging easier
        self.message = f"HTTP {status_code}: {message}"
        super().__init__(self.message)
        self.status_code = status_code
        self.is_auth_error = False


class ProviderUserError(ProviderError):
    """Failure whose `json` payload is shown to the end user as-is."""

    kind = ProviderErrorKind.USER_ERROR

    def __init__(self, json: Any):
        super().__init__("User error")
        self.json = json


class ProviderAuthError(ProviderApiError):
    """The provider rejected the stored access token."""

    kind = ProviderErrorKind.AUTH_ERROR

    def __init__(self) -> None:
        super().__init__("invalid access token detected by Provider", 401)
        self.is_auth_error = True
