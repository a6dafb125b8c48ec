from .config import GatewayConfig
from .errors import ProviderApiError, ProviderAuthError, ProviderError, ProviderErrorKind, ProviderUserError
from .responses import ErrorResponse, ResponseSink, error_to_response, respond_with_error

__all__ = [
    "ErrorResponse",
    "GatewayConfig",
    "ProviderApiError",
    "ProviderAuthError",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderUserError",
    "ResponseSink",
    "error_to_response",
    "respond_with_error",
]
