"""Application exception types."""

from app.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class GenerationError(Exception):
    """Base class for failures raised by generation provider adapters."""

    code = "GENERATION_ERROR"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class ProviderConfigurationError(GenerationError):
    """Provider credentials are missing; retrying cannot help."""

    code = "PROVIDER_NOT_CONFIGURED"


class ProviderValidationError(GenerationError):
    """The request cannot be sent to the provider as-is."""

    code = "INVALID_GENERATION_INPUT"


class TransientProviderError(GenerationError):
    """Network, timeout or unreadable response while talking to the provider."""

    code = "PROVIDER_UNAVAILABLE"


class ProviderReportedFailure(GenerationError):
    """The provider accepted the call but reported the work as failed or canceled."""

    code = "PROVIDER_REPORTED_FAILURE"


class MalformedSuccessError(GenerationError):
    """The provider reported success without a usable result."""

    code = "MALFORMED_SUCCESS"


__all__ = [
    "ApiError",
    "GenerationError",
    "MalformedSuccessError",
    "ProviderConfigurationError",
    "ProviderReportedFailure",
    "ProviderValidationError",
    "TransientProviderError",
]
