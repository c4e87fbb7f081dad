"""Error responses for API endpoints.

Every error body has the shape ``{"error": "<message>", "type": "<error_type>"}``.
Vendor error internals never reach the client.
"""

import logging
from dataclasses import dataclass

from fastapi.responses import JSONResponse

from llm_router.core.error_types import ErrorType
from llm_router.core.exceptions import (
    InvalidRequest,
    LLMRouterError,
    NoProviderAvailable,
    NoSuitableModel,
)
from llm_router.core.types import GenerationResponse

logger = logging.getLogger(__name__)

MONITORING_ERROR_MESSAGE = "Failed to fetch LLM provider data"
PROVIDER_FAILURE_MESSAGE = "The AI provider failed to process the request. Please try again later."


@dataclass(frozen=True, slots=True)
class ErrorResponseBuilder:
    """Centralized builder for consistent error responses across all endpoints."""

    @staticmethod
    def _build(status_code: int, message: str, error_type: str) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": message, "type": error_type})

    @staticmethod
    def invalid_parameter(message: str) -> JSONResponse:
        """Build a 400 Bad Request error response."""
        return ErrorResponseBuilder._build(400, message, ErrorType.BAD_REQUEST.value)

    @staticmethod
    def upstream_failure(response: GenerationResponse) -> JSONResponse:
        """Build a 502 Bad Gateway response for a failed provider call.

        The provider's own error message is logged, not returned.
        """
        logger.warning(
            f"Provider '{response.provider}' failed after {response.attempts} attempt(s): "
            f"{response.error}"
        )
        return ErrorResponseBuilder._build(
            502, PROVIDER_FAILURE_MESSAGE, ErrorType.UPSTREAM_ERROR.value
        )

    @staticmethod
    def service_unavailable(exception: LLMRouterError) -> JSONResponse:
        """Build a 503 Service Unavailable response for routing failures."""
        return ErrorResponseBuilder._build(503, str(exception), exception.error_type.value)

    @staticmethod
    def internal_error(message: str = "Internal server error") -> JSONResponse:
        """Build a 500 Internal Server Error response."""
        return ErrorResponseBuilder._build(500, message, ErrorType.UNEXPECTED_ERROR.value)


def error_response_for(exception: Exception) -> JSONResponse:
    """Map an exception raised by a prompt operation to its HTTP response."""
    if isinstance(exception, InvalidRequest):
        return ErrorResponseBuilder.invalid_parameter(exception.message)
    if isinstance(exception, (NoProviderAvailable, NoSuitableModel)):
        return ErrorResponseBuilder.service_unavailable(exception)
    logger.exception("Unhandled error while serving AI request", exc_info=exception)
    return ErrorResponseBuilder.internal_error()
