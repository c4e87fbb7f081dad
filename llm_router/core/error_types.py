"""Error type enumeration for LLM Router.

Provides type-safe error categorization for logs, failed responses and
HTTP error payloads.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type categories for provider failures and error responses.

    These error types are used throughout the codebase for:
    - ProviderError.error_type
    - failed GenerationResponse log lines
    - HTTP error payloads

    When adding new error types:
    1. Add the enum value here
    2. Map it to an HTTP status in llm_router.api.services.error_handling
    """

    # Attempt lifecycle errors
    TIMEOUT = "timeout"  # Provider attempt exceeded its timeout

    # Vendor/API errors
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"  # Vendor unreachable or 5xx
    UPSTREAM_ERROR = "upstream_error"  # Vendor returned an unusable response

    # Rate limiting and request errors
    RATE_LIMIT = "rate_limit"  # Rate limit exceeded
    BAD_REQUEST = "bad_request"  # Invalid request

    # Routing errors
    NO_PROVIDER = "no_provider"  # No enabled provider configured
    NO_SUITABLE_MODEL = "no_suitable_model"  # No model supports the operation
    CONFIGURATION_ERROR = "configuration_error"  # Deployment mistake

    # Catch-all
    UNEXPECTED_ERROR = "unexpected_error"  # Unhandled/unexpected error
