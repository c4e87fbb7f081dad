"""Request and response DTOs for the HTTP endpoints."""

from llm_router.api.models.endpoint_requests import (
    GeneratePromptBody,
    ImprovePromptBody,
    MonitoringRequest,
)
from llm_router.api.models.endpoint_responses import (
    GenerationResultResponse,
    MonitoringResponse,
    StatsResponse,
)

__all__ = [
    "GeneratePromptBody",
    "GenerationResultResponse",
    "ImprovePromptBody",
    "MonitoringRequest",
    "MonitoringResponse",
    "StatsResponse",
]
