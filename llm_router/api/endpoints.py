import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from llm_router import __version__
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
from llm_router.api.services.error_handling import (
    MONITORING_ERROR_MESSAGE,
    ErrorResponseBuilder,
    error_response_for,
)
from llm_router.core import factory
from llm_router.core.logging import ConversationLogger, conversation_logger
from llm_router.core.types import utcnow

router = APIRouter()

logger = logging.getLogger(__name__)

MONITORING_TYPES = ("health", "stats")


@router.get("/api/ai/monitoring")
async def monitoring(
    params: MonitoringRequest = Depends(MonitoringRequest.from_fastapi),
) -> Response:
    """Provider health probes and usage statistics."""
    if params.type is not None and params.type not in MONITORING_TYPES:
        return ErrorResponseBuilder.invalid_parameter(
            f"Invalid type '{params.type}'. Must be one of: {', '.join(MONITORING_TYPES)}"
        )

    request_id = str(uuid.uuid4())
    with ConversationLogger.correlation_context(request_id):
        try:
            manager = factory.get_manager()
            if params.type == "stats":
                return StatsResponse(stats=factory.get_provider_stats(manager)).to_response()

            data = await factory.get_provider_health(manager)
            return MonitoringResponse(
                health=data["health"], stats=data["stats"], timestamp=data["timestamp"]
            ).to_response()
        except Exception:
            logger.exception("LLM monitoring error")
            return ErrorResponseBuilder.internal_error(MONITORING_ERROR_MESSAGE)


@router.post("/api/ai/improve")
async def improve(body: ImprovePromptBody) -> Response:
    """Tighten or expand a prompt."""
    request_id = str(uuid.uuid4())
    with ConversationLogger.correlation_context(request_id):
        conversation_logger.info(
            f"AI improve request (mode={body.mode}, fallback={body.use_fallback})"
        )
        try:
            result = await factory.improve_prompt(
                body.prompt, body.mode, use_fallback=body.use_fallback
            )
        except Exception as e:
            return error_response_for(e)

        if not result.success:
            return ErrorResponseBuilder.upstream_failure(result)
        return GenerationResultResponse("improved_prompt", result).to_response()


@router.post("/api/ai/generate")
async def generate(body: GeneratePromptBody) -> Response:
    """Write a prompt from a description."""
    request_id = str(uuid.uuid4())
    with ConversationLogger.correlation_context(request_id):
        conversation_logger.info(f"AI generate request (fallback={body.use_fallback})")
        try:
            result = await factory.generate_prompt(
                body.description, use_fallback=body.use_fallback
            )
        except Exception as e:
            return error_response_for(e)

        if not result.success:
            return ErrorResponseBuilder.upstream_failure(result)
        return GenerationResultResponse("prompt", result).to_response()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Liveness probe. Never calls a provider."""
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "version": __version__,
    }


@router.get("/")
async def root() -> JSONResponse:
    return JSONResponse(
        content={
            "message": f"LLM Router v{__version__}",
            "endpoints": {
                "monitoring": "/api/ai/monitoring",
                "improve": "/api/ai/improve",
                "generate": "/api/ai/generate",
                "health": "/health",
            },
        }
    )
