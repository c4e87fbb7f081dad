"""Endpoint response DTOs.

Type-safe response containers that provide consistent structure
across all endpoint responses.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fastapi.responses import JSONResponse, Response

from llm_router.core.types import GenerationResponse, HealthStatus, ProviderStats


@dataclass(frozen=True, slots=True)
class MonitoringResponse:
    """Health probes plus statistics, as returned by /api/ai/monitoring."""

    health: list[HealthStatus]
    stats: list[ProviderStats]
    timestamp: datetime

    def to_response(self) -> Response:
        return JSONResponse(
            status_code=200,
            content={
                "health": [status.to_dict() for status in self.health],
                "stats": [stats.to_dict() for stats in self.stats],
                "timestamp": self.timestamp.isoformat(),
            },
        )


@dataclass(frozen=True, slots=True)
class StatsResponse:
    """Statistics only, as returned by /api/ai/monitoring?type=stats."""

    stats: list[ProviderStats]

    def to_response(self) -> Response:
        return JSONResponse(status_code=200, content=[stats.to_dict() for stats in self.stats])


@dataclass(frozen=True, slots=True)
class GenerationResultResponse:
    """Successful result of a prompt operation.

    ``text_field`` names the key holding the generated text.
    """

    text_field: str
    result: GenerationResponse

    def content(self) -> dict[str, Any]:
        content: dict[str, Any] = {
            self.text_field: self.result.text,
            "provider": self.result.provider,
            "model": self.result.model,
            "usage": self.result.usage.to_dict(),
        }
        if self.result.warning:
            content["warning"] = self.result.warning
        return content

    def to_response(self) -> Response:
        return JSONResponse(status_code=200, content=self.content())
