"""Endpoint request DTOs.

Request bodies are pydantic models validated by FastAPI; query parameters
are collected into frozen dataclasses through ``from_fastapi``.
"""

from dataclasses import dataclass

from fastapi import Query
from pydantic import BaseModel, Field


class ImprovePromptBody(BaseModel):
    """Body of ``POST /api/ai/improve``."""

    prompt: str = Field("", description="Prompt to improve")
    mode: str = Field("tighten", description="Improvement mode: tighten or expand")
    use_fallback: bool = Field(False, description="Retry once on the fallback provider")


class GeneratePromptBody(BaseModel):
    """Body of ``POST /api/ai/generate``."""

    description: str = Field("", description="What the generated prompt should do")
    use_fallback: bool = Field(False, description="Retry once on the fallback provider")


@dataclass(frozen=True, slots=True)
class MonitoringRequest:
    """Parameters for the /api/ai/monitoring endpoint."""

    type: str | None  # noqa: A003

    @classmethod
    def from_fastapi(
        cls,
        type: str | None = Query(  # noqa: A003
            None,
            description="Data to return: health, stats, or both when omitted",
        ),
    ) -> "MonitoringRequest":
        """Create request from FastAPI dependencies.

        Usage:
            @router.get("/api/ai/monitoring")
            async def monitoring(
                request: MonitoringRequest = Depends(MonitoringRequest.from_fastapi),
            ):
        """
        return cls(type=type.strip().lower() if type and type.strip() else None)
