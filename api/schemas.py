"""Pydantic wire schemas shared by the client and the stub backend."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Requests ─────────────────────────────────────────────────────────────────


class NarratorSpeechRequest(BaseModel):
    """Text to speak with a previously cloned voice."""

    text: str = Field(..., min_length=1, description="Narration text")
    voice_id: str = Field(..., min_length=1, description="Voice ID from /clone-voice")


# ── Responses ────────────────────────────────────────────────────────────────


class CloneVoiceResponse(BaseModel):
    voice_id: str | None = None


class InitiateFaceswapResponse(BaseModel):
    """Response after a faceswap task is submitted.

    Values are passed through as the backend sent them.
    """

    akool_task_id: Any = None
    akool_job_id: Any = None
    message: Any = None
    details: Any = None
    direct_url: Any = None


class FaceswapStatusDetails(BaseModel):
    """Opaque status bag; no value is type-checked and unknown keys are kept as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    faceswap_status: Any = None
    url: Any = None
    msg: Any = None
    id: Any = Field(None, alias="_id")


class FaceswapStatusResponse(BaseModel):
    """Response for faceswap status polling. Only ``task_id`` is required."""

    model_config = ConfigDict(extra="allow")

    task_id: Any = Field(...)
    status_details: FaceswapStatusDetails | None = Field(default_factory=FaceswapStatusDetails)


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
