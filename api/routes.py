"""Stub routes implementing the backend wire contract.

Responses are canned and deterministic: no voice is really cloned and no face
is really swapped. Good enough to develop and test the client end to end;
not for production. State lives in process memory, capped at
``MAX_ENTRIES`` voices and tasks (oldest evicted first).
"""

from __future__ import annotations

import hashlib
import io
import uuid

import numpy as np
import scipy.io.wavfile as wavfile
from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import Response

from api.schemas import (
    CloneVoiceResponse,
    ErrorResponse,
    FaceswapStatusDetails,
    FaceswapStatusResponse,
    InitiateFaceswapResponse,
    NarratorSpeechRequest,
)
from utils.helpers import get_logger

log = get_logger(__name__)
router = APIRouter()

# Akool-style faceswap status codes
STATUS_QUEUED = 1
STATUS_PROCESSING = 2
STATUS_DONE = 3

_SAMPLE_RATE = 22050
_SECONDS_PER_CHAR = 0.06
_MAX_SECONDS = 30.0

# ── In-memory state ──────────────────────────────────────────────────────────
MAX_ENTRIES = 1000
_voices: dict[str, str] = {}
_tasks: dict[str, dict] = {}


def _remember(store: dict, key: str, value) -> None:
    """Insert into a capped store, evicting the oldest entries first."""
    store.pop(key, None)
    store[key] = value
    while len(store) > MAX_ENTRIES:
        del store[next(iter(store))]


def reset_state() -> None:
    """Forget every voice and task (used between tests)."""
    _voices.clear()
    _tasks.clear()


def _render_tone(text: str, voice_id: str) -> bytes:
    """Render a short sine tone as WAV bytes; pitch depends on the voice."""
    seconds = min(max(len(text) * _SECONDS_PER_CHAR, 0.25), _MAX_SECONDS)
    pitch = 180 + int(hashlib.md5(voice_id.encode()).hexdigest()[:2], 16)
    t = np.linspace(0, seconds, int(_SAMPLE_RATE * seconds), endpoint=False)
    samples = (0.3 * np.sin(2 * np.pi * pitch * t) * 32767).astype(np.int16)

    buf = io.BytesIO()
    wavfile.write(buf, _SAMPLE_RATE, samples)
    return buf.getvalue()


# ── Routes ───────────────────────────────────────────────────────────────────


@router.post(
    "/clone-voice",
    response_model=CloneVoiceResponse,
    responses={400: {"model": ErrorResponse}},
)
async def clone_voice(audio_file: UploadFile = File(...)):
    """Register an uploaded voice sample and hand back its voice ID."""
    data = await audio_file.read()
    if not data:
        raise HTTPException(400, "Uploaded audio file is empty")

    voice_id = f"voice_{hashlib.sha256(data).hexdigest()[:16]}"
    name = audio_file.filename or "sample"
    _remember(_voices, voice_id, name)
    log.info("Cloned voice %s from %s (%d bytes)", voice_id, name, len(data))
    return CloneVoiceResponse(voice_id=voice_id)


@router.post(
    "/initiate-faceswap",
    response_model=InitiateFaceswapResponse,
    responses={400: {"model": ErrorResponse}, 415: {"model": ErrorResponse}},
)
async def initiate_faceswap(user_image: UploadFile = File(...)):
    """Accept a face image and queue a faceswap task.

    Poll /faceswap-status/{task_id} for progress.
    """
    content_type = user_image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(415, f"Unsupported image type: {content_type or 'unknown'}")

    data = await user_image.read()
    if not data:
        raise HTTPException(400, "Uploaded image is empty")

    task_id = uuid.uuid4().hex
    job_id = uuid.uuid4().hex
    _remember(_tasks, task_id, {"job_id": job_id, "polls": 0, "filename": user_image.filename})
    log.info("Faceswap task %s queued for %s", task_id, user_image.filename)

    return InitiateFaceswapResponse(
        akool_task_id=task_id,
        akool_job_id=job_id,
        message="Faceswap task created",
    )


@router.get(
    "/faceswap-status/{task_id}",
    response_model=FaceswapStatusResponse,
    response_model_by_alias=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_faceswap_status(task_id: str, request: Request):
    """Report task progress: queued, then processing, then done."""
    task = _tasks.get(task_id)
    if not task:
        raise HTTPException(404, f"Unknown faceswap task: {task_id}")

    task["polls"] += 1
    status = min(task["polls"], STATUS_DONE)

    details = FaceswapStatusDetails(faceswap_status=status, id=task["job_id"])
    if status == STATUS_DONE:
        details.url = f"{str(request.base_url).rstrip('/')}/static/faceswap/{task_id}.mp4"
        details.msg = "Faceswap completed"
    else:
        details.msg = "In queue" if status == STATUS_QUEUED else "Processing"

    return FaceswapStatusResponse(task_id=task_id, status_details=details)


@router.post(
    "/generate-narrator-speech",
    response_class=Response,
    responses={
        200: {"content": {"audio/wav": {}}},
        404: {"model": ErrorResponse},
    },
)
async def generate_narrator_speech(body: NarratorSpeechRequest):
    """Speak ``text`` with a cloned voice; returns raw WAV bytes."""
    if body.voice_id not in _voices:
        raise HTTPException(404, f"Unknown voice_id: {body.voice_id}")

    audio = _render_tone(body.text, body.voice_id)
    log.info("Narrated %d chars with %s (%d bytes)", len(body.text), body.voice_id, len(audio))
    return Response(content=audio, media_type="audio/wav")
