"""Result types and errors shared by the client and its callers."""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from utils.helpers import write_bytes


# ── Errors ───────────────────────────────────────────────────────────────────


class RemoteServiceError(Exception):
    """Base class for every failure raised by the remote service client."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(RemoteServiceError):
    """The request never reached the backend (DNS, refused connection, ...)."""


class RemoteError(RemoteServiceError):
    """The backend answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, detail: object = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def __repr__(self) -> str:
        return f"RemoteError(status_code={self.status_code}, message={self.message!r})"


class MalformedResponseError(RemoteServiceError):
    """The backend answered 2xx but the body breaks the expected contract."""


class EmptyPayloadError(MalformedResponseError):
    """The backend answered 2xx with a zero-length audio body."""


# ── Faceswap ─────────────────────────────────────────────────────────────────


@dataclass
class FaceswapInitiation:
    """Identifiers handed back when a faceswap task is accepted.

    The service may answer with only a message, so both identifiers are
    optional. Values are passed through verbatim.
    """

    message: Any = ""
    task_id: Any = None
    job_id: Any = None
    details: Any = None
    direct_url: Any = None


@dataclass
class FaceswapStatusDetails:
    """Whatever the backend currently reports about a faceswap task, unvalidated."""

    status_code: Any = None
    url: Any = None
    message: Any = None
    record_id: Any = None
    extra: dict = field(default_factory=dict)  # keys the client does not model


@dataclass
class FaceswapStatus:
    task_id: Any
    status_details: FaceswapStatusDetails = field(default_factory=FaceswapStatusDetails)


# ── Audio ────────────────────────────────────────────────────────────────────


@dataclass
class SpeechAudio:
    """In-memory synthesized speech, playable without refetching."""

    data: bytes
    media_type: str = "audio/mpeg"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def url(self) -> str:
        """``data:`` URL that browsers and audio widgets can play directly."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    def open(self) -> io.BytesIO:
        return io.BytesIO(self.data)

    def save(self, path: Path | str) -> Path:
        return write_bytes(path, self.data)
