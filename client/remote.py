"""Async HTTP client for the voice cloning / faceswap / narrator backend."""

from __future__ import annotations

import json
import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy
from pathlib import Path
from typing import Any, BinaryIO, NamedTuple, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from api.schemas import (
    FaceswapStatusDetails as FaceswapStatusDetailsSchema,
    FaceswapStatusResponse,
    InitiateFaceswapResponse,
    NarratorSpeechRequest,
)
from config.settings import Settings, settings as default_settings
from models.data import (
    EmptyPayloadError,
    FaceswapInitiation,
    FaceswapStatus,
    FaceswapStatusDetails,
    MalformedResponseError,
    RemoteError,
    SpeechAudio,
    TransportError,
)
from utils.helpers import get_logger, guess_media_type, read_upload

Upload = bytes | bytearray | BinaryIO | Path | str
SchemaT = TypeVar("SchemaT", bound=BaseModel)

CLONE_VOICE_PATH = "/api/clone-voice"
INITIATE_FACESWAP_PATH = "/api/initiate-faceswap"
FACESWAP_STATUS_PATH = "/api/faceswap-status/{task_id}"
NARRATOR_SPEECH_PATH = "/api/generate-narrator-speech"

DEFAULT_VOICE_FILE_NAME = "user_voice.webm"
DEFAULT_AUDIO_MEDIA_TYPE = "audio/mpeg"
DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"
MAX_REDIRECTS = 20


class ErrorFallback(NamedTuple):
    """Messages used when a non-2xx body carries no usable ``detail``.

    Both may contain a ``{status}`` placeholder.
    """

    unparseable: str
    missing_detail: str


GENERIC_FALLBACK = ErrorFallback("API error: {status}", "API error: {status}")
FACESWAP_STATUS_FALLBACK = ErrorFallback(
    "Failed to parse error from faceswap status check",
    "Failed to get faceswap video status",
)
NARRATOR_SPEECH_FALLBACK = ErrorFallback(
    "Failed to parse error from narrator speech generation",
    "Failed to generate narrator speech",
)


def resolve_error_message(response: httpx.Response, fallback: ErrorFallback) -> tuple[str, Any]:
    """Return ``(message, detail)`` for a failed response.

    Never raises: an error body that is not JSON yields the fallback message
    instead of a secondary parse error.
    """
    status = response.status_code
    try:
        body = response.json()
    except ValueError:
        return fallback.unparseable.format(status=status), None

    detail = body.get("detail") if isinstance(body, dict) else None
    if not detail:
        return fallback.missing_detail.format(status=status), None
    if isinstance(detail, str):
        return detail, detail
    return json.dumps(detail), detail


def _isolated_cookie_jar() -> CookieJar:
    """A jar that refuses every cookie, so httpx never keeps session state itself."""
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


class RemoteServiceClient:
    """Client for the four backend operations.

    One instance holds the resolved base URL, a session cookie jar and an
    ``httpx.AsyncClient``. Operations are independent coroutines and can be
    awaited concurrently; nothing is retried, ordered or polled here.

    Usage::

        async with RemoteServiceClient.from_settings() as client:
            voice_id = await client.clone_voice(Path("sample.webm"))
            audio = await client.synthesize_narrator_speech("Once upon a time", voice_id)
    """

    def __init__(
        self,
        base_url: str,
        *,
        include_credentials: bool = True,
        cookies: httpx.Cookies | dict[str, str] | None = None,
        timeout: float | None = None,
        verbose: bool = False,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.include_credentials = include_credentials
        self.cookies = httpx.Cookies(cookies)
        self.verbose = verbose
        self.log = logger or get_logger(__name__)
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            cookies=_isolated_cookie_jar(),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, config: Settings | None = None, **overrides: Any) -> RemoteServiceClient:
        """Build a client from :class:`Settings`; keyword overrides win."""
        config = config or default_settings
        options: dict[str, Any] = {
            "include_credentials": config.include_credentials,
            "timeout": config.request_timeout,
            "verbose": config.verbose_logging,
        }
        options.update(overrides)
        return cls(config.base_url, **options)

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> RemoteServiceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ── Operations ───────────────────────────────────────────────────────

    async def clone_voice(
        self,
        audio: Upload,
        file_name: str = DEFAULT_VOICE_FILE_NAME,
        *,
        credentials: bool | None = None,
    ) -> str:
        """POST /api/clone-voice — upload a voice sample, returns the new voice ID."""
        content, _ = read_upload(audio)
        files = {"audio_file": (file_name, content, guess_media_type(file_name, "audio/webm"))}
        response = await self._send("POST", CLONE_VOICE_PATH, credentials=credentials, files=files)
        data = self._json_or_raise(response, GENERIC_FALLBACK)

        voice_id = data.get("voice_id") if isinstance(data, dict) else None
        if not voice_id or not isinstance(voice_id, str):
            self.log.error("Voice ID missing in response: %s", data)
            raise MalformedResponseError("Voice ID not found in clone response")
        return voice_id

    async def initiate_faceswap(
        self,
        photo: Upload,
        file_name: str | None = None,
        *,
        credentials: bool | None = None,
    ) -> FaceswapInitiation:
        """POST /api/initiate-faceswap — submit a face image, returns task identifiers."""
        content, source_name = read_upload(photo)
        name = file_name or source_name or "user_image"
        files = {"user_image": (name, content, guess_media_type(name, DEFAULT_IMAGE_MEDIA_TYPE))}

        self._trace("Initiating faceswap with API URL: %s", self.base_url)
        response = await self._send("POST", INITIATE_FACESWAP_PATH, credentials=credentials, files=files)
        self._trace("Faceswap response status: %s", response.status_code)
        data = self._json_or_raise(response, GENERIC_FALLBACK)
        self._trace("Faceswap response data: %s", data)

        parsed = self._validate(InitiateFaceswapResponse, data, "faceswap initiation")
        return FaceswapInitiation(
            message="" if parsed.message is None else parsed.message,
            task_id=parsed.akool_task_id,
            job_id=parsed.akool_job_id,
            details=parsed.details,
            direct_url=parsed.direct_url,
        )

    async def get_faceswap_status(self, task_id: str, *, credentials: bool | None = None) -> FaceswapStatus:
        """GET /api/faceswap-status/{task_id} — one status snapshot, no polling."""
        if not task_id:
            raise ValueError("task_id must be a non-empty string")

        path = FACESWAP_STATUS_PATH.format(task_id=quote(task_id, safe=""))
        response = await self._send("GET", path, credentials=credentials)
        data = self._json_or_raise(response, FACESWAP_STATUS_FALLBACK)

        parsed = self._validate(FaceswapStatusResponse, data, "faceswap status")
        details = parsed.status_details or FaceswapStatusDetailsSchema()
        return FaceswapStatus(
            task_id=parsed.task_id,
            status_details=FaceswapStatusDetails(
                status_code=details.faceswap_status,
                url=details.url,
                message=details.msg,
                record_id=details.id,
                extra=dict(details.model_extra or {}),
            ),
        )

    async def synthesize_narrator_speech(
        self,
        text: str,
        voice_id: str,
        *,
        credentials: bool | None = None,
    ) -> SpeechAudio:
        """POST /api/generate-narrator-speech — returns the raw audio as a playable handle."""
        if not text:
            raise ValueError("text must be a non-empty string")
        if not voice_id:
            raise ValueError("voice_id must be a non-empty string")

        payload = NarratorSpeechRequest(text=text, voice_id=voice_id).model_dump()
        response = await self._send(
            "POST",
            NARRATOR_SPEECH_PATH,
            credentials=credentials,
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        self._raise_for_status(response, NARRATOR_SPEECH_FALLBACK)

        audio = response.content
        if not audio:
            self.log.error("Narrator speech response is an empty body")
            raise EmptyPayloadError("Received empty audio response from server")

        media_type = response.headers.get("content-type", "").split(";")[0].strip()
        return SpeechAudio(data=audio, media_type=media_type or DEFAULT_AUDIO_MEDIA_TYPE)

    # ── Internals ────────────────────────────────────────────────────────

    async def _send(
        self,
        method: str,
        path: str,
        *,
        credentials: bool | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, following redirects hop by hop.

        Redirects are walked here rather than by httpx so the session jar is
        applied to every hop.
        """
        include = self.include_credentials if credentials is None else credentials
        request = self._http.build_request(method, path, **kwargs)

        for _ in range(MAX_REDIRECTS + 1):
            if include:
                self.cookies.set_cookie_header(request)

            self._trace("%s %s (credentials=%s)", request.method, request.url, include)
            try:
                response = await self._http.send(request)
            except httpx.TransportError as exc:
                self.log.error("%s %s failed: %s", request.method, request.url, exc)
                raise TransportError(f"Could not reach {request.url}: {exc}") from exc

            if include:
                self.cookies.extract_cookies(response)
            if response.next_request is None:
                return response

            self._trace("Redirect %s -> %s", response.status_code, response.next_request.url)
            await response.aclose()
            request = response.next_request

        self.log.error("%s %s: more than %d redirects", method, path, MAX_REDIRECTS)
        raise TransportError(f"Exceeded {MAX_REDIRECTS} redirects for {path}")

    def _raise_for_status(self, response: httpx.Response, fallback: ErrorFallback) -> None:
        if response.is_success:
            return
        message, detail = resolve_error_message(response, fallback)
        self.log.warning(
            "%s %s -> %s: %s",
            response.request.method,
            response.request.url,
            response.status_code,
            message,
        )
        raise RemoteError(message, status_code=response.status_code, detail=detail)

    def _json_or_raise(self, response: httpx.Response, fallback: ErrorFallback) -> Any:
        self._raise_for_status(response, fallback)
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"Expected a JSON body from {response.request.url}"
            ) from exc

    def _validate(self, schema: type[SchemaT], data: Any, what: str) -> SchemaT:
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            self.log.error("Unexpected %s response: %s", what, data)
            raise MalformedResponseError(f"Unexpected {what} response: {exc}") from exc

    def _trace(self, msg: str, *args: Any) -> None:
        self.log.log(logging.INFO if self.verbose else logging.DEBUG, msg, *args)
