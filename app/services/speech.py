"""
Speech-to-text and text-to-speech backends.

Transcribers turn recorded audio into a transcript and Synthesizers turn a
confirmation message into audio. The voice session only sees the two
protocols below, so the ElevenLabs client and the browser fallback are
interchangeable.
"""
from __future__ import annotations

import logging
from typing import Protocol

import httpx

from app.core.config import Settings, api_key_configured
from app.core.errors import AuthError, InvalidAudio, RateLimited, ServiceError

logger = logging.getLogger(__name__)


# --------- Protocols ---------
class Transcriber(Protocol):
    name: str

    async def transcribe(self, audio: bytes, mime_type: str) -> str: ...
    """
    Return the transcript for `audio`. Raises InvalidAudio for empty or
    unreadable input, AuthError/RateLimited/ServiceError for upstream failures.
    """


class Synthesizer(Protocol):
    async def synthesize(self, text: str) -> bytes: ...
    """
    Return encoded speech for `text`.
    """


# --------- ElevenLabs ---------
_EXTENSIONS = {
    "audio/webm": ".webm",
    "audio/ogg": ".ogg",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
}


def _base_mime(mime_type: str | None) -> str:
    return (mime_type or "").split(";")[0].strip().lower()


def _error_detail(response: httpx.Response) -> str:
    """Best-effort human readable reason from an ElevenLabs error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()

    if not isinstance(data, dict):
        return str(data)

    detail = data.get("detail")
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        parts = []
        for item in detail:
            if isinstance(item, dict):
                parts.append(str(item.get("msg") or item.get("message") or item))
            else:
                parts.append(str(item))
        return ", ".join(parts)
    if isinstance(detail, dict):
        if detail.get("msg") or detail.get("message"):
            return str(detail.get("msg") or detail.get("message"))
        return ", ".join(f"{k}: {v}" for k, v in detail.items())

    return str(data.get("message") or data.get("error") or "")


def _raise_for_status(response: httpx.Response, *, service: str, bad_input: type[Exception]) -> None:
    if response.is_success:
        return

    message = f"ElevenLabs {service} error: {response.status_code}"
    detail = _error_detail(response)
    if detail:
        message += f" - {detail}"

    code = response.status_code
    if code in (401, 403):
        raise AuthError(message)
    if code == 429:
        raise RateLimited(message)
    if code in (400, 415, 422):
        raise bad_input(message)
    raise ServiceError(message)


class _ElevenLabsClient:
    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://api.elevenlabs.io",
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.transport = transport

    def _require_key(self) -> None:
        if not api_key_configured(self.api_key):
            raise AuthError("ElevenLabs API key not configured")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self.transport,
            headers={"xi-api-key": self.api_key or ""},
        )

    async def _post(self, url: str, *, service: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.post(url, **kwargs)
        except httpx.HTTPError as exc:
            raise ServiceError(f"ElevenLabs {service} request failed: {exc}") from exc


class ElevenLabsTranscriber(_ElevenLabsClient):
    name = "elevenlabs"

    def __init__(self, api_key: str | None, *, model_id: str = "scribe_v1", **kwargs) -> None:
        super().__init__(api_key, **kwargs)
        self.model_id = model_id

    async def transcribe(self, audio: bytes, mime_type: str = "audio/webm") -> str:
        self._require_key()
        if not audio:
            raise InvalidAudio("No audio data to process")

        mime = _base_mime(mime_type) or "audio/webm"
        filename = "audio" + _EXTENSIONS.get(mime, ".webm")

        response = await self._post(
            "/v1/speech-to-text",
            service="speech-to-text",
            headers={"Accept": "application/json"},
            data={"model_id": self.model_id},
            files={"file": (filename, audio, mime)},
        )
        _raise_for_status(response, service="speech-to-text", bad_input=InvalidAudio)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ServiceError("Malformed response from ElevenLabs speech-to-text") from exc

        text = payload.get("text") if isinstance(payload, dict) else None
        if text is None:
            raise ServiceError("No transcription returned from API")

        logger.debug("transcribed %d bytes of %s into %d chars", len(audio), mime, len(text))
        return text


class ElevenLabsSynthesizer(_ElevenLabsClient):
    def __init__(
        self,
        api_key: str | None,
        *,
        voice_id: str = "pNInz6obpgDQGcFmaJgB",
        model_id: str = "eleven_monolingual_v1",
        **kwargs,
    ) -> None:
        super().__init__(api_key, **kwargs)
        self.voice_id = voice_id
        self.model_id = model_id

    async def synthesize(self, text: str) -> bytes:
        self._require_key()
        response = await self._post(
            f"/v1/text-to-speech/{self.voice_id}",
            service="text-to-speech",
            headers={"Accept": "audio/mpeg"},
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": {"stability": 0.5, "similarity_boost": 0.5},
            },
        )
        _raise_for_status(response, service="text-to-speech", bad_input=ServiceError)
        return response.content


# --------- Browser fallback ---------
class BrowserTranscriptRecognizer:
    """Fallback used when ElevenLabs is unavailable.

    The browser's own SpeechRecognition does the listening and posts the
    recognised text as `text/plain`; this backend only validates and decodes
    that payload.
    """

    name = "browser"

    async def transcribe(self, audio: bytes, mime_type: str = "text/plain") -> str:
        if not audio:
            raise InvalidAudio("No audio data recorded")

        if _base_mime(mime_type) != "text/plain":
            raise InvalidAudio(
                f"Browser speech recognition expects a text/plain transcript, got {mime_type or 'no content type'}"
            )

        try:
            return audio.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidAudio("Transcript is not valid UTF-8 text") from exc


# --------- Selection ---------
def build_transcriber(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> Transcriber:
    backend = settings.TRANSCRIPTION_BACKEND.strip().lower()

    if backend == "elevenlabs" or (backend == "auto" and settings.elevenlabs_configured):
        return ElevenLabsTranscriber(
            settings.ELEVENLABS_API_KEY,
            model_id=settings.ELEVENLABS_STT_MODEL,
            base_url=settings.ELEVENLABS_BASE_URL,
            timeout_s=settings.ELEVENLABS_TIMEOUT_S,
            transport=transport,
        )
    if backend in ("auto", "browser"):
        if backend == "auto":
            logger.info("ElevenLabs API key not configured, using browser speech recognition")
        return BrowserTranscriptRecognizer()

    raise ValueError(f"Unknown TRANSCRIPTION_BACKEND: {settings.TRANSCRIPTION_BACKEND}")


def build_synthesizer(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> Synthesizer | None:
    if not (settings.VOICE_FEEDBACK and settings.elevenlabs_configured):
        return None
    return ElevenLabsSynthesizer(
        settings.ELEVENLABS_API_KEY,
        voice_id=settings.ELEVENLABS_VOICE_ID,
        model_id=settings.ELEVENLABS_TTS_MODEL,
        base_url=settings.ELEVENLABS_BASE_URL,
        timeout_s=settings.ELEVENLABS_TIMEOUT_S,
        transport=transport,
    )
