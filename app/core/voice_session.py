"""
Voice session state machine.

    idle -> recording -> processing -> idle
                              \\-> error -> idle

One session is one recording that gets transcribed, interpreted and merged
into the form. Only one session can be active per builder; `start()` is
rejected unless the controller is idle.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from app.core.errors import (
    SPEECH_ERRORS,
    AuthError,
    InvalidAudio,
    NoSpeechDetected,
    RateLimited,
    SessionBusyError,
    VoiceFormError,
)
from app.core.form_store import FormDocumentStore
from app.core.interpreter import interpret_transcript
from app.schemas.forms import FieldDelta
from app.services.speech import Synthesizer, Transcriber

logger = logging.getLogger(__name__)

RECORDING_PROMPT = "Recording started. Please speak your form requirements."
FAILURE_PROMPT = "Sorry, I could not process your voice command. Please try again."
NO_SPEECH_MESSAGE = "No speech detected. Please try speaking more clearly."


class VoiceSessionState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PROCESSING = "processing"
    ERROR = "error"


class AudioCapture(Protocol):
    mime_type: str

    async def open(self) -> None: ...

    async def read(self) -> bytes: ...
    """
    Stop capturing and return everything recorded so far.
    """

    async def release(self) -> None: ...
    """
    Free the underlying device. Must be safe to call more than once.
    """


class BufferedAudioCapture:
    """Audio that the client already recorded and uploaded in one piece."""

    def __init__(self, data: bytes, mime_type: str = "audio/webm") -> None:
        self._data = data
        self.mime_type = mime_type
        self.opened = False
        self.released = False

    async def open(self) -> None:
        self.opened = True

    async def read(self) -> bytes:
        if self.released:
            raise InvalidAudio("Audio capture was already released")
        return self._data

    async def release(self) -> None:
        self.released = True


@dataclass
class VoiceOutcome:
    status: str  # updated | no_speech | error | discarded
    transcript: str = ""
    message: str = ""
    delta: FieldDelta | None = None
    error_code: str | None = None
    confirmation_audio: bytes | None = None


def user_message(exc: VoiceFormError) -> str:
    if isinstance(exc, InvalidAudio):
        return "Invalid audio format. Please try recording again."
    if isinstance(exc, AuthError):
        return "Speech service credentials are missing or invalid. Please check the API key configuration."
    if isinstance(exc, RateLimited):
        return "API rate limit exceeded. Please wait a moment and try again."
    return f"Failed to process voice command: {exc.message}"


class VoiceSessionController:
    def __init__(
        self,
        store: FormDocumentStore,
        transcriber: Transcriber,
        synthesizer: Synthesizer | None = None,
        *,
        interpreter: Callable = interpret_transcript,
        feedback: bool = True,
    ) -> None:
        self.store = store
        self.transcriber = transcriber
        self.synthesizer = synthesizer
        self.interpreter = interpreter
        self.feedback = feedback

        self._state = VoiceSessionState.IDLE
        self._capture: AudioCapture | None = None
        self._session = 0
        self.last_transcript = ""
        self.last_error: str | None = None

    @property
    def state(self) -> VoiceSessionState:
        return self._state

    @property
    def session_id(self) -> int:
        return self._session

    # ----------------- lifecycle ---------------
    async def start(self, capture: AudioCapture, *, announce: bool = True) -> bytes | None:
        """Begin recording. Returns the spoken prompt, if any."""
        if self._state is not VoiceSessionState.IDLE:
            raise SessionBusyError(f"Cannot start a voice session while {self._state.value}")

        self._session += 1
        self._capture = capture
        self._state = VoiceSessionState.RECORDING
        self.last_error = None

        try:
            await capture.open()
        except Exception:
            await self._release()
            self._state = VoiceSessionState.IDLE
            raise

        logger.info("form %s: voice session %d recording", self.store.id, self._session)
        if announce:
            return await self._speak(RECORDING_PROMPT)
        return None

    async def stop(self) -> VoiceOutcome:
        """Stop recording, transcribe and apply the command."""
        if self._state is not VoiceSessionState.RECORDING:
            raise SessionBusyError(f"No recording in progress (state: {self._state.value})")

        session = self._session
        capture = self._capture
        self._state = VoiceSessionState.PROCESSING

        try:
            try:
                audio = await capture.read()
            finally:
                await self._release(capture)
            if not audio:
                raise InvalidAudio("No audio data recorded")
            transcript = await self.transcriber.transcribe(audio, capture.mime_type)
        except SPEECH_ERRORS as exc:
            return await self._fail(session, exc)
        except Exception:
            if session == self._session:
                self._state = VoiceSessionState.IDLE
            raise

        return await self._finish(session, transcript.strip())

    async def process(self, capture: AudioCapture) -> VoiceOutcome:
        """Run a whole session over audio that is already recorded."""
        await self.start(capture, announce=False)
        return await self.stop()

    async def cancel(self) -> None:
        """Abandon the current session.

        The capture is released right away. A transcription already in flight
        keeps running; its result is still applied unless a new session has
        started by the time it arrives.
        """
        if self._state is VoiceSessionState.RECORDING:
            await self._release()
        if self._state is not VoiceSessionState.IDLE:
            logger.info("form %s: voice session %d cancelled", self.store.id, self._session)
        self._state = VoiceSessionState.IDLE

    def apply_transcript(self, transcript: str) -> FieldDelta:
        """Interpret a transcript against the current document and merge the result."""
        update = self.interpreter(transcript, self.store.document, id_factory=self.store.id_factory)
        return self.store.apply_update(update)

    # ----------------- outcomes ----------------
    async def _finish(self, session: int, transcript: str) -> VoiceOutcome:
        if session != self._session:
            logger.info("form %s: discarding late transcript from session %d", self.store.id, session)
            return VoiceOutcome(status="discarded", transcript=transcript)

        self.last_transcript = transcript
        if not transcript:
            self._state = VoiceSessionState.IDLE
            return VoiceOutcome(
                status="no_speech",
                message=NO_SPEECH_MESSAGE,
                error_code=NoSpeechDetected.code,
            )

        delta = self.apply_transcript(transcript)
        self._state = VoiceSessionState.IDLE

        message = f"Form updated successfully. Added {len(delta.added)} new fields."
        logger.info(
            "form %s: session %d applied (+%d ~%d -%d)",
            self.store.id,
            session,
            len(delta.added),
            len(delta.updated),
            len(delta.removed),
        )
        return VoiceOutcome(
            status="updated",
            transcript=transcript,
            message=message,
            delta=delta,
            confirmation_audio=await self._speak(message),
        )

    async def _fail(self, session: int, exc: VoiceFormError) -> VoiceOutcome:
        if session != self._session:
            logger.info("form %s: ignoring failure from stale session %d: %s", self.store.id, session, exc)
            return VoiceOutcome(status="discarded", error_code=exc.code)

        self._state = VoiceSessionState.ERROR
        message = user_message(exc)
        self.last_error = message
        logger.warning("form %s: voice session %d failed: %s", self.store.id, session, exc)

        audio = None
        if not isinstance(exc, AuthError):
            audio = await self._speak(FAILURE_PROMPT)

        self._state = VoiceSessionState.IDLE
        return VoiceOutcome(status="error", message=message, error_code=exc.code, confirmation_audio=audio)

    # ----------------- audio helpers -----------
    async def _release(self, capture: AudioCapture | None = None) -> None:
        capture = capture or self._capture
        if capture is self._capture:
            self._capture = None
        if capture is not None:
            await capture.release()

    async def _speak(self, text: str) -> bytes | None:
        if not (self.feedback and self.synthesizer):
            logger.info("Audio feedback: %s", text)
            return None
        try:
            return await self.synthesizer.synthesize(text)
        except SPEECH_ERRORS as exc:
            logger.warning("Audio feedback failed: %s", exc)
            return None

    async def read_summary(self) -> tuple[str, bytes | None]:
        text = self.store.summary()
        return text, await self._speak(text)
