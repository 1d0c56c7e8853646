import base64

from pydantic import BaseModel

from app.core.voice_session import VoiceOutcome, VoiceSessionController
from app.schemas.forms import FieldDelta, FormDocument


class VoiceOutcomeOut(BaseModel):
    status: str  # updated | no_speech | error | discarded
    transcript: str
    message: str
    error_code: str | None
    delta: FieldDelta | None
    confirmation_audio: str | None  # base64 audio/mpeg
    form: FormDocument


class VoiceStateOut(BaseModel):
    state: str
    session_id: int
    last_transcript: str
    last_error: str | None
    transcriber: str


def outcome_out(outcome: VoiceOutcome, form: FormDocument) -> VoiceOutcomeOut:
    audio = outcome.confirmation_audio
    return VoiceOutcomeOut(
        status=outcome.status,
        transcript=outcome.transcript,
        message=outcome.message,
        error_code=outcome.error_code,
        delta=outcome.delta,
        confirmation_audio=base64.b64encode(audio).decode("ascii") if audio else None,
        form=form,
    )


def state_out(voice: VoiceSessionController) -> VoiceStateOut:
    return VoiceStateOut(
        state=voice.state.value,
        session_id=voice.session_id,
        last_transcript=voice.last_transcript,
        last_error=voice.last_error,
        transcriber=getattr(voice.transcriber, "name", type(voice.transcriber).__name__),
    )
