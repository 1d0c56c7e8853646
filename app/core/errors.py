from __future__ import annotations


class VoiceFormError(Exception):
    """Base class for failures the service knows how to report."""

    code = "voice_form_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


# --- upstream speech services ---

class InvalidAudio(VoiceFormError):
    code = "invalid_audio"


class AuthError(VoiceFormError):
    code = "auth_error"


class RateLimited(VoiceFormError):
    code = "rate_limited"


class ServiceError(VoiceFormError):
    code = "service_error"


class NoSpeechDetected(VoiceFormError):
    code = "no_speech"


# --- form document ---

class ValidationError(VoiceFormError):
    code = "validation_error"


class FieldNotFoundError(VoiceFormError):
    code = "field_not_found"

    def __init__(self, field_id: str):
        super().__init__(f"Field not found: {field_id}")
        self.field_id = field_id


# --- voice session ---

class SessionBusyError(VoiceFormError):
    code = "session_busy"


SPEECH_ERRORS = (InvalidAudio, AuthError, RateLimited, ServiceError)
