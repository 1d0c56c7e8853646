from pathlib import Path
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root

ENV_FILE = os.getenv("ENV_FILE", str(BASE_DIR / ".env"))

PLACEHOLDER_API_KEY = "your-elevenlabs-api-key"


def api_key_configured(key: str | None) -> bool:
    """True when the key looks like a real ElevenLabs key"""
    key = key or ""
    return key != PLACEHOLDER_API_KEY and key.startswith("sk_") and len(key) > 20


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    APP_ENV: str = "local"
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'voice_forms.db'}"
    CORS_ORIGINS: str = "*"  # Comma-separated list of allowed origins, or "*" for all
    LOG_LEVEL: str = "INFO"

    # Speech services
    ELEVENLABS_API_KEY: str | None = None
    ELEVENLABS_BASE_URL: str = "https://api.elevenlabs.io"
    ELEVENLABS_VOICE_ID: str = "pNInz6obpgDQGcFmaJgB"  # "Adam"
    ELEVENLABS_STT_MODEL: str = "scribe_v1"
    ELEVENLABS_TTS_MODEL: str = "eleven_monolingual_v1"
    ELEVENLABS_TIMEOUT_S: float = 30.0
    TRANSCRIPTION_BACKEND: str = "auto"  # auto | elevenlabs | browser
    VOICE_FEEDBACK: bool = True

    # broader "called X" / "for X" clause matching, see interpret_transcript
    LOOSE_CLAUSE_MATCHING: bool = False

    # Public URL prefix for saved forms
    SHARE_BASE_URL: str = "http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list, handling '*' for development"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def elevenlabs_configured(self) -> bool:
        return api_key_configured(self.ELEVENLABS_API_KEY)


settings = Settings()
