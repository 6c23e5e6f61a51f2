"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    APP_CONFIG_PATH: str = Field(default="app_config.json")
    CHAT_BASE_URL: str = "http://localhost:8000"
    HTTP_TIMEOUT_S: float = 60.0

    TOTAL_QUESTIONS: int = Field(default=5, ge=1)
    CLASSIFIER_PATH: str = "config/classifier.yaml"
    QUESTION_BANK_PATH: str = "config/question_bank.yaml"

    SPEECH_LANGUAGE: str = "en-US"
    SPEECH_MAX_RETRIES: int = Field(default=2, ge=0)
    SPEECH_RETRY_BASE_S: float = 1.0
    SPEECH_WATCHDOG_S: float = 5.0
    SPEECH_STATE_PATH: str = "data/speech_state.json"

    TTS_CHUNK_CHARS: int = Field(default=200, ge=20)
    TTS_CHUNK_GAP_S: float = 0.05
    RELISTEN_DELAY_S: float = 0.5

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
