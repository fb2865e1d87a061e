from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service-level settings leveraging environment overrides.

    User-facing rewriting preferences (endpoint, model, profiles) live in the
    settings store instead; see ``rewriter.settings_store``.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="REWRITER_", case_sensitive=False
    )

    app_name: str = "Profile Rewriter"
    environment: str = Field("local", validation_alias="ENVIRONMENT")
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    max_payload_bytes: int = Field(1024 * 1024, ge=1024)  # 1 MB of transcription

    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535)
    log_level: str = "INFO"

    # Persisted user settings; None keeps them in memory only
    settings_path: Optional[str] = "data/settings.json"

    # Fixed for the lifetime of the shared HTTP client
    llm_connect_timeout_seconds: float = Field(10.0, gt=0)
    registry_lock_timeout_seconds: float = Field(5.0, gt=0)


@lru_cache
def get_settings() -> Settings:
    return Settings()
