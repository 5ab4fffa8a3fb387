"""Application settings loaded from environment variables / .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ── Backend ──────────────────────────────────────────────────────────
    api_base_url: str = "http://localhost:8000"
    include_credentials: bool = True
    request_timeout: float | None = None  # seconds; None waits indefinitely

    # ── Logging ──────────────────────────────────────────────────────────
    log_level: str = "INFO"
    verbose_logging: bool = False

    # ── Stub backend ─────────────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def base_url(self) -> str:
        return self.api_base_url.rstrip("/")


settings = Settings()
