from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── App ──────────────────────────────────────────────
    app_name: str = "docqa"
    app_version: str = "0.1.0"
    debug: bool = False

    # ── Completion provider ──────────────────────────────
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    default_model: str = "gpt-3.5-turbo"
    completion_timeout: float = 600.0
    completion_max_retries: int = 0

    # ── Uploads ──────────────────────────────────────────
    max_upload_bytes: int = 100 * 1024 * 1024

    @property
    def max_upload_mb(self) -> int:
        return self.max_upload_bytes // (1024 * 1024)

    # ── Server ───────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000


settings = Settings()
