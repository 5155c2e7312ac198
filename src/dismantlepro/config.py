from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Dismantle Pro"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8787
    timezone: str = "America/New_York"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/dismantlepro.db"
    data_dir: Path = Path("./data")
    pdf_output_dir: Path = Path("./data/quotes")

    api_auth_mode: str = "token"
    local_user_email: str = "local@dismantlepro.test"
    cors_origins: str = "http://127.0.0.1:8787"

    quote_prefix: str = "QT"
    inland_quote_prefix: str = "IQ"
    quote_validity_days: int = 30
    default_margin_percentage: float = 15.0
    default_payment_terms: str = "Net 30"

    import_error_display_limit: int = 20
    pdf_renderer: str = "html"

    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "Dismantle Pro <quotes@notifications.dismantlepro.test>"
    email_timeout_sec: int = 15

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("api_auth_mode")
    @classmethod
    def validate_auth_mode(cls, value: str) -> str:
        allowed = {"token", "disabled"}
        if value not in allowed:
            raise ValueError(f"api_auth_mode must be one of {sorted(allowed)}")
        return value

    @field_validator("pdf_renderer")
    @classmethod
    def validate_pdf_renderer(cls, value: str) -> str:
        allowed = {"html", "vector"}
        if value not in allowed:
            raise ValueError(f"pdf_renderer must be one of {sorted(allowed)}")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.resend_api_key.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
