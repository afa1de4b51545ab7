from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "jobtrack"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    log_level: str = "INFO"
    secret_key: str = "change-me"

    jwt_algorithm: str = "HS256"
    access_token_ttl_min: int = 60 * 24 * 7

    database_url: str = "sqlite:///./data/jobtrack.db"
    data_dir: Path = Path("./data")
    resume_dir: Path = Path("./data/resumes")
    max_resume_size_mb: int = 10

    google_client_id: str = ""
    google_client_secret: str = ""
    google_callback_url: str = "http://localhost:8000/auth/google/callback"
    google_timeout_sec: int = 15
    frontend_url: str = "http://localhost:5173"

    cors_origins: str = "http://localhost:5173"
    default_columns: str = "Applied,Recruiter Call,OA,Phone Screen,Onsite,Offer"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def default_column_titles(self) -> list[str]:
        return [title.strip() for title in self.default_columns.split(",") if title.strip()]

    @property
    def google_oauth_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
