"""Settings read from the environment."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from resume_optimizer.models.state import Session


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("true", "1", "t", "y", "yes")


class Settings(BaseModel):
    """Runtime settings for the wizard server and CLI."""

    model_config = ConfigDict(frozen=True)

    api_base_url: str = "http://localhost:8000"
    api_timeout: float = 15.0
    poll_max_attempts: int = 15
    poll_interval: float = 2.0
    log_level: str = "info"
    log_dir: str = "logs"
    host: str = "0.0.0.0"
    port: int = 8080

    # Identity handed over by the host application's login
    user_email: str | None = None
    user_is_paid: bool = False

    @field_validator("api_base_url")
    @classmethod
    def base_url_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("api_base_url is required")
        return v.strip().rstrip("/")

    @field_validator("api_timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("api_timeout must be positive")
        return v

    @field_validator("poll_max_attempts")
    @classmethod
    def attempts_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("poll_max_attempts must be at least 1")
        return v

    @field_validator("poll_interval")
    @classmethod
    def interval_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("poll_interval must be non-negative")
        return v

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("debug", "info", "warning", "error"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values = {
            "api_base_url": env.get("RESUME_API_BASE_URL"),
            "api_timeout": env.get("RESUME_API_TIMEOUT"),
            "poll_max_attempts": env.get("POLL_MAX_ATTEMPTS"),
            "poll_interval": env.get("POLL_INTERVAL"),
            "log_level": env.get("LOG_LEVEL"),
            "log_dir": env.get("LOG_DIR"),
            "host": env.get("HOST"),
            "port": env.get("PORT"),
            "user_email": env.get("RESUME_USER_EMAIL"),
        }
        settings = {k: v for k, v in values.items() if v is not None}
        settings["user_is_paid"] = _parse_bool(env.get("RESUME_USER_PAID"), False)
        return cls.model_validate(settings)

    def session(self, has_existing_resume: bool = False) -> Session:
        """Session for the configured identity."""
        return Session(
            email=self.user_email,
            is_paid=self.user_is_paid,
            has_existing_resume=has_existing_resume,
        )
