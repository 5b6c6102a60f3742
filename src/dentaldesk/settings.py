from pathlib import Path

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dentaldesk.exceptions import ConfigurationError
from dentaldesk.storage.abc import DEFAULT_QUOTA_BYTES


class Settings(BaseSettings):
    dentaldesk_storage_path: Path = Path("~/.dentaldesk/storage.json")
    dentaldesk_storage_quota_bytes: int = DEFAULT_QUOTA_BYTES
    dentaldesk_failure_rate: float = 0.05
    dentaldesk_time_scale: float = 1.0
    dentaldesk_log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_file=(
            Path("~/.dentaldesk/env").expanduser(),
            ".env",
        ),
        extra="ignore",
    )

    @field_validator("dentaldesk_failure_rate")
    @classmethod
    def check_failure_rate(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("failure rate must be between 0 and 1")
        return value

    @field_validator("dentaldesk_time_scale")
    @classmethod
    def check_time_scale(cls, value: float) -> float:
        if value < 0:
            raise ValueError("time scale must not be negative")
        return value

    @field_validator("dentaldesk_storage_quota_bytes")
    @classmethod
    def check_quota(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("storage quota must be positive")
        return value

    @property
    def storage_path(self) -> Path:
        return self.dentaldesk_storage_path.expanduser()


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, raising ConfigurationError on bad values."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


SETTINGS = load_settings()
