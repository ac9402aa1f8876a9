from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "0.1.0"

WELL_KNOWN_PATH = "/.well-known/time"
DEFAULT_USER_AGENT = f"httpstime/{VERSION}"


class Settings(BaseSettings):
    """Run settings with environment variable support (HTTPSTIME_*)"""

    # Polling
    num_polls: int = Field(8, ge=1)
    max_round_retries: int = Field(3, ge=0)
    min_samples: int = Field(1, ge=1)
    missing_date_policy: Literal["skip", "abort"] = "skip"

    # HTTP
    well_known_path: str = WELL_KNOWN_PATH
    request_timeout: float = Field(5.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(env_prefix="HTTPSTIME_", env_file=".env", extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def get_settings(**overrides) -> Settings:
    """Load settings from the environment, applying non-None overrides."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
