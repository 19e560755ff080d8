"""Runtime configuration, read from the environment.

Set these as environment variables (or in a ``.env`` file):
    export GAME_VAULT_API_BASE="http://localhost:4000"
    export GAME_VAULT_DATA_DIR="~/.game_vault"
    export GAME_VAULT_TIMEOUT="30"
    export DISPLAY_LANGUAGE="fr"
    export LOG_LEVEL="INFO"
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_API_BASE = "http://localhost:4000"
DEFAULT_DATA_DIR = Path.home() / ".game_vault"
DEFAULT_TIMEOUT = 30.0

# Settings field -> environment variable
ENV_VARS = {
    "api_base": "GAME_VAULT_API_BASE",
    "data_dir": "GAME_VAULT_DATA_DIR",
    "timeout": "GAME_VAULT_TIMEOUT",
    "language": "DISPLAY_LANGUAGE",
    "log_level": "LOG_LEVEL",
}


class Settings(BaseModel):
    """Settings shared by the API clients, storage, logging and CLI."""

    api_base: str = DEFAULT_API_BASE
    data_dir: Path = DEFAULT_DATA_DIR
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    language: str = "en"
    log_level: str = "INFO"

    @field_validator("api_base", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("data_dir", mode="after")
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("log_level", mode="after")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults.

        Empty variables count as unset. Raises pydantic.ValidationError for
        values that do not parse, e.g. a non-numeric GAME_VAULT_TIMEOUT.
        """
        values = {field: os.environ[var] for field, var in ENV_VARS.items() if os.environ.get(var)}
        return cls(**values)
