# config.py
"""Runtime settings and logging setup.

Settings come from (lowest to highest priority) field defaults, environment
variables (a ``.env`` file is loaded first), and explicit overrides such as
command-line options.
"""

import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "MATHINTERP_"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    """Validated interpreter settings."""
    log_level: str = "WARNING"
    history_file: str = "~/.mathinterp_history"
    prompt: str = ">> "
    input_buffer_size: int = Field(512, ge=2, description="Line buffer size including the terminator")

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LEVEL_NAMES:
            raise ValueError(f"Unknown log level '{v}'; expected one of {', '.join(_LEVEL_NAMES)}")
        return level

    @field_validator('history_file')
    @classmethod
    def expand_history_file(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('History file cannot be empty')
        return os.path.expanduser(v.strip())

    @property
    def max_line_length(self) -> int:
        return self.input_buffer_size - 1


def load_settings(**overrides: Optional[Any]) -> Settings:
    """Build settings from the environment, then apply non-None overrides."""
    load_dotenv()
    values: Dict[str, Any] = {}
    for field in ('log_level', 'history_file', 'prompt'):
        env_value = os.getenv(ENV_PREFIX + field.upper())
        if env_value is not None:
            values[field] = env_value
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
    logging.getLogger("mathinterp").setLevel(level.upper())
