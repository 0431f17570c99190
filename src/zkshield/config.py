"""Runtime configuration and logging setup."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


NoteCipherSuite = Literal["hash-stream", "chacha20-poly1305"]


class ShieldSettings(BaseSettings):
    """
    Settings read from ZKSHIELD_* environment variables or a local .env file.

    Example:
        ZKSHIELD_LOG_LEVEL=DEBUG
        ZKSHIELD_NOTE_CIPHER=chacha20-poly1305
        ZKSHIELD_POSEIDON_WIDTHS=[3,4,5,6,13]
        ZKSHIELD_POSEIDON_PARAMS_CACHE=/var/cache/zkshield/poseidon.json
    """

    model_config = SettingsConfigDict(
        env_prefix="ZKSHIELD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Logging level name")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="logging.Formatter format string",
    )
    note_cipher: NoteCipherSuite = Field(
        default="hash-stream",
        description="Default suite used by encrypt_note",
    )
    poseidon_widths: List[int] = Field(
        default_factory=lambda: [3, 4, 5, 6, 13],
        description="Permutation widths prepared during setup",
    )
    poseidon_params_cache: Optional[Path] = Field(
        default=None,
        description="JSON file the generated Poseidon parameters are loaded from / stored to",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("poseidon_widths")
    @classmethod
    def _check_widths(cls, value: List[int]) -> List[int]:
        for width in value:
            if not 2 <= width <= 17:
                raise ValueError(f"Poseidon width {width} outside 2..17")
        return value


@lru_cache()
def get_settings() -> ShieldSettings:
    """Cached settings instance."""
    return ShieldSettings()


def configure_logging(settings: Optional[ShieldSettings] = None) -> None:
    """Apply the configured format to the root logger and the level to the zkshield loggers."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    logging.getLogger("zkshield").setLevel(settings.log_level)
