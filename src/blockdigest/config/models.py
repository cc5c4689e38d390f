"""Pydantic models describing blockdigest configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blockdigest.metadata.hash import DEFAULT_CHUNK_SIZE, HashFunc


class HashingConfig(BaseModel):
    """Hash function and read granularity used when hashing block files."""

    model_config = ConfigDict(extra="allow")

    hash_func: HashFunc = HashFunc.SHA256
    chunk_size_bytes: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)

    @field_validator("hash_func", mode="before")
    @classmethod
    def _normalize_hash_func(cls, value: object) -> object:
        """Accept ``sha256``/``none`` spellings alongside the stored values."""

        if value is None:
            return HashFunc.NONE
        if isinstance(value, str) and not isinstance(value, HashFunc):
            if value.strip().lower() == "none":
                return HashFunc.NONE
            return value.strip().upper()
        return value


class LoggingConfig(BaseModel):
    """Logging level and optional log file."""

    model_config = ConfigDict(extra="allow")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_path: Optional[Path] = None


class RuntimeConfig(BaseModel):
    """Execution-time settings such as the workspace root."""

    model_config = ConfigDict(extra="allow")

    storage_root: Path = Path("./data")
    fail_fast: bool = False


class BlockDigestConfig(BaseModel):
    """Root configuration object."""

    model_config = ConfigDict(extra="allow")

    hashing: HashingConfig = Field(default_factory=HashingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


__all__ = [
    "BlockDigestConfig",
    "HashingConfig",
    "LoggingConfig",
    "RuntimeConfig",
]
