"""
Configuration Schema and Models

Defines Pydantic models for the configuration schema, providing validation,
default values, and type checking for all configuration options.

Author: TwinSync Project
License: MIT
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, validator

from ..utils.file_ops import is_supported_algorithm


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    TEXT = "text"
    JSON = "json"


class AppConfig(BaseModel):
    """Application and logging configuration."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application logging level"
    )
    log_format: LogFormat = Field(
        default=LogFormat.TEXT,
        description="Log output format (text or json)"
    )
    log_file_path: Optional[str] = Field(
        default=None,
        description="Path to the log file (required when log_to_file is set)"
    )
    log_to_file: bool = Field(
        default=False,
        description="Enable logging to file"
    )
    log_rotation_size: int = Field(
        default=10485760,  # 10MB
        description="Log file size before rotation (bytes)"
    )
    log_retention_count: int = Field(
        default=5,
        description="Number of rotated log files to keep"
    )

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @validator("log_level", pre=True)
    def normalize_log_level(cls, v):
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper()
        return v

    @validator("log_format", pre=True)
    def normalize_log_format(cls, v):
        """Accept log formats in any case."""
        if isinstance(v, str):
            return v.lower()
        return v

    @validator("log_to_file")
    def validate_log_file(cls, v, values):
        """Require a log file path when file logging is enabled."""
        if v and not values.get("log_file_path"):
            raise ValueError("log_file_path is required when log_to_file is enabled")
        return v


class SyncConfig(BaseModel):
    """Pair synchronization configuration."""

    debounce_ms: int = Field(
        default=500,
        description="Window over which filesystem events are coalesced (milliseconds)"
    )
    hash_algorithm: str = Field(
        default="crc32",
        description="Fingerprint algorithm (crc32 or any hashlib algorithm)"
    )
    chunk_size: int = Field(
        default=8192,
        description="Read chunk size when fingerprinting (bytes)"
    )
    sniff_bytes: int = Field(
        default=1024,
        description="Bytes inspected when classifying a file as text"
    )
    poll_interval_ms: int = Field(
        default=100,
        description="How often debounced events are collected (milliseconds)"
    )

    @validator("debounce_ms", "chunk_size", "sniff_bytes", "poll_interval_ms")
    def validate_positive(cls, v):
        """Ensure sizes and intervals are positive."""
        if v <= 0:
            raise ValueError(f"Value must be positive: {v}")
        return v

    @validator("hash_algorithm")
    def validate_hash_algorithm(cls, v):
        """Ensure the fingerprint algorithm is available."""
        v = v.lower()
        if not is_supported_algorithm(v):
            raise ValueError(f"Unsupported hash algorithm: {v}")
        return v


class Config(BaseModel):
    """
    Root configuration model for TwinSync.

    Loaded from an optional YAML file, overridden by environment variables
    and finally by command-line options.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        validate_assignment = True
