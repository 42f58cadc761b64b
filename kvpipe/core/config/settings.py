#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe configuration for the client. Two layers:

- ``PoolConfig``: immutable value object describing one pool (dial options
  and pool shape). Built in code or from ``Settings``.
- ``Settings``: environment-based loader (``KVPIPE_*`` variables, ``.env``
  support) that produces a ``PoolConfig`` and the logging configuration.

Architectural Decision: Pydantic for type safety and validation
- Type validation at construction (fail fast on misconfiguration)
- Zero/None values replaced by documented defaults in one place
- Easy testing: every pool takes an explicit PoolConfig
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kvpipe.core.config.constants import (
    DEFAULT_ADDRESS,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEALTH_CHECK_MARGIN,
    DEFAULT_IDLE_TIMEOUT,
    DEFAULT_KEEP_ALIVE,
    DEFAULT_MAX_ACTIVE,
    DEFAULT_MAX_CONN_LIFETIME,
    DEFAULT_MAX_IDLE,
    DEFAULT_NETWORK,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_WRITE_TIMEOUT,
)

# Zero means "use the default" for these fields
_DEFAULT_WHEN_ZERO = {
    "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
    "read_timeout": DEFAULT_READ_TIMEOUT,
    "write_timeout": DEFAULT_WRITE_TIMEOUT,
    "max_idle": DEFAULT_MAX_IDLE,
    "max_active": DEFAULT_MAX_ACTIVE,
}

# Zero means "disabled" for these fields; only None falls back to the default
_DEFAULT_WHEN_NONE = {
    "keep_alive": DEFAULT_KEEP_ALIVE,
    "idle_timeout": DEFAULT_IDLE_TIMEOUT,
    "max_conn_lifetime": DEFAULT_MAX_CONN_LIFETIME,
}


class PoolConfig(BaseModel):
    """
    Immutable pool configuration.

    Dial options:
        network, address, username, password, db,
        connect_timeout, read_timeout, write_timeout, keep_alive

    Pool options:
        max_idle, max_active, idle_timeout, max_conn_lifetime, wait,
        health_check_margin

    All durations are seconds. A zero ``keep_alive`` makes every borrow dial
    a fresh connection; a zero ``idle_timeout`` / ``max_conn_lifetime``
    disables that eviction rule.
    """

    model_config = ConfigDict(frozen=True)

    # ---------------------------------------- dial options
    network: Literal["tcp", "unix"] = Field(default=DEFAULT_NETWORK, description="tcp or unix socket")
    address: str = Field(default=DEFAULT_ADDRESS, description="host:port, or socket path for unix")
    username: str | None = Field(default=None, description="ACL username (optional)")
    password: str | None = Field(default=None, description="Credential sent with AUTH")
    db: int = Field(default=0, ge=0, description="Database index selected on connect")
    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, ge=0)
    read_timeout: float = Field(default=DEFAULT_READ_TIMEOUT, ge=0)
    write_timeout: float = Field(default=DEFAULT_WRITE_TIMEOUT, ge=0)
    keep_alive: float = Field(default=DEFAULT_KEEP_ALIVE, ge=0)

    # ---------------------------------------- pool options
    max_idle: int = Field(default=DEFAULT_MAX_IDLE, ge=0)
    max_active: int = Field(default=DEFAULT_MAX_ACTIVE, ge=0)
    idle_timeout: float = Field(default=DEFAULT_IDLE_TIMEOUT, ge=0)
    max_conn_lifetime: float = Field(default=DEFAULT_MAX_CONN_LIFETIME, ge=0)
    wait: bool = Field(default=True, description="Block in acquire() when at max_active")
    health_check_margin: float = Field(
        default=DEFAULT_HEALTH_CHECK_MARGIN,
        ge=0,
        description="Idle connections younger than keep_alive minus this margin skip the PING probe"
    )

    @field_validator("connect_timeout", "read_timeout", "write_timeout", "max_idle", "max_active", mode="before")
    @classmethod
    def default_when_zero(cls, value, info: ValidationInfo):
        """Replace None/0 with the documented default."""
        if value is None or value == 0:
            return _DEFAULT_WHEN_ZERO[info.field_name]
        return value

    @field_validator("keep_alive", "idle_timeout", "max_conn_lifetime", mode="before")
    @classmethod
    def default_when_none(cls, value, info: ValidationInfo):
        """Replace None with the documented default; 0 stays 0 (disabled)."""
        if value is None:
            return _DEFAULT_WHEN_NONE[info.field_name]
        return value

    @field_validator("address")
    @classmethod
    def validate_address(cls, v):
        """Reject empty addresses."""
        if not v or not v.strip():
            raise ValueError("address must not be empty")
        return v.strip()

    @property
    def host_port(self) -> tuple[str, int]:
        """Split a tcp address into (host, port), accepting ``[::1]:6379`` style IPv6."""
        host, sep, port = self.address.rpartition(":")
        if not sep or "]" in port:
            host, port = self.address, str(DEFAULT_PORT)
        host = host.strip("[]")
        try:
            return host, int(port)
        except ValueError as e:
            raise ValueError(f"Invalid port in address {self.address!r}") from e


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Environment-based settings.

    Usage:
        from kvpipe.core.config.settings import get_settings

        settings = get_settings()
        pool_config = settings.pool
        address = settings.KVPIPE_ADDRESS

    Unset numeric values keep the PoolConfig defaults.
    """

    # Dial settings
    KVPIPE_NETWORK: Literal["tcp", "unix"] = Field(default=DEFAULT_NETWORK, description="tcp or unix")
    KVPIPE_ADDRESS: str = Field(default=DEFAULT_ADDRESS, description="Store address")
    KVPIPE_USERNAME: str | None = Field(default=None, description="ACL username (optional)")
    KVPIPE_PASSWORD: str | None = Field(default=None, description="Store password (if required)")
    KVPIPE_DB: int = Field(default=0, description="Database number")
    KVPIPE_CONNECT_TIMEOUT: float | None = Field(default=None, description="Connect timeout in seconds")
    KVPIPE_READ_TIMEOUT: float | None = Field(default=None, description="Read timeout in seconds")
    KVPIPE_WRITE_TIMEOUT: float | None = Field(default=None, description="Write timeout in seconds")
    KVPIPE_KEEP_ALIVE: float | None = Field(default=None, description="Keep-alive in seconds, 0 disables reuse")

    # Pool settings
    KVPIPE_MAX_IDLE: int | None = Field(default=None, description="Maximum idle connections")
    KVPIPE_MAX_ACTIVE: int | None = Field(default=None, description="Maximum borrowed connections")
    KVPIPE_IDLE_TIMEOUT: float | None = Field(default=None, description="Idle eviction in seconds, 0 disables")
    KVPIPE_MAX_CONN_LIFETIME: float | None = Field(default=None, description="Max connection age, 0 disables")
    KVPIPE_WAIT: bool = Field(default=True, description="Block when the pool is at capacity")
    KVPIPE_HEALTH_CHECK_MARGIN: float = Field(
        default=DEFAULT_HEALTH_CHECK_MARGIN,
        description="Seconds before keep-alive expiry at which idle connections get probed"
    )

    # Logging settings
    KVPIPE_LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    KVPIPE_LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("KVPIPE_LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"KVPIPE_LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @property
    def pool(self) -> PoolConfig:
        """Get the pool configuration."""
        return PoolConfig(
            network=self.KVPIPE_NETWORK,
            address=self.KVPIPE_ADDRESS,
            username=self.KVPIPE_USERNAME,
            password=self.KVPIPE_PASSWORD,
            db=self.KVPIPE_DB,
            connect_timeout=self.KVPIPE_CONNECT_TIMEOUT,
            read_timeout=self.KVPIPE_READ_TIMEOUT,
            write_timeout=self.KVPIPE_WRITE_TIMEOUT,
            keep_alive=self.KVPIPE_KEEP_ALIVE,
            max_idle=self.KVPIPE_MAX_IDLE,
            max_active=self.KVPIPE_MAX_ACTIVE,
            idle_timeout=self.KVPIPE_IDLE_TIMEOUT,
            max_conn_lifetime=self.KVPIPE_MAX_CONN_LIFETIME,
            wait=self.KVPIPE_WAIT,
            health_check_margin=self.KVPIPE_HEALTH_CHECK_MARGIN,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.KVPIPE_LOG_LEVEL,
            LOG_FORMAT=self.KVPIPE_LOG_FORMAT
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (the pool itself is never global)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings: Lazily created settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
