"""
Configuration management for rediskit.
Handles environment variables and Redis connection settings.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from rediskit.core.exceptions import ConfigurationError

DEFAULT_PING_TIMEOUT = 30.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    ENVIRONMENT: str = "development"

    # Redis
    REDIS_ADDR: str = "localhost:6379"
    REDIS_USER: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0
    REDIS_PING_TIMEOUT: float = DEFAULT_PING_TIMEOUT
    REDIS_TRACE_NAME: str = "rediskit"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of {allowed_envs}")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format setting."""
        allowed_formats = ["json", "console"]
        if v not in allowed_formats:
            raise ValueError(f"Log format must be one of {allowed_formats}")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


class ConnectConfig(BaseModel):
    """Parameters for connecting to Redis."""

    addr: str = Field("localhost:6379", description="Redis address as host:port")
    user: Optional[str] = Field(None, description="ACL username")
    password: Optional[str] = Field(None, description="Password")
    db: int = Field(0, ge=0, description="Database index")
    ping_timeout: float = Field(
        DEFAULT_PING_TIMEOUT,
        gt=0,
        description="Seconds allowed for the connectivity probe",
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectConfig":
        """Build connection parameters from application settings."""
        return cls(
            addr=settings.REDIS_ADDR,
            user=settings.REDIS_USER,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            ping_timeout=settings.REDIS_PING_TIMEOUT,
        )

    def host_port(self) -> Tuple[str, int]:
        """
        Split ``addr`` into host and port.

        Returns:
            Tuple[str, int]: Host and port

        Raises:
            ConfigurationError: If the address is malformed
        """
        host, sep, port = self.addr.rpartition(":")
        if not sep:
            return self.addr, 6379
        if not host or not port.isdigit():
            raise ConfigurationError(
                f"Invalid Redis address: {self.addr}", {"addr": self.addr}
            )
        return host, int(port)


# Create global settings instance
settings = Settings()
