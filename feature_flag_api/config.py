"""
Configuration management for the Feature Flag API
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Server configuration"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8080


class StorageConfig(BaseSettings):
    """Feature flag store configuration"""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", env_file=".env", extra="ignore")

    backend: str = "sqlite"  # sqlite or memory
    path: str = "features.db"
    bucket: str = "features"
    timeout: float = 1.0  # seconds to wait for the store lock

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v):
        allowed = ["sqlite", "memory"]
        if v.lower() not in allowed:
            raise ValueError(f"Storage backend must be one of {allowed}")
        return v.lower()


class LoggingConfig(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = "INFO"
    format: str = "json"
    access_log: bool = True
    file: Optional[str] = None


class TracingConfig(BaseSettings):
    """Distributed tracing configuration"""

    model_config = SettingsConfigDict(env_prefix="TRACING_", env_file=".env", extra="ignore")

    enabled: bool = False
    service_name: str = "feature-flag-api"
    otlp_endpoint: str = "http://localhost:4318/v1/traces"


class MetricsConfig(BaseSettings):
    """Metrics configuration"""

    model_config = SettingsConfigDict(env_prefix="METRICS_", env_file=".env", extra="ignore")

    enabled: bool = True


class Settings(BaseSettings):
    """Main application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = "development"
    debug: bool = False

    # Component configurations
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tracing: TracingConfig = Field(default_factory=TracingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "staging", "production", "test"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v

    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"
