"""
Configuration management for the AI matching engine.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
DATA_DIR = ROOT_DIR / "data"


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    # Full connection string; takes precedence over host/port/credentials
    uri: Optional[SecretStr] = None
    host: str = "localhost"
    port: int = 27017
    name: str = "ai_matching"
    username: str | None = None
    password: Optional[SecretStr] = None
    timeout_ms: int = Field(5000, gt=0)
    max_pool_size: int = Field(50, ge=1)


class OpenAISettings(BaseSettings):
    """Generative model and embedding API configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: Optional[SecretStr] = None
    base_url: Optional[str] = None
    chat_model: str = "gpt-4o"
    embedding_model: str = "text-embedding-3-small"
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    timeout: float = 60.0
    max_retries: int = 2


class MLSettings(BaseSettings):
    """Local machine learning model configuration."""

    model_config = SettingsConfigDict(env_prefix="ML_")

    # Which backend produces embeddings for semantic scoring
    embedding_provider: Literal["openai", "sentence-transformers"] = "openai"
    local_embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Device settings
    device: Literal["cpu", "cuda", "mps", "auto"] = "auto"

    # Batch processing
    batch_size: int = 32

    @field_validator("device")
    @classmethod
    def validate_device(cls, v: str) -> str:
        """Auto-detect device if set to auto."""
        if v == "auto":
            try:
                import torch

                if torch.cuda.is_available():
                    return "cuda"
                elif torch.backends.mps.is_available():
                    return "mps"
            except ImportError:
                pass
            return "cpu"
        return v


class StorageSettings(BaseSettings):
    """Resume document store configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["local", "gridfs"] = "local"
    local_root: Path = DATA_DIR / "resumes"
    bucket: str = "resumes"


class ScoringSettings(BaseSettings):
    """Scoring pipeline and batch configuration."""

    model_config = SettingsConfigDict(env_prefix="SCORING_")

    resume_max_chars: int = Field(8000, gt=0)
    max_concurrency: int = Field(1, ge=1)
    poll_interval: float = Field(3.0, gt=0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "ai_matching.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "ai-matching"
    version: str = "0.1.0"
    description: str = "Candidate-to-job AI matching and scoring engine"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    ml: MLSettings = Field(default_factory=MLSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings
