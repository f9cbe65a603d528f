"""Configuration and settings for Assistant Studio.

Uses Pydantic Settings for fail-fast validation on startup.
All required environment variables are validated at import time.
"""

import logging
import sys
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("firebase_admin").setLevel(logging.WARNING)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Raises ValidationError on startup if required variables are missing.
    """

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Firebase Configuration (required for assistants and auth)
    # Can be either a JSON string or a file path to the credentials JSON
    firebase_credentials: str = Field(
        ..., description="Firebase service account JSON string or path to JSON file"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # Provider endpoints (override for proxies or local fakes)
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Google Gemini API base URL (without API version)",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com", description="OpenAI API base URL"
    )
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com", description="Anthropic API base URL"
    )

    # LLM Request Settings
    llm_timeout: float = Field(default=60.0, description="Total LLM call timeout (s)")
    llm_connect_timeout: float = Field(
        default=10.0, description="Connection timeout for LLM calls (s)"
    )

    # Gemini fallback matrix
    gemini_max_attempts: int = Field(
        default=3, description="Attempts per API version/model pair on 503"
    )
    gemini_retry_base_delay: float = Field(
        default=1.0, description="Base delay (s); attempt N waits N * base"
    )

    # Prompt Assembly Settings
    context_history_window: int = Field(
        default=10, description="Turns flattened into single-prompt providers"
    )

    # Knowledge Base Limits
    max_file_size_mb: int = Field(default=10, description="Max upload size in MB")
    max_files_per_upload: int = Field(
        default=20, description="Max files accepted by one extraction request"
    )

    # Conversation Settings
    max_conversations: int = Field(
        default=500, description="In-memory conversations kept before eviction"
    )

    @field_validator("firebase_credentials")
    @classmethod
    def validate_credentials_not_empty(cls, v: str, info) -> str:
        """Ensure credentials are not empty strings."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v.strip()

    @field_validator("gemini_base_url", "openai_base_url", "anthropic_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined with a leading slash."""
        return v.rstrip("/")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# CORS Configuration
CORS_CONFIG: dict[str, Any] = {
    "allow_origins": [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    "allow_credentials": True,
    "allow_methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    "allow_headers": ["*"],
    "expose_headers": ["*"],
    "max_age": 600,
}

# FastAPI App Configuration
APP_CONFIG: dict[str, Any] = {
    "title": "Assistant Studio",
    "description": (
        "Configure assistants backed by Gemini, OpenAI or Claude, attach a "
        "knowledge base of uploaded documents, and chat with them."
    ),
    "version": "0.1.0",
    "docs_url": "/api/docs",
    "redoc_url": "/api/redoc",
    "openapi_url": "/api/openapi.json",
    "openapi_tags": [
        {
            "name": "Health",
            "description": "Health check and service status",
        },
        {
            "name": "Providers",
            "description": "Language model catalog and connectivity tests",
        },
        {
            "name": "Assistants",
            "description": "Assistant configuration management",
        },
        {
            "name": "Knowledge",
            "description": "Knowledge base document extraction",
        },
        {
            "name": "Conversations",
            "description": "Chat with a configured assistant",
        },
    ],
}


def get_app_config() -> dict[str, Any]:
    """Get FastAPI application configuration."""
    return APP_CONFIG.copy()


def get_cors_config() -> dict[str, Any]:
    """Get CORS middleware configuration."""
    return CORS_CONFIG.copy()
