"""Broker configuration with environment variable loading.

Pydantic-based configuration for the provider router and its shared state.
Provider endpoints, keys and model identifiers are injected from the
environment (or a .env file) rather than hard-coded.
"""

import os
import tempfile

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class BrokerConfig(BaseModel):
    """Configuration for the request broker.

    Attributes:
        gemini_api_key: API key for the image-capable (and fallback) provider.
        gemini_model: Gemini model identifier.
        gemini_base_url: Gemini REST API base URL.
        groq_api_key: API key for the primary text provider.
        groq_model: Groq model identifier.
        groq_base_url: Groq OpenAI-compatible API base URL.
        temperature: Sampling temperature for the primary text provider.
        history_limit: Maximum number of turns kept in a conversation buffer.
        rate_limit_interval_ms: Minimum gap between accepted requests (0 disables).
        provider_timeout: Timeout in seconds for every outbound provider call.
        session_scoped: Keep separate state per session instead of one shared state.
        max_sessions: Most per-session states kept at once when scoped.
        upload_dir: Directory for transient uploaded images.
        max_image_size: Maximum accepted image size in bytes.
    """

    gemini_api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", ""),
        description="API key for the Gemini provider",
    )
    gemini_model: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        description="Gemini model used for image and fallback requests",
    )
    gemini_base_url: str = Field(
        default_factory=lambda: os.getenv("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL),
        description="Gemini REST API base URL",
    )
    groq_api_key: str = Field(
        default_factory=lambda: os.getenv("GROQ_API_KEY", ""),
        description="API key for the Groq provider",
    )
    groq_model: str = Field(
        default_factory=lambda: os.getenv("GROQ_MODEL", "llama-3.1-8b-instant"),
        description="Groq model used for text requests",
    )
    groq_base_url: str = Field(
        default_factory=lambda: os.getenv("GROQ_BASE_URL", DEFAULT_GROQ_BASE_URL),
        description="Groq OpenAI-compatible API base URL",
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for the primary text provider",
    )
    history_limit: int = Field(
        default_factory=lambda: int(os.getenv("HISTORY_LIMIT", "6")),
        ge=1,
        description="Turns kept in the rolling conversation window",
    )
    rate_limit_interval_ms: int = Field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_INTERVAL_MS", "1200")),
        ge=0,
        description="Minimum interval between accepted requests in milliseconds",
    )
    provider_timeout: float = Field(
        default_factory=lambda: float(os.getenv("PROVIDER_TIMEOUT", "60")),
        gt=0.0,
        description="Timeout in seconds for outbound provider calls",
    )
    session_scoped: bool = Field(
        default_factory=lambda: _env_flag("SESSION_SCOPED"),
        description="Keep conversation and rate-limit state per session",
    )
    max_sessions: int = Field(
        default_factory=lambda: int(os.getenv("MAX_SESSIONS", "1000")),
        ge=1,
        description="Upper bound on per-session states kept in session-scoped mode",
    )
    upload_dir: str = Field(
        default_factory=lambda: os.getenv("UPLOAD_DIR") or tempfile.gettempdir(),
        description="Directory for transient uploaded images",
    )
    max_image_size: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Maximum accepted image size in bytes",
    )

    @field_validator("gemini_api_key")
    @classmethod
    def validate_gemini_api_key(cls, v: str) -> str:
        """Validate that the Gemini API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("GEMINI_API_KEY is required. Set it in .env")
        return v.strip()

    @field_validator("groq_api_key")
    @classmethod
    def validate_groq_api_key(cls, v: str) -> str:
        """Validate that the Groq API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("GROQ_API_KEY is required. Set it in .env")
        return v.strip()

    @field_validator("gemini_base_url", "groq_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def get_broker_config() -> BrokerConfig:
    """Create broker configuration from environment.

    Returns:
        Configured BrokerConfig instance.

    Raises:
        ValueError: If a provider API key is not set.
    """
    return BrokerConfig()
