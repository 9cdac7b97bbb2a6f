"""Agent configuration with environment variable loading.

Pydantic-based configuration for the summary and Q&A agents.
Supports OpenAI, OpenAI-compatible APIs via custom base URL, and Gemini.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.5-flash",
}


def _env_api_key() -> str:
    return (
        os.getenv("LLM_API_KEY")
        or os.getenv("OPENAI_API_KEY")
        or os.getenv("GOOGLE_API_KEY")
        or ""
    )


class AgentConfig(BaseModel):
    """Configuration for the document analysis agents.

    Attributes:
        provider: LLM backend, ``openai`` or ``gemini``.
        api_key: API key for model access.
        base_url: API base URL (None for the provider default).
        model_name: Model identifier; defaults per provider when unset.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
    """

    model_config = ConfigDict(validate_default=True)

    provider: Literal["openai", "gemini"] = Field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "openai").strip().lower(),
        description="LLM provider backing the agents",
    )
    api_key: str = Field(
        default_factory=_env_api_key,
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for provider default)",
    )
    model_name: str | None = Field(
        default_factory=lambda: os.getenv("LLM_MODEL") or None,
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=2048,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY (or OPENAI_API_KEY / GOOGLE_API_KEY) in .env"
            )
        return v.strip()

    @model_validator(mode="after")
    def default_model_name(self) -> "AgentConfig":
        """Pick the provider's default model when none is configured."""
        if not self.model_name:
            self.model_name = DEFAULT_MODELS[self.provider]
        return self


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
