"""Provisioner settings with pydantic-settings.

Values come from explicit arguments, environment variables, or a `.env` file
in the working directory (in that order of precedence).

Usage:
    from nanda_provisioner.config import get_settings

    settings = get_settings()
    settings.registry_url
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REGISTRY_URL = "https://chat.nanda-registry.com:6900"
DEFAULT_SMITHERY_API_KEY = "b4e92d35-0034-43f0-beff-042466777ada"


class Settings(BaseSettings):
    """Provisioner settings.

    Provisioning inputs (API keys, domain) are optional here; the CLI decides
    whether a missing value is fatal.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Provisioning inputs ===

    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key passed to the agent",
    )
    smithery_api_key: str = Field(
        default="",
        description="Smithery API key for MCP connections",
    )
    domain: str = Field(
        default="",
        description="Complete domain name of the host (e.g. myapp.example.com)",
    )
    agent_id: int = Field(
        default=0,
        ge=0,
        description="Agent ID prefix; 0 generates a random 6-digit ID",
    )
    num_agents: int = Field(
        default=1,
        ge=1,
        description="Number of agents to run on the host",
    )
    registry_url: str = Field(
        default=DEFAULT_REGISTRY_URL,
        description="URL of the NANDA registry",
    )
    verbose: bool = Field(
        default=False,
        description="Run ansible-playbook with -vvv",
    )

    # === Runtime tuning ===

    playbook_path: str | None = Field(
        default=None,
        description="Explicit playbook path, checked before the built-in candidates",
    )
    ansible_executable: str = Field(
        default="ansible-playbook",
        description="ansible-playbook executable, resolved from PATH",
    )
    provisioning_timeout: int = Field(
        default=1200,
        ge=1,
        description="Max seconds to wait for ansible-playbook",
    )
    ip_lookup_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Per-request timeout for public IP lookups, in seconds",
    )

    # === Logging ===

    service_name: str = Field(
        default="nanda-provisioner",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v


@lru_cache
def get_settings() -> Settings:
    return Settings()
