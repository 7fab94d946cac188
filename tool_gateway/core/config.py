"""
Core configuration module for the AI Tool Gateway.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the TOOL_GATEWAY_ prefix.

Two settings classes live here:
- Settings: process configuration, loaded once and cached via get_settings().
- ToolsModeSettings: the AI tools mode switch. Not cached; the executor
  re-reads it on every call, so a changed environment variable takes effect
  without a restart.

Reference:
- GUIDELINES: Sinha pp. 193-195 - Pydantic BaseSettings pattern
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Hard ceiling imposed by the OpenAI function-calling API.
OPENAI_MAX_TOOLS = 128


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the TOOL_GATEWAY_ prefix for environment variables.
    Example: TOOL_GATEWAY_MAX_MANIFEST_TOOLS=64
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="tool-gateway",
        description="Name of the service for logging and identification",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port the service listens on",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins outside development",
    )

    # =========================================================================
    # Tool Catalog Configuration
    # =========================================================================
    max_manifest_tools: int = Field(
        default=OPENAI_MAX_TOOLS,
        ge=1,
        le=OPENAI_MAX_TOOLS,
        description="Maximum number of tools offered to the LLM per request",
    )
    tool_providers: list[str] = Field(
        default_factory=list,
        description=(
            "Import paths ('package.module:ClassName') of tool providers "
            "contributing to the catalog, in catalog order"
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="TOOL_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("tool_providers")
    @classmethod
    def validate_tool_providers(cls, v: list[str]) -> list[str]:
        """Provider paths must use the 'module:attribute' form."""
        for path in v:
            module, _, attribute = path.partition(":")
            if not module or not attribute:
                raise ValueError(
                    f"Tool provider path must look like 'package.module:Class': {path}"
                )
        return v


class ToolsModeSettings(BaseSettings):
    """
    The AI tools mode switch.

    Read from TOOL_GATEWAY_TOOLS_MODE, or the legacy AI_TOOLS_MODE variable.
    The raw string is kept as-is; ToolsMode.parse() maps anything unset or
    unrecognised to NONE.
    """

    tools_mode: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TOOL_GATEWAY_TOOLS_MODE", "AI_TOOLS_MODE"),
    )

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")


# =============================================================================
# Settings Singleton
# =============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()


def get_tools_mode_setting() -> str | None:
    """
    Read the raw tools mode from the environment.

    Not cached: every call builds a fresh ToolsModeSettings.

    Returns:
        The configured mode string, or None when unset.
    """
    return ToolsModeSettings().tools_mode
