"""
Configuration for the Patient Document Pipeline

This module defines the configuration dataclass used to initialize the
patient document pipeline. Configuration is:
    1. Loaded from environment variables (with .env support)
    2. Validated at startup to fail fast on misconfiguration
    3. Limited to deployment concerns: sampling temperature, output token
       bounds and the attempt limit are constants, not settings

Configuration Hierarchy:
    PipelineConfiguration (main config)
    ├── LLM Settings (provider, API keys, model names, timeout, rate limit)
    ├── Input Settings (maximum technical note length)
    ├── Safety Settings (emergency number)
    └── Logging Settings (level)

Usage:
    from patient_document_generation.core.config import PipelineConfiguration

    # Load from environment
    config = PipelineConfiguration.from_environment()

    # Or configure programmatically
    config = PipelineConfiguration(gemini_api_key="your-key")

Author: Shubham Singh
Date: October 2026
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from patient_document_generation.core.constants import (
    DEFAULT_EMERGENCY_NUMBER,
    DEFAULT_MAX_NOTE_LENGTH,
)
from patient_document_generation.core.exceptions import ConfigurationError


# =============================================================================
# STAGE 1: DEFAULT VALUES
# =============================================================================


class ConfigDefaults:
    """Default configuration values."""

    # -------------------------------------------------------------------------
    # 1.1 LLM Provider Defaults
    # -------------------------------------------------------------------------
    DEFAULT_PROVIDER = "gemini"
    DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
    DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
    DEFAULT_REQUEST_TIMEOUT = 90.0  # seconds
    DEFAULT_RATE_LIMIT_DELAY = 0.5  # seconds between API calls

    # -------------------------------------------------------------------------
    # 1.2 Input / Safety Defaults
    # -------------------------------------------------------------------------
    DEFAULT_MAX_NOTE_LENGTH = DEFAULT_MAX_NOTE_LENGTH
    DEFAULT_EMERGENCY_NUMBER = DEFAULT_EMERGENCY_NUMBER

    # -------------------------------------------------------------------------
    # 1.3 Logging Defaults
    # -------------------------------------------------------------------------
    DEFAULT_LOG_LEVEL = "INFO"


SUPPORTED_PROVIDERS = ("gemini", "openai")


# =============================================================================
# STAGE 2: CONFIGURATION DATACLASS
# =============================================================================


@dataclass
class PipelineConfiguration:
    """
    Configuration for the patient document pipeline.

    What it does:
        Encapsulates every deployment parameter needed to initialize the
        pipeline: which backend to call, how long to wait for it, and the
        input and safety limits applied around it.

    Why it exists:
        1. Single source of truth for all configuration
        2. Validated at startup to fail fast on errors
        3. Supports both environment and programmatic configuration

    Example:
        >>> config = PipelineConfiguration.from_environment()
        >>> print(config.gemini_model)
        'gemini-2.5-flash'
    """

    # -------------------------------------------------------------------------
    # 2.1 LLM Provider Configuration
    # -------------------------------------------------------------------------
    llm_provider: str = ConfigDefaults.DEFAULT_PROVIDER
    """Which LLM provider to use: 'gemini' or 'openai'."""

    gemini_api_key: Optional[str] = None
    """Google Gemini API key. Required if using Gemini provider."""

    gemini_model: str = ConfigDefaults.DEFAULT_GEMINI_MODEL

    openai_api_key: Optional[str] = None
    """OpenAI (or OpenAI-compatible gateway) API key."""

    openai_model: str = ConfigDefaults.DEFAULT_OPENAI_MODEL

    openai_base_url: Optional[str] = None
    """Base URL of an OpenAI-compatible gateway. None uses api.openai.com."""

    request_timeout: float = ConfigDefaults.DEFAULT_REQUEST_TIMEOUT
    """Per-call timeout in seconds. A timeout surfaces as UpstreamUnavailableError."""

    rate_limit_delay: float = ConfigDefaults.DEFAULT_RATE_LIMIT_DELAY

    # -------------------------------------------------------------------------
    # 2.2 Input and Safety Configuration
    # -------------------------------------------------------------------------
    max_note_length: int = ConfigDefaults.DEFAULT_MAX_NOTE_LENGTH
    """Technical notes longer than this are rejected before generation."""

    emergency_number: str = ConfigDefaults.DEFAULT_EMERGENCY_NUMBER
    """Local emergency number required in the warning-signs section."""

    # -------------------------------------------------------------------------
    # 2.3 Logging Configuration
    # -------------------------------------------------------------------------
    log_level: str = ConfigDefaults.DEFAULT_LOG_LEVEL

    # -------------------------------------------------------------------------
    # 2.4 Validation Methods
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Checks:
            1. Provider is supported and its API key is configured
            2. Numeric parameters are in valid ranges
            3. Emergency number is a non-empty digit string

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.llm_provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported LLM provider: {self.llm_provider}",
                context={"supported": list(SUPPORTED_PROVIDERS)},
            )

        if self.llm_provider == "gemini" and not self.gemini_api_key:
            raise ConfigurationError(
                "Gemini API key required when using Gemini provider",
                context={"setting": "GEMINI_API_KEY", "provider": "gemini"},
            )

        if self.llm_provider == "openai" and not self.openai_api_key:
            raise ConfigurationError(
                "OpenAI API key required when using OpenAI provider",
                context={"setting": "OPENAI_API_KEY", "provider": "openai"},
            )

        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"Request timeout must be positive, got {self.request_timeout}",
                context={"setting": "REQUEST_TIMEOUT"},
            )

        if self.rate_limit_delay < 0:
            raise ConfigurationError(
                f"Rate limit delay cannot be negative, got {self.rate_limit_delay}",
                context={"setting": "RATE_LIMIT_DELAY"},
            )

        if self.max_note_length <= 0:
            raise ConfigurationError(
                f"Maximum note length must be positive, got {self.max_note_length}",
                context={"setting": "MAX_NOTE_LENGTH"},
            )

        if not self.emergency_number or not self.emergency_number.isdigit():
            raise ConfigurationError(
                f"Emergency number must be digits only, got {self.emergency_number!r}",
                context={"setting": "EMERGENCY_NUMBER"},
            )

    # -------------------------------------------------------------------------
    # 2.5 Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_environment(
        cls, env_file: Optional[str] = None, validate_on_load: bool = True
    ) -> "PipelineConfiguration":
        """
        Load configuration from environment variables.

        STAGE 1: Load .env file (if specified or found)
        STAGE 2: Read environment variables
        STAGE 3: Convert to typed configuration
        STAGE 4: Validate configuration (optional)

        Args:
            env_file: Path to .env file (optional, auto-detected if not provided)
            validate_on_load: Whether to validate after loading

        Returns:
            Configured PipelineConfiguration instance

        Raises:
            ConfigurationError: If required settings are missing or invalid
        """
        # STAGE 1: Load .env file
        if env_file:
            load_dotenv(env_file)
        else:
            possible_locations = [
                Path.cwd() / ".env",
                Path(__file__).parent.parent.parent / ".env",
            ]
            for location in possible_locations:
                if location.exists():
                    load_dotenv(location)
                    break

        # STAGE 2: Read environment variables
        gemini_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        openai_key = os.getenv("OPENAI_API_KEY")

        llm_provider = os.getenv("LLM_PROVIDER", ConfigDefaults.DEFAULT_PROVIDER).lower()
        if not gemini_key and openai_key and "LLM_PROVIDER" not in os.environ:
            llm_provider = "openai"

        # STAGE 3: Create configuration
        try:
            config = cls(
                llm_provider=llm_provider,
                gemini_api_key=gemini_key,
                gemini_model=os.getenv("GEMINI_MODEL", ConfigDefaults.DEFAULT_GEMINI_MODEL),
                openai_api_key=openai_key,
                openai_model=os.getenv("OPENAI_MODEL", ConfigDefaults.DEFAULT_OPENAI_MODEL),
                openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
                request_timeout=float(
                    os.getenv("REQUEST_TIMEOUT", ConfigDefaults.DEFAULT_REQUEST_TIMEOUT)
                ),
                rate_limit_delay=float(
                    os.getenv("RATE_LIMIT_DELAY", ConfigDefaults.DEFAULT_RATE_LIMIT_DELAY)
                ),
                max_note_length=int(
                    os.getenv("MAX_NOTE_LENGTH", ConfigDefaults.DEFAULT_MAX_NOTE_LENGTH)
                ),
                emergency_number=os.getenv(
                    "EMERGENCY_NUMBER", ConfigDefaults.DEFAULT_EMERGENCY_NUMBER
                ).strip(),
                log_level=os.getenv("LOG_LEVEL", ConfigDefaults.DEFAULT_LOG_LEVEL).upper(),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        # STAGE 4: Validate
        if validate_on_load:
            config.validate()

        return config

    @property
    def active_model(self) -> str:
        """Model name of the selected provider."""
        return self.gemini_model if self.llm_provider == "gemini" else self.openai_model

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (for logging/debugging)."""
        return {
            "llm_provider": self.llm_provider,
            "gemini_model": self.gemini_model,
            "openai_model": self.openai_model,
            "openai_base_url": self.openai_base_url,
            "gemini_api_key": "***" if self.gemini_api_key else None,
            "openai_api_key": "***" if self.openai_api_key else None,
            "request_timeout": self.request_timeout,
            "rate_limit_delay": self.rate_limit_delay,
            "max_note_length": self.max_note_length,
            "emergency_number": self.emergency_number,
            "log_level": self.log_level,
        }
