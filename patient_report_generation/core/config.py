"""
Configuration for the Patient Document Pipeline

This module defines the configuration dataclass used to initialize the
pipeline. Configuration is:
    1. Loaded from environment variables (with .env support)
    2. Validated at startup to fail fast on misconfiguration

Configuration Hierarchy:
    PipelineConfiguration
    ├── LLM Settings (provider, API keys, model names, rate limits)
    ├── Data Settings (seed dataset path)
    └── Output Settings (directory for saved documents)

Usage:
    from patient_report_generation.core.config import PipelineConfiguration

    config = PipelineConfiguration.from_environment()

Author: Shubham Singh
Date: January 2026
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from patient_report_generation.core.exceptions import ConfigurationError


# =============================================================================
# STAGE 1: DEFAULT VALUES
# =============================================================================


class ConfigDefaults:
    """Default configuration values."""

    # -------------------------------------------------------------------------
    # 1.1 LLM Provider Defaults
    # -------------------------------------------------------------------------
    DEFAULT_LLM_PROVIDER = "gemini"
    DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
    DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
    DEFAULT_RATE_LIMIT_DELAY = 0.5  # seconds between API calls
    DEFAULT_MAX_RETRIES = 3

    # -------------------------------------------------------------------------
    # 1.2 Output Defaults
    # -------------------------------------------------------------------------
    DEFAULT_OUTPUT_DIR = "generated_patient_documents"

    SUPPORTED_PROVIDERS = ("gemini", "openai")


# =============================================================================
# STAGE 2: CONFIGURATION DATACLASS
# =============================================================================


@dataclass
class PipelineConfiguration:
    """
    Configuration for the patient document pipeline.

    Example:
        >>> config = PipelineConfiguration(gemini_api_key="key")
        >>> config.validate()
        >>> config.active_model
        'gemini-1.5-flash'
    """

    # -------------------------------------------------------------------------
    # 2.1 LLM Provider Configuration
    # -------------------------------------------------------------------------
    llm_provider: str = ConfigDefaults.DEFAULT_LLM_PROVIDER
    """Which LLM provider to use: 'gemini' or 'openai'."""

    gemini_api_key: Optional[str] = None
    gemini_model: str = ConfigDefaults.DEFAULT_GEMINI_MODEL

    openai_api_key: Optional[str] = None
    openai_model: str = ConfigDefaults.DEFAULT_OPENAI_MODEL

    rate_limit_delay: float = ConfigDefaults.DEFAULT_RATE_LIMIT_DELAY
    """Delay between API calls in seconds (rate limiting)."""

    max_retries: int = ConfigDefaults.DEFAULT_MAX_RETRIES
    """Retry attempts inside the LLM client. The pipeline itself never retries."""

    # -------------------------------------------------------------------------
    # 2.2 Data Configuration
    # -------------------------------------------------------------------------
    patient_dataset_path: Optional[str] = None
    """JSON file used to seed the in-memory patient repository."""

    # -------------------------------------------------------------------------
    # 2.3 Output Configuration
    # -------------------------------------------------------------------------
    output_directory: str = ConfigDefaults.DEFAULT_OUTPUT_DIR

    # -------------------------------------------------------------------------
    # 2.4 Validation Methods
    # -------------------------------------------------------------------------

    @property
    def active_model(self) -> str:
        """Model name for the configured provider."""
        return self.openai_model if self.llm_provider == "openai" else self.gemini_model

    def validate(self, require_api_key: bool = True) -> None:
        """
        Validate configuration parameters.

        Args:
            require_api_key: Skip the API key check when no LLM call will be
                made (e.g. prompt previews)

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.llm_provider not in ConfigDefaults.SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported LLM provider: {self.llm_provider}",
                context={"supported": list(ConfigDefaults.SUPPORTED_PROVIDERS)},
            )

        if require_api_key:
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

        if self.patient_dataset_path and not Path(self.patient_dataset_path).exists():
            raise ConfigurationError(
                f"Patient dataset file not found: {self.patient_dataset_path}",
                context={"setting": "PATIENT_DATASET_PATH"},
            )

        if self.max_retries < 1:
            raise ConfigurationError(
                f"max_retries must be at least 1, got {self.max_retries}",
                context={"max_retries": self.max_retries},
            )

        if self.rate_limit_delay < 0:
            raise ConfigurationError(
                f"rate_limit_delay must be non-negative, got {self.rate_limit_delay}",
                context={"rate_limit_delay": self.rate_limit_delay},
            )

    # -------------------------------------------------------------------------
    # 2.5 Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_environment(
        cls,
        env_file: Optional[str] = None,
        validate_on_load: bool = True,
        require_api_key: bool = True,
    ) -> "PipelineConfiguration":
        """
        Load configuration from environment variables.

        STAGE 1: Load .env file (if specified or found)
        STAGE 2: Read environment variables
        STAGE 3: Convert to typed configuration
        STAGE 4: Validate configuration (optional)

        Raises:
            ConfigurationError: If required settings are missing or invalid
        """
        # STAGE 1: Load .env file
        if env_file:
            load_dotenv(env_file)
        else:
            possible_locations = [
                Path.cwd() / ".env",
                Path.cwd() / "patient_report_generation" / ".env",
            ]
            for location in possible_locations:
                if location.exists():
                    load_dotenv(location)
                    break

        # STAGE 2: Read environment variables
        gemini_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        openai_key = os.getenv("OPENAI_API_KEY")

        llm_provider = os.getenv("LLM_PROVIDER", ConfigDefaults.DEFAULT_LLM_PROVIDER).lower()
        if not gemini_key and openai_key and not os.getenv("LLM_PROVIDER"):
            llm_provider = "openai"

        base_path = Path(__file__).parent.parent  # patient_report_generation/
        default_dataset_path = base_path / "data" / "sample_patients.json"

        # STAGE 3: Create configuration
        try:
            config = cls(
                llm_provider=llm_provider,
                gemini_api_key=gemini_key,
                gemini_model=os.getenv("GEMINI_MODEL", ConfigDefaults.DEFAULT_GEMINI_MODEL),
                openai_api_key=openai_key,
                openai_model=os.getenv("OPENAI_MODEL", ConfigDefaults.DEFAULT_OPENAI_MODEL),
                rate_limit_delay=float(
                    os.getenv("RATE_LIMIT_DELAY", ConfigDefaults.DEFAULT_RATE_LIMIT_DELAY)
                ),
                max_retries=int(os.getenv("MAX_RETRIES", ConfigDefaults.DEFAULT_MAX_RETRIES)),
                patient_dataset_path=os.getenv(
                    "PATIENT_DATASET_PATH", str(default_dataset_path)
                ),
                output_directory=os.getenv(
                    "OUTPUT_DIRECTORY", ConfigDefaults.DEFAULT_OUTPUT_DIR
                ),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}")

        # STAGE 4: Validate
        if validate_on_load:
            config.validate(require_api_key=require_api_key)

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (for logging/debugging)."""
        return {
            "llm_provider": self.llm_provider,
            "gemini_model": self.gemini_model,
            "openai_model": self.openai_model,
            "gemini_api_key": "***" if self.gemini_api_key else None,
            "openai_api_key": "***" if self.openai_api_key else None,
            "rate_limit_delay": self.rate_limit_delay,
            "max_retries": self.max_retries,
            "patient_dataset_path": self.patient_dataset_path,
            "output_directory": self.output_directory,
        }
