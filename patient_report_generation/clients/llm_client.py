"""
LLM Client Protocol and Base Implementation

This module defines the interface for LLM clients and provides a base
class with common functionality (rate limiting, retry, structured output).

Protocol Pattern:
    - LLMClientProtocol defines the interface
    - BaseLLMClient provides common implementation
    - Concrete clients (GeminiClient, OpenAIClient) extend base

Structured Output:
    The document pipeline asks for exactly one named string field
    ("summary" or "report"). generate_structured() appends a JSON output
    contract to the prompt, validates the reply against a pydantic model
    built for that field, and returns the field's value.

Author: Shubham Singh
Date: January 2026
"""

import re
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional, Protocol, Type, runtime_checkable

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, create_model

from patient_report_generation.core.exceptions import (
    LLMContentFilteredError,
    LLMError,
    LLMRateLimitError,
    LLMResponseFormatError,
)


# =============================================================================
# STAGE 1: LLM CLIENT PROTOCOL
# =============================================================================


@runtime_checkable
class LLMClientProtocol(Protocol):
    """
    Protocol defining the interface for LLM clients.

    Required Methods:
        generate(prompt) → Generate free text from prompt
        generate_structured(prompt, output_field) → Return one named string field

    Optional Properties:
        model_name → Name of the model being used
        provider_name → Name of the provider (gemini, openai)
    """

    def generate(self, prompt: str) -> str:
        """
        Generate text from a prompt.

        Raises:
            LLMError: If generation fails
        """
        ...

    def generate_structured(self, prompt: str, output_field: str) -> str:
        """
        Generate a reply constrained to a single named string field.

        Raises:
            LLMError: If generation fails or the reply lacks the field
        """
        ...

    @property
    def model_name(self) -> str:
        """Name of the model being used."""
        ...

    @property
    def provider_name(self) -> str:
        """Name of the LLM provider."""
        ...


# =============================================================================
# STAGE 2: OUTPUT SCHEMA
# =============================================================================

OUTPUT_CONTRACT = """

**FORMATO DE RESPUESTA:**
Responde únicamente con un objeto JSON válido con esta forma exacta:
{{"{field}": "<texto generado>"}}
"""

_JSON_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@lru_cache(maxsize=None)
def output_schema(output_field: str) -> Type[BaseModel]:
    """
    Pydantic model with a single required string field.

    Example:
        >>> output_schema("summary").model_validate_json('{"summary": "ok"}').summary
        'ok'
    """
    return create_model(
        f"{output_field.title()}Output",
        **{output_field: (str, Field(..., description=f"Generated {output_field} text"))},
    )


def parse_structured_reply(reply: str, output_field: str, provider: str) -> str:
    """
    Extract the named field from a JSON reply.

    Accepts replies wrapped in a Markdown code fence.

    Raises:
        LLMResponseFormatError: If the reply is not JSON or lacks a string field
    """
    text = (reply or "").strip()
    fenced = _JSON_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        parsed = output_schema(output_field).model_validate_json(text, strict=True)
    except ValidationError as e:
        raise LLMResponseFormatError(provider=provider, output_field=output_field, original_error=e)

    return getattr(parsed, output_field)


# =============================================================================
# STAGE 3: BASE LLM CLIENT (ABSTRACT)
# =============================================================================


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM clients with common functionality.

    What subclasses must implement:
        - _call_api(prompt): Actual API call
        - provider_name: Property returning provider name

    What base class provides:
        - Rate limiting between calls
        - Retry logic for transient errors
        - Structured single-field output
        - Logging and metrics
    """

    def __init__(
        self, api_key: str, model_name: str, rate_limit_delay: float = 0.5, max_retries: int = 3
    ):
        """
        Initialize base LLM client.

        Args:
            api_key: API key for the provider
            model_name: Name of model to use
            rate_limit_delay: Seconds to wait between API calls
            max_retries: Maximum retry attempts for failed calls
        """
        # =====================================================================
        # STAGE 3.1: STORE CONFIGURATION
        # =====================================================================
        self._api_key = api_key
        self._model_name = model_name
        self._rate_limit_delay = rate_limit_delay
        self._max_retries = max_retries

        # =====================================================================
        # STAGE 3.2: TRACKING STATE
        # =====================================================================
        self._last_call_time: Optional[float] = None
        self._total_calls = 0
        self._failed_calls = 0

    # =========================================================================
    # STAGE 4: PUBLIC API
    # =========================================================================

    def generate(self, prompt: str) -> str:
        """
        Generate text from prompt with rate limiting and retry.

        Raises:
            LLMError: If all retries fail
        """
        self._apply_rate_limit()

        last_error = None

        for attempt in range(1, self._max_retries + 1):
            try:
                result = self._call_api(prompt)
                self._total_calls += 1
                return result

            except LLMRateLimitError as e:
                last_error = e
                wait_time = e.retry_after or (2**attempt)
                logger.warning(
                    f"Rate limited by {self.provider_name}, "
                    f"waiting {wait_time}s (attempt {attempt})"
                )
                time.sleep(wait_time)

            except LLMError as e:
                last_error = e
                self._failed_calls += 1
                logger.warning(f"LLM call failed (attempt {attempt}/{self._max_retries}): {e}")
                time.sleep(1)

            except Exception as e:
                last_error = LLMError(str(e), provider=self.provider_name, original_error=e)
                self._failed_calls += 1
                logger.error(f"Unexpected error in LLM call: {e}")

        raise LLMError(
            f"Generation failed after {self._max_retries} attempts",
            provider=self.provider_name,
            original_error=last_error,
        )

    def generate_structured(self, prompt: str, output_field: str) -> str:
        """
        Generate a reply holding a single named string field.

        Algorithm:
            1. Append the JSON output contract for the field
            2. Call generate() (rate limit + retry)
            3. Validate the reply against the field schema

        Args:
            prompt: The assembled prompt document text
            output_field: Name of the string field to return

        Returns:
            Value of the field

        Raises:
            LLMError: If generation fails
            LLMResponseFormatError: If the reply does not match the schema
        """
        reply = self.generate(prompt + OUTPUT_CONTRACT.format(field=output_field))
        value = parse_structured_reply(reply, output_field, self.provider_name)

        logger.debug(
            f"Structured reply parsed | Provider: {self.provider_name} | "
            f"Field: {output_field} | Length: {len(value)} chars"
        )
        return value

    # =========================================================================
    # STAGE 5: ABSTRACT METHODS
    # =========================================================================

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """
        Make the actual API call. Must be implemented by subclasses.

        Raises:
            LLMError: If API call fails
        """
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'gemini', 'openai')."""
        ...

    # =========================================================================
    # STAGE 6: COMMON IMPLEMENTATION
    # =========================================================================

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model_name

    # Substrings providers use in quota and safety error messages.
    RATE_LIMIT_MARKERS = ("rate", "quota", "429")
    CONTENT_FILTER_MARKERS = ("blocked", "safety", "content_filter", "policy")

    def _translate_error(self, error: Exception) -> LLMError:
        """Map a raw SDK exception onto the LLMError hierarchy."""
        if isinstance(error, LLMError):
            return error

        text = str(error).lower()
        if any(marker in text for marker in self.RATE_LIMIT_MARKERS):
            return LLMRateLimitError(provider=self.provider_name, original_error=error)
        if any(marker in text for marker in self.CONTENT_FILTER_MARKERS):
            return LLMContentFilteredError(provider=self.provider_name, reason=str(error))
        return LLMError(
            f"{self.provider_name} API error: {error}",
            provider=self.provider_name,
            original_error=error,
        )

    def _apply_rate_limit(self) -> None:
        """Apply rate limiting between API calls."""
        if self._last_call_time is not None:
            elapsed = time.time() - self._last_call_time
            if elapsed < self._rate_limit_delay:
                time.sleep(self._rate_limit_delay - elapsed)

        self._last_call_time = time.time()

    # =========================================================================
    # STAGE 7: METRICS
    # =========================================================================

    @property
    def total_calls(self) -> int:
        """Total number of successful API calls."""
        return self._total_calls

    @property
    def failed_calls(self) -> int:
        """Number of failed API calls."""
        return self._failed_calls

    @property
    def success_rate(self) -> float:
        """Percentage of successful calls."""
        total = self._total_calls + self._failed_calls
        if total == 0:
            return 100.0
        return (self._total_calls / total) * 100
