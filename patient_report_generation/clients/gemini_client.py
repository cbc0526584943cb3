"""
Gemini Client - Default Text Generator

Sends summary and report prompts to a Google Gemini model
(gemini-1.5-flash by default) through the google-generativeai SDK.

Author: Shubham Singh
Date: January 2026
"""

from typing import Optional

from loguru import logger

from patient_report_generation.clients.llm_client import BaseLLMClient
from patient_report_generation.core.exceptions import LLMContentFilteredError, LLMError


# Medical narratives routinely mention drugs, injuries and symptoms that
# the default filters flag.
SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]


class GeminiClient(BaseLLMClient):
    """
    Gemini-backed generator for patient documents.

    Example:
        >>> client = GeminiClient(api_key="...")
        >>> summary = client.generate_structured(prompt.text, "summary")
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        rate_limit_delay: float = 0.5,
        max_retries: int = 3,
        temperature: float = 0.3,
    ):
        """
        Args:
            api_key: Gemini (Google AI Studio) key
            model_name: Gemini model identifier
            rate_limit_delay: Minimum seconds between requests
            max_retries: Attempts per document before giving up
            temperature: Sampling temperature; kept low for factual documents
        """
        super().__init__(
            api_key=api_key,
            model_name=model_name,
            rate_limit_delay=rate_limit_delay,
            max_retries=max_retries,
        )
        self._temperature = temperature
        self._model = self._build_model()

        logger.info(f"GeminiClient ready | Model: {model_name} | Temperature: {temperature}")

    def _build_model(self):
        # SDK imported here so the package loads without google-generativeai
        try:
            import google.generativeai as genai
        except ImportError:
            raise LLMError(
                "google-generativeai is required for the gemini provider "
                "(pip install google-generativeai)",
                provider="gemini",
            )

        try:
            genai.configure(api_key=self._api_key)
            return genai.GenerativeModel(
                model_name=self._model_name,
                safety_settings=SAFETY_SETTINGS,
                generation_config={"temperature": self._temperature},
            )
        except Exception as e:
            raise LLMError(f"Could not create Gemini model: {e}", provider="gemini", original_error=e)

    def _call_api(self, prompt: str) -> str:
        """
        Send one prompt to Gemini.

        Raises:
            LLMContentFilteredError: Prompt blocked by safety settings
            LLMRateLimitError: Quota or rate limit hit
            LLMError: Any other failure, including an empty reply
        """
        try:
            response = self._model.generate_content(prompt)
        except Exception as e:
            raise self._translate_error(e)

        block_reason = response.prompt_feedback.block_reason
        if block_reason:
            raise LLMContentFilteredError(provider="gemini", reason=str(block_reason))

        text = _response_text(response)
        if not text:
            raise LLMError("Gemini reply contained no text", provider="gemini")
        return text

    @property
    def provider_name(self) -> str:
        return "gemini"


def _response_text(response) -> Optional[str]:
    """First text part of a Gemini response, or None."""
    try:
        if response.text:
            return response.text
    except ValueError:
        # .text raises when the candidate has no parts
        pass

    for candidate in response.candidates or []:
        parts = candidate.content.parts if candidate.content else []
        for part in parts:
            if getattr(part, "text", None):
                return part.text
    return None
