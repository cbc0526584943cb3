"""
OpenAI Client - Alternative Text Generator

Sends summary and report prompts to an OpenAI chat model
(gpt-4o-mini by default). Selected with LLM_PROVIDER=openai.

Author: Shubham Singh
Date: January 2026
"""

from loguru import logger

from patient_report_generation.clients.llm_client import BaseLLMClient
from patient_report_generation.core.exceptions import LLMContentFilteredError, LLMError


SYSTEM_MESSAGE = "Eres un asistente clínico que redacta documentación médica para médicos."


class OpenAIClient(BaseLLMClient):
    """
    OpenAI-backed generator for patient documents.

    Example:
        >>> client = OpenAIClient(api_key="sk-...")
        >>> report = client.generate_structured(prompt.text, "report")
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        rate_limit_delay: float = 0.5,
        max_retries: int = 3,
        temperature: float = 0.3,
        max_tokens: int = 4096,
    ):
        super().__init__(
            api_key=api_key,
            model_name=model_name,
            rate_limit_delay=rate_limit_delay,
            max_retries=max_retries,
        )
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = self._build_client()

        logger.info(f"OpenAIClient ready | Model: {model_name} | Max tokens: {max_tokens}")

    def _build_client(self):
        # SDK imported here so the package loads without openai
        try:
            from openai import OpenAI
        except ImportError:
            raise LLMError(
                "openai is required for the openai provider (pip install openai)",
                provider="openai",
            )

        try:
            return OpenAI(api_key=self._api_key)
        except Exception as e:
            raise LLMError(f"Could not create OpenAI client: {e}", provider="openai", original_error=e)

    def _call_api(self, prompt: str) -> str:
        """
        Send one prompt as a system + user chat exchange.

        Raises:
            LLMContentFilteredError: Reply stopped by the content filter
            LLMRateLimitError: Quota or rate limit hit
            LLMError: Any other failure, including an empty reply
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_MESSAGE},
                    {"role": "user", "content": prompt},
                ],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except Exception as e:
            raise self._translate_error(e)

        if not response.choices:
            raise LLMError("OpenAI reply contained no choices", provider="openai")

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            raise LLMContentFilteredError(provider="openai", reason="content_filter")
        if not choice.message.content:
            raise LLMError("OpenAI reply contained no text", provider="openai")
        return choice.message.content

    @property
    def provider_name(self) -> str:
        return "openai"
