"""
Clients Layer - LLM API Client Abstractions

This layer wraps the external text-generation collaborator. The rest of
the system only depends on LLMClientProtocol, so providers can be swapped
and tests can inject a fake.

Submodules:
    llm_client.py    → Protocol, base implementation, single-field output schema
    gemini_client.py → Google Gemini implementation
    openai_client.py → OpenAI implementation

Author: Shubham Singh
Date: January 2026
"""

from patient_report_generation.clients.llm_client import (
    LLMClientProtocol,
    BaseLLMClient,
    output_schema,
    parse_structured_reply,
)
from patient_report_generation.clients.gemini_client import GeminiClient
from patient_report_generation.clients.openai_client import OpenAIClient

__all__ = [
    "LLMClientProtocol",
    "BaseLLMClient",
    "output_schema",
    "parse_structured_reply",
    "GeminiClient",
    "OpenAIClient",
]
