"""Tests for the LLM client base class: structured output, retry and metrics."""

from typing import List

import pytest

from patient_report_generation.clients import llm_client
from patient_report_generation.clients.llm_client import (
    BaseLLMClient,
    LLMClientProtocol,
    output_schema,
    parse_structured_reply,
)
from patient_report_generation.core.exceptions import (
    LLMContentFilteredError,
    LLMError,
    LLMRateLimitError,
    LLMResponseFormatError,
)


class ScriptedClient(BaseLLMClient):
    """BaseLLMClient whose API replies (or errors) are scripted in advance."""

    def __init__(self, replies: List[object], max_retries: int = 3):
        super().__init__(api_key="key", model_name="scripted-1", rate_limit_delay=0, max_retries=max_retries)
        self._replies = list(replies)
        self.prompts: List[str] = []

    def _call_api(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def provider_name(self) -> str:
        return "scripted"


@pytest.fixture
def no_sleep(monkeypatch):
    sleeps: List[float] = []
    monkeypatch.setattr(llm_client.time, "sleep", lambda seconds: sleeps.append(seconds))
    return sleeps


# =============================================================================
# Output Schema
# =============================================================================


class TestOutputSchema:
    def test_single_required_string_field(self):
        model = output_schema("report")
        assert list(model.model_fields) == ["report"]
        assert model.model_validate_json('{"report": "# Informe"}').report == "# Informe"

    def test_cached_per_field(self):
        assert output_schema("summary") is output_schema("summary")
        assert output_schema("summary") is not output_schema("report")


class TestParseStructuredReply:
    """Tests for parse_structured_reply."""

    def test_plain_json(self):
        assert parse_structured_reply('{"summary": "Paciente estable."}', "summary", "x") == "Paciente estable."

    def test_fenced_json(self):
        reply = '```json\n{"report": "## Informe"}\n```'
        assert parse_structured_reply(reply, "report", "x") == "## Informe"

    def test_missing_field_raises(self):
        with pytest.raises(LLMResponseFormatError) as exc_info:
            parse_structured_reply('{"report": "texto"}', "summary", "gemini")
        assert exc_info.value.output_field == "summary"
        assert exc_info.value.provider == "gemini"

    def test_non_string_field_raises(self):
        with pytest.raises(LLMResponseFormatError):
            parse_structured_reply('{"summary": 42}', "summary", "x")

    def test_not_json_raises(self):
        with pytest.raises(LLMResponseFormatError):
            parse_structured_reply("El paciente está estable.", "summary", "x")

    def test_format_error_is_llm_error(self):
        with pytest.raises(LLMError):
            parse_structured_reply("", "summary", "x")


# =============================================================================
# Base Client
# =============================================================================


class TestBaseLLMClient:
    def test_satisfies_protocol(self):
        assert isinstance(ScriptedClient([]), LLMClientProtocol)

    def test_generate_structured_appends_contract(self):
        client = ScriptedClient(['{"summary": "Resumen"}'])
        assert client.generate_structured("PROMPT", "summary") == "Resumen"
        assert client.prompts[0].startswith("PROMPT")
        assert '{"summary": "<texto generado>"}' in client.prompts[0]

    def test_generate_structured_bad_reply(self):
        client = ScriptedClient(["sin formato"])
        with pytest.raises(LLMResponseFormatError):
            client.generate_structured("PROMPT", "report")

    def test_retries_llm_error_then_succeeds(self, no_sleep):
        client = ScriptedClient([LLMError("boom", provider="scripted"), "ok"])
        assert client.generate("PROMPT") == "ok"
        assert len(client.prompts) == 2
        assert client.total_calls == 1
        assert client.failed_calls == 1
        assert client.success_rate == 50.0

    def test_rate_limit_waits_retry_after(self, no_sleep):
        client = ScriptedClient([LLMRateLimitError(provider="scripted", retry_after=7), "ok"])
        assert client.generate("PROMPT") == "ok"
        assert 7 in no_sleep

    def test_gives_up_after_max_retries(self, no_sleep):
        client = ScriptedClient([RuntimeError("down"), RuntimeError("still down")], max_retries=2)
        with pytest.raises(LLMError) as exc_info:
            client.generate("PROMPT")
        assert "after 2 attempts" in str(exc_info.value)
        assert client.failed_calls == 2

    def test_translate_error(self):
        client = ScriptedClient([])
        assert isinstance(client._translate_error(RuntimeError("429 Too Many Requests")), LLMRateLimitError)
        assert isinstance(
            client._translate_error(RuntimeError("Response blocked by safety")), LLMContentFilteredError
        )
        plain = client._translate_error(RuntimeError("connection reset"))
        assert type(plain) is LLMError
        assert plain.provider == "scripted"

    def test_model_name(self):
        assert ScriptedClient([]).model_name == "scripted-1"
