"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- Patient record building blocks (personal, billing, background, encounters)
- A seeded in-memory repository
- A fake LLM client that records prompts instead of calling a provider
- Loguru message capture
"""

from datetime import date
from pathlib import Path
from typing import List, Optional

import pytest
from loguru import logger

from patient_report_generation.core.config import PipelineConfiguration
from patient_report_generation.core.models import (
    BackgroundInformation,
    BillingDetails,
    MedicalEncounter,
    PatientRecord,
    PersonalDetails,
)
from patient_report_generation.repository import InMemoryPatientRepository

SAMPLE_DATASET = (
    Path(__file__).resolve().parent.parent
    / "patient_report_generation"
    / "data"
    / "sample_patients.json"
)


# =============================================================================
# Fake LLM Client
# =============================================================================


class FakeLLMClient:
    """LLM client double that returns canned text and records every call."""

    def __init__(self, reply: Optional[object] = "Texto generado", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = []

    def generate(self, prompt: str) -> str:
        self.calls.append((prompt, None))
        if self.error:
            raise self.error
        return self.reply

    def generate_structured(self, prompt: str, output_field: str) -> str:
        self.calls.append((prompt, output_field))
        if self.error:
            raise self.error
        return self.reply

    @property
    def model_name(self) -> str:
        return "fake-model"

    @property
    def provider_name(self) -> str:
        return "fake"


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


# =============================================================================
# Patient Data Fixtures
# =============================================================================


@pytest.fixture
def maria_personal() -> PersonalDetails:
    return PersonalDetails(
        given_name="Maria",
        family_name="Gonzalez Perez",
        birth_date=date(1985, 5, 15),
        national_id="12345678A",
        phone_primary="555-0101",
        email="maria.gonzalez@example.com",
    )


@pytest.fixture
def maria_background() -> BackgroundInformation:
    return BackgroundInformation(
        personal_history="Diabetes tipo 2. Hipertensión.",
        allergies="Penicilina.",
        habitual_medication="Metformina 1000mg BID.",
    )


@pytest.fixture
def maria_encounters() -> List[MedicalEncounter]:
    # Stored oldest first on purpose
    return [
        MedicalEncounter(encounter_id="enc-jan", date="2024-01-01", details="Control de enero."),
        MedicalEncounter(encounter_id="enc-mar", date="2024-03-01", details="Control de marzo."),
    ]


@pytest.fixture
def maria_billing() -> BillingDetails:
    return BillingDetails(tax_id="1234567890001", fiscal_address="Av. Siempreviva 742")


@pytest.fixture
def maria_record(maria_personal, maria_billing, maria_background, maria_encounters) -> PatientRecord:
    return PatientRecord(
        patient_id="patient-maria",
        personal=maria_personal,
        billing=maria_billing,
        background=maria_background,
        encounters=list(maria_encounters),
    )


@pytest.fixture
def repository(maria_record) -> InMemoryPatientRepository:
    return InMemoryPatientRepository([maria_record])


@pytest.fixture
def config(tmp_path) -> PipelineConfiguration:
    """Configuration with no dataset and output under the test's temp dir."""
    return PipelineConfiguration(
        gemini_api_key="test-key",
        patient_dataset_path=None,
        output_directory=str(tmp_path / "output"),
    )


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture
def log_messages():
    """Collect loguru messages at WARNING and above."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)
