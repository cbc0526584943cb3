"""Tests for summary and report prompt assembly."""

from datetime import date

import pytest

from patient_report_generation.core.constants import (
    BACKGROUND_LABELS,
    CONCLUSION_PLACEHOLDER,
    NO_BACKGROUND_SENTINEL,
    NOT_RECORDED,
)
from patient_report_generation.core.enums import DigestStyle, DocumentKind
from patient_report_generation.core.exceptions import PromptError
from patient_report_generation.core.models import (
    BackgroundInformation,
    BillingDetails,
    PersonalDetails,
    PromptSection,
)
from patient_report_generation.generation.prompt_builder import (
    PromptBuilder,
    PromptInput,
    billing_section,
    build_report_prompt,
    build_summary_prompt,
    patient_section,
)

BILLING_HEADING = "## DATOS DE FACTURACIÓN"


# =============================================================================
# Summary Prompt
# =============================================================================


class TestBuildSummaryPrompt:
    """Tests for build_summary_prompt."""

    def test_section_order(self, maria_personal, maria_background, maria_encounters):
        prompt = build_summary_prompt(maria_personal, maria_background, maria_encounters)
        assert prompt.kind == DocumentKind.SUMMARY
        assert prompt.output_field == "summary"
        assert prompt.section_keys == ["patient", "background", "encounters"]

    def test_encounters_newest_first(self, maria_personal, maria_encounters):
        prompt = build_summary_prompt(maria_personal, None, maria_encounters)
        body = prompt.section("encounters").body

        assert body == (
            "Fecha: 01/03/2024\nControl de marzo."
            "\n\n---\n\n"
            "Fecha: 01/01/2024\nControl de enero."
        )
        assert prompt.text.index("Control de marzo.") < prompt.text.index("Control de enero.")

    def test_no_background_sentinel_and_no_labels(self, maria_personal, maria_encounters):
        prompt = build_summary_prompt(maria_personal, None, maria_encounters)
        assert NO_BACKGROUND_SENTINEL in prompt.text
        for label in BACKGROUND_LABELS:
            assert f"{label}:" not in prompt.text
            assert label.lower() not in prompt.text.lower()

    def test_background_fields_default_individually(self, maria_personal):
        background = BackgroundInformation(allergies="Polen")
        prompt = build_summary_prompt(maria_personal, background, [])
        body = prompt.section("background").body

        assert "- Alergias: Polen" in body
        assert f"- Antecedentes personales: {NOT_RECORDED}" in body
        assert f"- Medicación habitual: {NOT_RECORDED}" in body
        assert NO_BACKGROUND_SENTINEL not in prompt.text

    def test_missing_contact_fields_default(self):
        personal = PersonalDetails(given_name="Ana", family_name="Ruiz", birth_date=date(2000, 1, 2))
        body = build_summary_prompt(personal, None, []).section("patient").body

        assert "- Nombre completo: Ana Ruiz" in body
        assert "- Fecha de nacimiento: 02/01/2000" in body
        assert f"- Documento de identidad: {NOT_RECORDED}" in body
        assert f"- Teléfono principal: {NOT_RECORDED}" in body
        assert f"- Teléfono secundario: {NOT_RECORDED}" in body
        assert f"- Correo electrónico: {NOT_RECORDED}" in body

    def test_empty_encounters_sentinel(self, maria_personal):
        prompt = build_summary_prompt(maria_personal, None, [])
        assert prompt.section("encounters").body == "Sin consultas registradas."

    def test_idempotent(self, maria_personal, maria_background, maria_encounters):
        first = build_summary_prompt(maria_personal, maria_background, maria_encounters)
        second = build_summary_prompt(maria_personal, maria_background, maria_encounters)
        assert first.text == second.text


# =============================================================================
# Report Prompt
# =============================================================================


class TestBuildReportPrompt:
    """Tests for build_report_prompt."""

    def test_section_order_with_billing(
        self, maria_personal, maria_billing, maria_background, maria_encounters
    ):
        prompt = build_report_prompt(maria_personal, maria_billing, maria_background, maria_encounters)
        assert prompt.kind == DocumentKind.REPORT
        assert prompt.output_field == "report"
        assert prompt.section_keys == ["patient", "billing", "background", "encounters", "conclusions"]

    def test_blank_tax_id_omits_billing(self, maria_personal, maria_background, maria_encounters):
        prompt = build_report_prompt(
            maria_personal, BillingDetails(tax_id=""), maria_background, maria_encounters
        )
        assert BILLING_HEADING not in prompt.text
        assert "billing" not in prompt.section_keys

    def test_blank_tax_id_same_as_no_billing(self, maria_personal, maria_background, maria_encounters):
        blank = build_report_prompt(
            maria_personal,
            BillingDetails(tax_id="   ", fiscal_address="Calle 1"),
            maria_background,
            maria_encounters,
        )
        absent = build_report_prompt(maria_personal, None, maria_background, maria_encounters)
        assert blank.text == absent.text

    def test_tax_id_renders_billing(self, maria_personal, maria_background, maria_encounters):
        prompt = build_report_prompt(
            maria_personal, BillingDetails(tax_id="1234567890001"), maria_background, maria_encounters
        )
        section = prompt.section("billing")

        assert BILLING_HEADING in prompt.text
        assert "- RUC: 1234567890001" in section.body
        assert f"- Dirección fiscal: {NOT_RECORDED}" in section.body

    def test_markdown_headings(self, maria_personal, maria_billing, maria_background, maria_encounters):
        text = build_report_prompt(maria_personal, maria_billing, maria_background, maria_encounters).text
        for heading in (
            "## DATOS DEL PACIENTE",
            "## ANTECEDENTES Y MEDICACIÓN",
            "## HISTORIAL DE CONSULTAS",
            "## CONCLUSIONES",
        ):
            assert heading in text

    def test_long_form_dates(self, maria_personal, maria_encounters):
        prompt = build_report_prompt(maria_personal, None, None, maria_encounters)
        assert "- Fecha de nacimiento: 15 de mayo de 1985" in prompt.section("patient").body
        assert prompt.section("encounters").body.startswith("### Consulta del 1 de marzo de 2024")

    def test_conclusions_placeholders(self, maria_personal):
        body = build_report_prompt(maria_personal, None, None, []).section("conclusions").body
        assert body.count(CONCLUSION_PLACEHOLDER) == 3

    def test_instructions_name_patient(self, maria_personal):
        prompt = build_report_prompt(maria_personal, None, None, [])
        assert "Maria Gonzalez Perez" in prompt.instructions

    def test_empty_encounters_sentinel(self, maria_personal):
        prompt = build_report_prompt(maria_personal, None, None, [])
        assert prompt.section("encounters").body == (
            "No se han registrado consultas médicas para este paciente hasta la fecha."
        )

    def test_idempotent(self, maria_personal, maria_billing, maria_background, maria_encounters):
        args = (maria_personal, maria_billing, maria_background, maria_encounters)
        assert build_report_prompt(*args).text == build_report_prompt(*args).text


# =============================================================================
# Section Builders
# =============================================================================


class TestSectionBuilders:
    def test_billing_section_none_without_billing(self, maria_personal):
        data = PromptInput(personal=maria_personal)
        assert billing_section(data, DigestStyle.REPORT) is None

    def test_summary_heading_style(self, maria_personal):
        section = patient_section(PromptInput(personal=maria_personal), DigestStyle.SUMMARY)
        assert section.title == "**DATOS DEL PACIENTE:**"

    def test_custom_section_sequence(self, maria_personal):
        def note_section(data, style):
            return PromptSection(key="note", title="NOTA", body=data.personal.full_name)

        builder = PromptBuilder(summary_sections=[note_section])
        prompt = builder.build_summary_prompt(maria_personal, None, [])
        assert prompt.section_keys == ["note"]
        assert "NOTA\nMaria Gonzalez Perez" in prompt.text


class TestBuildForRecord:
    def test_dispatches_by_kind(self, maria_record):
        builder = PromptBuilder()
        assert builder.build_for_record(maria_record, DocumentKind.SUMMARY).kind == DocumentKind.SUMMARY
        assert builder.build_for_record(maria_record, DocumentKind.REPORT).kind == DocumentKind.REPORT

    def test_unknown_kind_raises(self, maria_record):
        with pytest.raises(PromptError):
            PromptBuilder().build_for_record(maria_record, "letter")
