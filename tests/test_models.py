"""Tests for domain models: names, billing policy, legacy keys and file names."""

from datetime import date, datetime, timezone

from patient_report_generation.core.enums import DocumentKind
from patient_report_generation.core.models import (
    BillingDetails,
    GeneratedDocument,
    MedicalEncounter,
    PatientRecord,
    PersonalDetails,
    PromptDocument,
    PromptSection,
)


class TestPersonalDetails:
    def test_full_name_trims_parts(self):
        personal = PersonalDetails("  Maria ", " Gonzalez Perez ", date(1985, 5, 15))
        assert personal.full_name == "Maria Gonzalez Perez"

    def test_full_name_with_blank_family_name(self):
        assert PersonalDetails("Maria", "", date(1985, 5, 15)).full_name == "Maria"


class TestBillingDetails:
    def test_has_tax_id(self):
        assert BillingDetails(tax_id="1234567890001").has_tax_id
        assert not BillingDetails(tax_id="").has_tax_id
        assert not BillingDetails(tax_id="   ").has_tax_id
        assert not BillingDetails().has_tax_id


class TestPatientRecordFromDict:
    """Tests for PatientRecord.from_dict."""

    def test_legacy_spanish_keys(self):
        record = PatientRecord.from_dict(
            {
                "id": "7",
                "personalDetails": {
                    "nombres": "Luisa",
                    "apellidos": "Fernandez Garcia",
                    "fechaNacimiento": "1992-08-01",
                    "documentoIdentidad": "11223344C",
                    "telefono1": "555-0103",
                    "telefono2": "555-0104",
                },
                "datosFacturacion": {"ruc": "20123456789", "direccionFiscal": "Jr. Lima 100"},
                "backgroundInformation": {"habitualMedication": "Ácido fólico"},
                "medicalEncounters": [{"id": "e1", "date": "2024-02-29T16:00:00.000Z", "details": "SOP"}],
                "updatedAt": "2024-02-29T16:30:00.000Z",
            }
        )

        assert record.patient_id == "7"
        assert record.personal.national_id == "11223344C"
        assert record.personal.phone_secondary == "555-0104"
        assert record.personal.birth_date == date(1992, 8, 1)
        assert record.billing.tax_id == "20123456789"
        assert record.billing.fiscal_address == "Jr. Lima 100"
        assert record.background.habitual_medication == "Ácido fólico"
        assert record.encounters == [
            MedicalEncounter(encounter_id="e1", date="2024-02-29T16:00:00.000Z", details="SOP")
        ]
        assert record.updated_at == datetime(2024, 2, 29, 16, 30, tzinfo=timezone.utc)
        assert record.created_at is None

    def test_snake_case_round_trip(self, maria_record):
        assert PatientRecord.from_dict(maria_record.to_dict()) == maria_record

    def test_absent_blocks_stay_none(self):
        record = PatientRecord.from_dict(
            {"id": "8", "personalDetails": {"nombres": "A", "apellidos": "B", "fechaNacimiento": "2000-01-01"}}
        )
        assert record.billing is None
        assert record.background is None
        assert record.encounters == []


class TestPromptDocument:
    def test_text_joins_blocks_with_blank_line(self):
        document = PromptDocument(
            kind=DocumentKind.SUMMARY,
            instructions="INSTRUCCIONES",
            sections=(PromptSection("a", "**A:**", "uno"), PromptSection("b", "**B:**", "dos")),
            closing="FIN",
        )
        assert document.text == "INSTRUCCIONES\n\n**A:**\nuno\n\n**B:**\ndos\n\nFIN"
        assert document.section("missing") is None


class TestGeneratedDocument:
    def test_report_filename(self):
        document = GeneratedDocument(
            kind=DocumentKind.REPORT,
            patient_id="1",
            patient_name="Maria Gonzalez Perez",
            content="# Informe",
            generated_at=datetime(2024, 3, 1, 12, 0),
        )
        assert document.suggested_filename() == "Informe_Maria_Gonzalez_Perez_2024-03-01.md"

    def test_summary_filename(self):
        document = GeneratedDocument(
            kind=DocumentKind.SUMMARY,
            patient_id="1",
            patient_name="John  Smith",
            content="Resumen",
            generated_at=datetime(2023, 9, 1),
        )
        assert document.suggested_filename() == "Resumen_John_Smith_2023-09-01.md"

    def test_filename_strips_path_separators(self):
        document = GeneratedDocument(
            kind=DocumentKind.REPORT,
            patient_id="1",
            patient_name="Ana/Maria Perez",
            content="# Informe",
            generated_at=datetime(2024, 3, 1),
        )
        assert document.suggested_filename() == "Informe_Ana_Maria_Perez_2024-03-01.md"

    def test_filename_cannot_climb_directories(self):
        document = GeneratedDocument(
            kind=DocumentKind.SUMMARY,
            patient_id="1",
            patient_name="../../etc/passwd",
            content="x",
            generated_at=datetime(2024, 3, 1),
        )
        filename = document.suggested_filename()
        assert "/" not in filename
        assert not filename.startswith(".")
        assert filename == "Resumen_etc_passwd_2024-03-01.md"

    def test_filename_for_unusable_name(self):
        document = GeneratedDocument(
            kind=DocumentKind.SUMMARY, patient_id="1", patient_name=" / ", content="x",
            generated_at=datetime(2024, 3, 1),
        )
        assert document.suggested_filename() == "Resumen_Paciente_2024-03-01.md"

    def test_to_dict(self):
        document = GeneratedDocument(
            kind=DocumentKind.SUMMARY, patient_id="1", patient_name="A", content="x",
            generated_at=datetime(2024, 1, 1), generation_model="gemini-1.5-flash",
        )
        assert document.to_dict()["kind"] == "summary"
        assert document.to_dict()["generation_model"] == "gemini-1.5-flash"
