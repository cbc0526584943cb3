"""
Domain Models for Patient Document Generation

This module defines the core data structures used throughout the patient
document pipeline. Record models are dataclasses designed for:
    1. Type safety and IDE support
    2. Serialization to/from JSON (snake_case or the legacy Spanish keys)
    3. Clear domain semantics

Model Hierarchy:
    PersonalDetails       → Patient identity and contact data
    BillingDetails        → Optional billing block (tax ID, fiscal address)
    BackgroundInformation → Optional history / allergies / medication block
    MedicalEncounter      → One dated consultation with free-text notes
    PatientRecord         → Aggregate passed into the pipeline
    PromptSection         → One headed block of a prompt
    PromptDocument        → Fully assembled prompt for the text generator
    GeneratedDocument     → Text returned by the generator plus metadata

Usage:
    from patient_report_generation.core.models import PersonalDetails

    personal = PersonalDetails(
        given_name="Maria",
        family_name="Gonzalez Perez",
        birth_date=date(1985, 5, 15),
    )

Author: Shubham Singh
Date: January 2026
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from patient_report_generation.core.constants import DOCUMENT_FILENAME_PREFIXES, SECTION_SEPARATOR
from patient_report_generation.core.enums import DocumentKind


# Raw encounter date as stored: ISO string, date or datetime.
DateValue = Union[str, date, datetime]


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key (snake_case first, then legacy Spanish key)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _parse_birth_date(value: Any) -> date:
    """Parse a birth date from a date, datetime or ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def _serialize_date(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


# =============================================================================
# STAGE 1: PATIENT RECORD MODELS
# =============================================================================


@dataclass(frozen=True)
class PersonalDetails:
    """
    Identity and contact attributes of a patient.

    Attributes:
        given_name: First name(s)
        family_name: Surname(s)
        birth_date: Date of birth
        national_id: National identity document (optional)
        phone_primary: Main phone number (optional)
        phone_secondary: Secondary phone number (optional)
        email: Contact email (optional)

    Example:
        >>> PersonalDetails("Maria", " Gonzalez Perez ", date(1985, 5, 15)).full_name
        'Maria Gonzalez Perez'
    """

    # -------------------------------------------------------------------------
    # 1.1 Required Fields
    # -------------------------------------------------------------------------
    given_name: str
    family_name: str
    birth_date: date

    # -------------------------------------------------------------------------
    # 1.2 Optional Identity and Contact Fields
    # -------------------------------------------------------------------------
    national_id: Optional[str] = None
    phone_primary: Optional[str] = None
    phone_secondary: Optional[str] = None
    email: Optional[str] = None

    @property
    def full_name(self) -> str:
        """Given and family name joined by a single space, trimmed."""
        parts = [part.strip() for part in (self.given_name, self.family_name) if part]
        return " ".join(part for part in parts if part).strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "given_name": self.given_name,
            "family_name": self.family_name,
            "birth_date": self.birth_date.isoformat(),
            "national_id": self.national_id,
            "phone_primary": self.phone_primary,
            "phone_secondary": self.phone_secondary,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonalDetails":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            given_name=_pick(data, "given_name", "nombres", default=""),
            family_name=_pick(data, "family_name", "apellidos", default=""),
            birth_date=_parse_birth_date(_pick(data, "birth_date", "fechaNacimiento")),
            national_id=_pick(data, "national_id", "documentoIdentidad"),
            phone_primary=_pick(data, "phone_primary", "telefono1"),
            phone_secondary=_pick(data, "phone_secondary", "telefono2"),
            email=_pick(data, "email"),
        )


@dataclass(frozen=True)
class BillingDetails:
    """
    Billing block of a patient record. May be entirely absent.

    The billing section of a report is rendered only when the tax ID is
    present and non-blank.
    """

    tax_id: Optional[str] = None
    fiscal_address: Optional[str] = None
    billing_phone: Optional[str] = None
    billing_email: Optional[str] = None

    @property
    def has_tax_id(self) -> bool:
        """True when a non-blank tax ID is recorded."""
        return bool(self.tax_id and self.tax_id.strip())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "tax_id": self.tax_id,
            "fiscal_address": self.fiscal_address,
            "billing_phone": self.billing_phone,
            "billing_email": self.billing_email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BillingDetails":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            tax_id=_pick(data, "tax_id", "ruc"),
            fiscal_address=_pick(data, "fiscal_address", "direccionFiscal"),
            billing_phone=_pick(data, "billing_phone", "telefonoFacturacion"),
            billing_email=_pick(data, "billing_email", "emailFacturacion"),
        )


@dataclass(frozen=True)
class BackgroundInformation:
    """Free-text personal history, allergies and habitual medication."""

    personal_history: Optional[str] = None
    allergies: Optional[str] = None
    habitual_medication: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "personal_history": self.personal_history,
            "allergies": self.allergies,
            "habitual_medication": self.habitual_medication,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackgroundInformation":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            personal_history=_pick(data, "personal_history", "personalHistory"),
            allergies=_pick(data, "allergies"),
            habitual_medication=_pick(data, "habitual_medication", "habitualMedication"),
        )


@dataclass(frozen=True)
class MedicalEncounter:
    """
    One dated medical consultation.

    Attributes:
        encounter_id: Unique identifier within the patient record
        date: Raw stored date (ISO string, date or datetime). Kept as stored
            so that an unparsable value can still be shown verbatim.
        details: Free-text clinical notes (reason, exam, diagnosis, plan)
    """

    encounter_id: str
    date: DateValue
    details: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "encounter_id": self.encounter_id,
            "date": _serialize_date(self.date),
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MedicalEncounter":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            encounter_id=str(_pick(data, "encounter_id", "id", default="")),
            date=_pick(data, "date", default=""),
            details=_pick(data, "details", default=""),
        )


@dataclass
class PatientRecord:
    """
    Aggregate of everything known about one patient.

    This is the sole unit of ownership passed into the pipeline. The
    pipeline reads it and never mutates it.
    """

    # -------------------------------------------------------------------------
    # 1.1 Identity
    # -------------------------------------------------------------------------
    patient_id: str
    personal: PersonalDetails

    # -------------------------------------------------------------------------
    # 1.2 Optional Blocks
    # -------------------------------------------------------------------------
    billing: Optional[BillingDetails] = None
    background: Optional[BackgroundInformation] = None

    # -------------------------------------------------------------------------
    # 1.3 Encounters (unordered as stored)
    # -------------------------------------------------------------------------
    encounters: List[MedicalEncounter] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # 1.4 Record Metadata
    # -------------------------------------------------------------------------
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return self.personal.full_name

    @property
    def encounter_count(self) -> int:
        return len(self.encounters)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "patient_id": self.patient_id,
            "personal": self.personal.to_dict(),
            "billing": self.billing.to_dict() if self.billing else None,
            "background": self.background.to_dict() if self.background else None,
            "encounters": [encounter.to_dict() for encounter in self.encounters],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatientRecord":
        """
        Create from dictionary (JSON deserialization).

        Accepts snake_case keys as written by to_dict() as well as the keys
        used by the legacy web application export.
        """
        billing_data = _pick(data, "billing", "datosFacturacion")
        background_data = _pick(data, "background", "backgroundInformation")
        created_at = _pick(data, "created_at", "createdAt")
        updated_at = _pick(data, "updated_at", "updatedAt")

        return cls(
            patient_id=str(_pick(data, "patient_id", "id", default="")),
            personal=PersonalDetails.from_dict(_pick(data, "personal", "personalDetails")),
            billing=BillingDetails.from_dict(billing_data) if billing_data else None,
            background=(
                BackgroundInformation.from_dict(background_data) if background_data else None
            ),
            encounters=[
                MedicalEncounter.from_dict(item)
                for item in _pick(data, "encounters", "medicalEncounters", default=[])
            ],
            created_at=_parse_timestamp(created_at),
            updated_at=_parse_timestamp(updated_at),
        )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


# =============================================================================
# STAGE 2: PROMPT MODELS
# =============================================================================


@dataclass(frozen=True)
class PromptSection:
    """
    One headed block of a prompt document.

    Attributes:
        key: Stable identifier ("patient", "billing", ...)
        title: Rendered heading line (markup included)
        body: Section content
    """

    key: str
    title: str
    body: str

    def render(self) -> str:
        return f"{self.title}\n{self.body}"


@dataclass(frozen=True)
class PromptDocument:
    """
    Fully assembled prompt handed to the text-generation collaborator.

    The rendered text depends only on the fields below, so two documents
    built from identical input are byte-identical.
    """

    kind: DocumentKind
    instructions: str
    sections: Tuple[PromptSection, ...]
    closing: str = ""

    @property
    def output_field(self) -> str:
        """Single string field the generator must populate."""
        return self.kind.output_field

    @property
    def section_keys(self) -> List[str]:
        return [section.key for section in self.sections]

    def section(self, key: str) -> Optional[PromptSection]:
        """Return the section with the given key, or None if it was not emitted."""
        for section in self.sections:
            if section.key == key:
                return section
        return None

    @property
    def text(self) -> str:
        """Render the complete prompt."""
        blocks = [self.instructions]
        blocks.extend(section.render() for section in self.sections)
        if self.closing:
            blocks.append(self.closing)
        return SECTION_SEPARATOR.join(blocks)


# =============================================================================
# STAGE 3: GENERATED DOCUMENT MODEL
# =============================================================================


@dataclass
class GeneratedDocument:
    """
    Text produced by the generator for one patient.

    Attributes:
        kind: Summary or report
        patient_id: Source record identifier
        patient_name: Full name of the patient (used in file names)
        content: Generated text (Markdown for reports)
        generated_at: Timestamp of generation
        generation_model: Model that produced the text
    """

    kind: DocumentKind
    patient_id: str
    patient_name: str
    content: str
    generated_at: datetime = field(default_factory=datetime.now)
    generation_model: str = "unknown"

    def suggested_filename(self) -> str:
        """
        File name offered for download.

        Example:
            Informe_Maria_Gonzalez_Perez_2024-03-01.md
        """
        prefix = DOCUMENT_FILENAME_PREFIXES[self.kind.value]
        # Path separators and other unsafe characters collapse to "_"
        name = re.sub(r"[^\w.-]+", "_", self.patient_name.strip()).strip("._") or "Paciente"
        return f"{prefix}_{name}_{self.generated_at.date().isoformat()}.md"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "patient_id": self.patient_id,
            "patient_name": self.patient_name,
            "content": self.content,
            "generated_at": self.generated_at.isoformat(),
            "generation_model": self.generation_model,
        }
