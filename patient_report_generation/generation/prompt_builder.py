"""
Prompt Builder - Summary and Report Prompt Documents

This module assembles structured patient data into the two prompt
documents handed to the text-generation collaborator:
    1. A concise SUMMARY prompt
    2. A full Markdown REPORT prompt with blank conclusions

How It Is Built:
    Each section is a small function taking the typed input and returning
    a PromptSection, or None when the section must be left out. A document
    is the ordered sequence of those functions with the None results
    dropped. Conditional-section policy (billing only with a tax ID) lives
    in exactly one function and can be tested on its own.

Pipeline Position:
    Repository → EncounterFormatter → [PromptBuilder] → DocumentGenerator
                                       ^^^^^^^^^^^^^^^
                                       You are here

Author: Shubham Singh
Date: January 2026
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from patient_report_generation.core.constants import (
    CONCLUSION_FIELDS,
    CONCLUSION_PLACEHOLDER,
    HEADING_BACKGROUND,
    HEADING_BILLING,
    HEADING_CONCLUSIONS,
    HEADING_ENCOUNTERS,
    HEADING_PATIENT,
    LABEL_ALLERGIES,
    LABEL_BILLING_EMAIL,
    LABEL_BILLING_PHONE,
    LABEL_BIRTH_DATE,
    LABEL_EMAIL,
    LABEL_FISCAL_ADDRESS,
    LABEL_FULL_NAME,
    LABEL_HABITUAL_MEDICATION,
    LABEL_NATIONAL_ID,
    LABEL_PERSONAL_HISTORY,
    LABEL_PHONE_PRIMARY,
    LABEL_PHONE_SECONDARY,
    LABEL_TAX_ID,
    NO_BACKGROUND_SENTINEL,
    NOT_RECORDED,
)
from patient_report_generation.core.enums import DigestStyle, DocumentKind
from patient_report_generation.core.exceptions import PromptError
from patient_report_generation.core.models import (
    BackgroundInformation,
    BillingDetails,
    MedicalEncounter,
    PatientRecord,
    PersonalDetails,
    PromptDocument,
    PromptSection,
)
from patient_report_generation.generation.encounter_formatter import (
    format_encounters,
    format_long_date,
    format_short_date,
)


# =============================================================================
# STAGE 1: PROMPT TEMPLATES
# =============================================================================

SUMMARY_INSTRUCTIONS = """Eres un asistente de IA que resume historiales médicos para médicos.

**REGLAS:**
1. Redacta un resumen clínico conciso y preciso, en español
2. Usa únicamente la información proporcionada; no inventes datos
3. Las consultas aparecen de la más reciente a la más antigua
4. Destaca los datos de riesgo clínico (por ejemplo, reacciones adversas conocidas) cuando estén registrados

Resume el siguiente historial clínico:"""

SUMMARY_CLOSING = "Responde únicamente con el resumen, sin repetir estas instrucciones."

REPORT_INSTRUCTIONS = """Eres un asistente de IA que redacta informes médicos para médicos.

**REGLAS:**
1. Redacta en español, en formato Markdown, con encabezados de sección
2. Usa únicamente la información proporcionada; no inventes datos
3. Mantén el historial de consultas ordenado de la más reciente a la más antigua
4. El informe debe ser bien estructurado, fácil de leer y contener toda la información relevante

Genera un informe médico completo para el paciente {full_name} a partir de la siguiente información:"""

REPORT_CLOSING = (
    "Conserva la sección {heading} tal como está, con los marcadores "
    '"{placeholder}", para que el médico tratante la complete.'
)


# =============================================================================
# STAGE 2: TYPED INPUT
# =============================================================================


@dataclass(frozen=True)
class PromptInput:
    """
    Snapshot of the data a prompt is built from.

    Encounters are stored as a tuple so the snapshot cannot be changed
    after it is taken.
    """

    personal: PersonalDetails
    billing: Optional[BillingDetails] = None
    background: Optional[BackgroundInformation] = None
    encounters: Tuple[MedicalEncounter, ...] = ()

    @classmethod
    def from_record(cls, record: PatientRecord) -> "PromptInput":
        return cls(
            personal=record.personal,
            billing=record.billing,
            background=record.background,
            encounters=tuple(record.encounters),
        )


SectionBuilder = Callable[[PromptInput, DigestStyle], Optional[PromptSection]]


# =============================================================================
# STAGE 3: SECTION BUILDERS
# =============================================================================


def _value(text: Optional[str]) -> str:
    """Return the trimmed value or the not-recorded sentinel."""
    if text is None:
        return NOT_RECORDED
    stripped = str(text).strip()
    return stripped or NOT_RECORDED


def _heading(title: str, style: DigestStyle) -> str:
    if style == DigestStyle.REPORT:
        return f"## {title}"
    return f"**{title}:**"


def _field_lines(pairs: Sequence[Tuple[str, Optional[str]]]) -> str:
    return "\n".join(f"- {label}: {_value(value)}" for label, value in pairs)


def patient_section(data: PromptInput, style: DigestStyle) -> Optional[PromptSection]:
    """Identity and contact block. Always emitted."""
    personal = data.personal
    if style == DigestStyle.REPORT:
        birth_date = format_long_date(personal.birth_date)
    else:
        birth_date = format_short_date(personal.birth_date)

    body = _field_lines(
        [
            (LABEL_FULL_NAME, personal.full_name),
            (LABEL_BIRTH_DATE, birth_date),
            (LABEL_NATIONAL_ID, personal.national_id),
            (LABEL_PHONE_PRIMARY, personal.phone_primary),
            (LABEL_PHONE_SECONDARY, personal.phone_secondary),
            (LABEL_EMAIL, personal.email),
        ]
    )
    return PromptSection(key="patient", title=_heading(HEADING_PATIENT, style), body=body)


def billing_section(data: PromptInput, style: DigestStyle) -> Optional[PromptSection]:
    """
    Billing block.

    Emitted only when a non-blank tax ID is recorded. Otherwise the whole
    section is left out rather than filled with placeholders.
    """
    billing = data.billing
    if billing is None or not billing.has_tax_id:
        return None

    body = _field_lines(
        [
            (LABEL_TAX_ID, billing.tax_id),
            (LABEL_FISCAL_ADDRESS, billing.fiscal_address),
            (LABEL_BILLING_PHONE, billing.billing_phone),
            (LABEL_BILLING_EMAIL, billing.billing_email),
        ]
    )
    return PromptSection(key="billing", title=_heading(HEADING_BILLING, style), body=body)


def background_section(data: PromptInput, style: DigestStyle) -> Optional[PromptSection]:
    """Background block, or the no-background sentinel when absent as a unit."""
    background = data.background
    if background is None:
        body = NO_BACKGROUND_SENTINEL
    else:
        body = _field_lines(
            [
                (LABEL_PERSONAL_HISTORY, background.personal_history),
                (LABEL_ALLERGIES, background.allergies),
                (LABEL_HABITUAL_MEDICATION, background.habitual_medication),
            ]
        )
    return PromptSection(key="background", title=_heading(HEADING_BACKGROUND, style), body=body)


def encounters_section(data: PromptInput, style: DigestStyle) -> Optional[PromptSection]:
    """Encounter digest, newest first."""
    return PromptSection(
        key="encounters",
        title=_heading(HEADING_ENCOUNTERS, style),
        body=format_encounters(data.encounters, style),
    )


def conclusions_section(data: PromptInput, style: DigestStyle) -> Optional[PromptSection]:
    """Blank conclusions left for the physician."""
    body = "\n".join(f"- {label}: {CONCLUSION_PLACEHOLDER}" for label in CONCLUSION_FIELDS)
    return PromptSection(key="conclusions", title=_heading(HEADING_CONCLUSIONS, style), body=body)


SUMMARY_SECTIONS: Tuple[SectionBuilder, ...] = (
    patient_section,
    background_section,
    encounters_section,
)

REPORT_SECTIONS: Tuple[SectionBuilder, ...] = (
    patient_section,
    billing_section,
    background_section,
    encounters_section,
    conclusions_section,
)


def assemble_sections(
    data: PromptInput, builders: Sequence[SectionBuilder], style: DigestStyle
) -> Tuple[PromptSection, ...]:
    """Run each section builder in order and keep the sections that were emitted."""
    sections = (builder(data, style) for builder in builders)
    return tuple(section for section in sections if section is not None)


# =============================================================================
# STAGE 4: PROMPT BUILDER CLASS
# =============================================================================


class PromptBuilder:
    """
    Constructs summary and report prompt documents.

    What it does:
        Runs the section sequence for a document kind and wraps the result
        with the kind's instructions and closing text.

    Why it exists:
        1. Prompts can be tested without LLM calls
        2. Section sequences can be swapped for tests or new document kinds

    Example:
        >>> builder = PromptBuilder()
        >>> document = builder.build_summary_prompt(personal, None, encounters)
        >>> print(document.text)  # Ready for LLM
    """

    def __init__(
        self,
        summary_sections: Sequence[SectionBuilder] = SUMMARY_SECTIONS,
        report_sections: Sequence[SectionBuilder] = REPORT_SECTIONS,
    ):
        self._summary_sections = tuple(summary_sections)
        self._report_sections = tuple(report_sections)

    def build_summary_prompt(
        self,
        personal: PersonalDetails,
        background: Optional[BackgroundInformation],
        encounters: Sequence[MedicalEncounter],
    ) -> PromptDocument:
        """
        Build the concise summary prompt.

        Args:
            personal: Patient identity
            background: Background block, or None when absent
            encounters: Encounters in any order

        Returns:
            PromptDocument whose output field is "summary"
        """
        data = PromptInput(
            personal=personal, background=background, encounters=tuple(encounters)
        )
        return PromptDocument(
            kind=DocumentKind.SUMMARY,
            instructions=SUMMARY_INSTRUCTIONS,
            sections=assemble_sections(data, self._summary_sections, DigestStyle.SUMMARY),
            closing=SUMMARY_CLOSING,
        )

    def build_report_prompt(
        self,
        personal: PersonalDetails,
        billing: Optional[BillingDetails],
        background: Optional[BackgroundInformation],
        encounters: Sequence[MedicalEncounter],
    ) -> PromptDocument:
        """
        Build the full report prompt.

        STAGE 4.1: Snapshot the input
        STAGE 4.2: Run the report section sequence (billing may drop out)
        STAGE 4.3: Wrap with instructions naming the patient

        Returns:
            PromptDocument whose output field is "report"
        """
        data = PromptInput(
            personal=personal,
            billing=billing,
            background=background,
            encounters=tuple(encounters),
        )
        return PromptDocument(
            kind=DocumentKind.REPORT,
            instructions=REPORT_INSTRUCTIONS.format(full_name=_value(personal.full_name)),
            sections=assemble_sections(data, self._report_sections, DigestStyle.REPORT),
            closing=REPORT_CLOSING.format(
                heading=HEADING_CONCLUSIONS, placeholder=CONCLUSION_PLACEHOLDER
            ),
        )

    def build_for_record(self, record: PatientRecord, kind: DocumentKind) -> PromptDocument:
        """
        Build the prompt of the given kind for a whole patient record.

        Raises:
            PromptError: If the kind is not supported
        """
        if kind == DocumentKind.SUMMARY:
            return self.build_summary_prompt(record.personal, record.background, record.encounters)
        if kind == DocumentKind.REPORT:
            return self.build_report_prompt(
                record.personal, record.billing, record.background, record.encounters
            )
        raise PromptError(f"Unsupported document kind: {kind}", context={"kind": kind})


# =============================================================================
# STAGE 5: MODULE-LEVEL ENTRY POINTS
# =============================================================================

_default_builder = PromptBuilder()


def build_summary_prompt(
    personal: PersonalDetails,
    background: Optional[BackgroundInformation],
    encounters: Sequence[MedicalEncounter],
) -> PromptDocument:
    """Build the summary prompt with the default section sequence."""
    return _default_builder.build_summary_prompt(personal, background, encounters)


def build_report_prompt(
    personal: PersonalDetails,
    billing: Optional[BillingDetails],
    background: Optional[BackgroundInformation],
    encounters: Sequence[MedicalEncounter],
) -> PromptDocument:
    """Build the report prompt with the default section sequence."""
    return _default_builder.build_report_prompt(personal, billing, background, encounters)
