"""
Constants for Patient Document Generation

This module centralizes every fixed string the prompt builder emits, so that
the exact output text is defined in one place and tests can assert against
the same values.

Constant Categories:
    SENTINELS         → Fallback text for missing data
    SEPARATORS        → Encounter digest separators per style
    LABELS / HEADINGS → Field labels and section titles
    MONTH_NAMES       → Spanish month names for long-form dates

Author: Shubham Singh
Date: January 2026
"""

from typing import Dict, Tuple

from patient_report_generation.core.enums import DigestStyle


# =============================================================================
# STAGE 1: SENTINEL TEXT
# =============================================================================
# Every optional value has an explicit fallback. Nothing is silently omitted
# or rendered as "None".

NOT_RECORDED = "No registrado"

NO_BACKGROUND_SENTINEL = "No se proporcionaron antecedentes."

NO_DETAILS_SENTINEL = "Sin detalles registrados."

NO_ENCOUNTERS_SENTINELS: Dict[DigestStyle, str] = {
    DigestStyle.SUMMARY: "Sin consultas registradas.",
    DigestStyle.REPORT: (
        "No se han registrado consultas médicas para este paciente hasta la fecha."
    ),
}

CONCLUSION_PLACEHOLDER = "[Completar por el médico tratante]"


# =============================================================================
# STAGE 2: ENCOUNTER DIGEST SEPARATORS
# =============================================================================

ENCOUNTER_SEPARATORS: Dict[DigestStyle, str] = {
    DigestStyle.SUMMARY: "\n\n---\n\n",
    DigestStyle.REPORT: "\n------------------------------------\n",
}

SECTION_SEPARATOR = "\n\n"


# =============================================================================
# STAGE 3: FIELD LABELS
# =============================================================================

# -----------------------------------------------------------------------------
# 3.1 Personal details
# -----------------------------------------------------------------------------
LABEL_FULL_NAME = "Nombre completo"
LABEL_BIRTH_DATE = "Fecha de nacimiento"
LABEL_NATIONAL_ID = "Documento de identidad"
LABEL_PHONE_PRIMARY = "Teléfono principal"
LABEL_PHONE_SECONDARY = "Teléfono secundario"
LABEL_EMAIL = "Correo electrónico"

# -----------------------------------------------------------------------------
# 3.2 Billing details
# -----------------------------------------------------------------------------
LABEL_TAX_ID = "RUC"
LABEL_FISCAL_ADDRESS = "Dirección fiscal"
LABEL_BILLING_PHONE = "Teléfono de facturación"
LABEL_BILLING_EMAIL = "Correo de facturación"

# -----------------------------------------------------------------------------
# 3.3 Background information
# -----------------------------------------------------------------------------
LABEL_PERSONAL_HISTORY = "Antecedentes personales"
LABEL_ALLERGIES = "Alergias"
LABEL_HABITUAL_MEDICATION = "Medicación habitual"

BACKGROUND_LABELS: Tuple[str, str, str] = (
    LABEL_PERSONAL_HISTORY,
    LABEL_ALLERGIES,
    LABEL_HABITUAL_MEDICATION,
)

# -----------------------------------------------------------------------------
# 3.4 Encounter labels
# -----------------------------------------------------------------------------
SUMMARY_DATE_LABEL = "Fecha"
REPORT_DATE_LABEL = "### Consulta del"


# =============================================================================
# STAGE 4: SECTION HEADINGS
# =============================================================================

HEADING_PATIENT = "DATOS DEL PACIENTE"
HEADING_BILLING = "DATOS DE FACTURACIÓN"
HEADING_BACKGROUND = "ANTECEDENTES Y MEDICACIÓN"
HEADING_ENCOUNTERS = "HISTORIAL DE CONSULTAS"
HEADING_CONCLUSIONS = "CONCLUSIONES"

CONCLUSION_FIELDS: Tuple[str, str, str] = (
    "Impresión diagnóstica",
    "Plan terapéutico",
    "Recomendaciones",
)


# =============================================================================
# STAGE 5: DATE RENDERING
# =============================================================================

MONTH_NAMES: Dict[int, str] = {
    1: "enero",
    2: "febrero",
    3: "marzo",
    4: "abril",
    5: "mayo",
    6: "junio",
    7: "julio",
    8: "agosto",
    9: "septiembre",
    10: "octubre",
    11: "noviembre",
    12: "diciembre",
}


# =============================================================================
# STAGE 6: OUTPUT FILES
# =============================================================================

DOCUMENT_FILENAME_PREFIXES = {
    "summary": "Resumen",
    "report": "Informe",
}
