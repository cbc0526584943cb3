"""
Core Layer - Domain Models, Enums, Constants and Configuration

This layer contains PURE, side-effect-free components that form the
foundation of the patient document system.

Submodules:
    models.py      → Data structures (PatientRecord, PromptDocument, ...)
    enums.py       → Enumerations (DocumentKind, DigestStyle, Role)
    constants.py   → Sentinels, labels, separators
    config.py      → Configuration dataclass
    exceptions.py  → Domain-specific exceptions
    permissions.py → Capabilities passed into handlers

Dependency Rule:
    This layer depends on NOTHING else in the package.
    All other layers may depend on this layer.

Author: Shubham Singh
Date: January 2026
"""

from patient_report_generation.core.models import (
    PersonalDetails,
    BillingDetails,
    BackgroundInformation,
    MedicalEncounter,
    PatientRecord,
    PromptSection,
    PromptDocument,
    GeneratedDocument,
)
from patient_report_generation.core.enums import DocumentKind, DigestStyle, Role
from patient_report_generation.core.config import PipelineConfiguration
from patient_report_generation.core.permissions import Capabilities
from patient_report_generation.core.exceptions import (
    PatientDocumentError,
    ConfigurationError,
    PermissionDeniedError,
    PatientNotFoundError,
    GenerationError,
    LLMError,
    DocumentSaveError,
)

__all__ = [
    # Models
    "PersonalDetails",
    "BillingDetails",
    "BackgroundInformation",
    "MedicalEncounter",
    "PatientRecord",
    "PromptSection",
    "PromptDocument",
    "GeneratedDocument",
    # Enums
    "DocumentKind",
    "DigestStyle",
    "Role",
    # Configuration
    "PipelineConfiguration",
    "Capabilities",
    # Exceptions
    "PatientDocumentError",
    "ConfigurationError",
    "PermissionDeniedError",
    "PatientNotFoundError",
    "GenerationError",
    "LLMError",
    "DocumentSaveError",
]
