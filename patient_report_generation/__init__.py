"""
Patient Report Generation Module

Turns structured patient records (identity, optional billing, optional
background, encounters) into two AI-generated documents: a concise
summary and a full Markdown medical report.

Architecture Overview:
    patient_report_generation/
    ├── core/           → Models, enums, constants, config, capabilities (Layer 0 - Pure)
    ├── repository/     → Patient record store (Layer 1 - Infrastructure)
    ├── generation/     → Encounter digest, prompts, generator (Layer 2 - Business Logic)
    ├── clients/        → LLM client abstractions (Layer 3 - Infrastructure)
    └── pipeline.py     → Main orchestrator (Layer 4 - Public API)

Quick Start:
    from patient_report_generation import PatientDocumentPipeline, Capabilities

    pipeline = PatientDocumentPipeline.from_environment()
    report = pipeline.generate_patient_report("1", Capabilities.full_access())

Author: Shubham Singh
Date: January 2026
"""

__version__ = "1.0.0"
__author__ = "Shubham Singh"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================

# Main Entry Point
from patient_report_generation.pipeline import PatientDocumentPipeline

# Core Models
from patient_report_generation.core.models import (
    PersonalDetails,
    BillingDetails,
    BackgroundInformation,
    MedicalEncounter,
    PatientRecord,
    PromptDocument,
    GeneratedDocument,
)

# Enums and Capabilities
from patient_report_generation.core.enums import DocumentKind, DigestStyle, Role
from patient_report_generation.core.permissions import Capabilities

# Configuration
from patient_report_generation.core.config import PipelineConfiguration

# Pure assembly functions
from patient_report_generation.generation import (
    format_encounters,
    build_summary_prompt,
    build_report_prompt,
)

__all__ = [
    # Main Entry Point (use this!)
    "PatientDocumentPipeline",
    # Core Models
    "PersonalDetails",
    "BillingDetails",
    "BackgroundInformation",
    "MedicalEncounter",
    "PatientRecord",
    "PromptDocument",
    "GeneratedDocument",
    # Enums and Capabilities
    "DocumentKind",
    "DigestStyle",
    "Role",
    "Capabilities",
    # Configuration
    "PipelineConfiguration",
    # Assembly functions
    "format_encounters",
    "build_summary_prompt",
    "build_report_prompt",
]
