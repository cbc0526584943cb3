"""
Repository Layer - Patient Record Access

This layer provides the patient record store injected into handlers.
The repository pattern:
    1. Replaces the global mock list with an explicit, owned store
    2. Returns copies so callers never share mutable state
    3. Can be seeded from an exported JSON dataset

Submodules:
    patient_repository.py → Repository protocol + in-memory implementation

Dependency Rule:
    This layer depends on: core (models, exceptions)
    This layer is used by: pipeline

Author: Shubham Singh
Date: January 2026
"""

from patient_report_generation.repository.patient_repository import (
    PatientRepository,
    InMemoryPatientRepository,
)

__all__ = [
    "PatientRepository",
    "InMemoryPatientRepository",
]
