"""
Patient Repository - Data Access Abstraction

This module provides the patient record store that handlers receive by
injection. There is no module-level "database": every repository instance
owns its own records.

Architecture:
    PatientRepository (Protocol)
    └── InMemoryPatientRepository → dict-backed, optionally seeded from JSON

Copy Semantics:
    Every read returns a deep copy and every write stores a deep copy.
    Mutating a returned PatientRecord never changes repository state, so
    concurrent handlers cannot leak state into each other through shared
    references.

Pipeline Position:
    [Repository] → EncounterFormatter → PromptBuilder → DocumentGenerator
     ^^^^^^^^^^
     You are here

Usage:
    repo = InMemoryPatientRepository.from_json_file("sample_patients.json")
    record = repo.get_patient_or_raise("1")

Author: Shubham Singh
Date: January 2026
"""

import copy
import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from loguru import logger

from patient_report_generation.core.exceptions import (
    DatasetLoadError,
    PatientNotFoundError,
    RecordError,
)
from patient_report_generation.core.models import (
    BackgroundInformation,
    BillingDetails,
    DateValue,
    MedicalEncounter,
    PatientRecord,
    PersonalDetails,
)


# =============================================================================
# STAGE 1: REPOSITORY PROTOCOL (INTERFACE)
# =============================================================================


@runtime_checkable
class PatientRepository(Protocol):
    """
    Protocol defining the interface for patient record repositories.

    Required Methods:
        get_patient(patient_id)          → Single record or None
        get_patient_or_raise(patient_id) → Single record or PatientNotFoundError
        list_patients()                  → All records, most recently updated first
        add_patient(...)                 → Create a record
        update_patient(patient_id, ...)  → Replace top-level blocks
        add_encounter(patient_id, ...)   → Append an encounter
        delete_patient(patient_id)       → Remove a record
    """

    def get_patient(self, patient_id: str) -> Optional[PatientRecord]:
        ...

    def get_patient_or_raise(self, patient_id: str) -> PatientRecord:
        ...

    def list_patients(self) -> List[PatientRecord]:
        ...

    def add_patient(
        self,
        personal: PersonalDetails,
        billing: Optional[BillingDetails] = None,
        background: Optional[BackgroundInformation] = None,
    ) -> PatientRecord:
        ...

    def update_patient(self, patient_id: str, **changes) -> PatientRecord:
        ...

    def add_encounter(self, patient_id: str, date: DateValue, details: str) -> PatientRecord:
        ...

    def delete_patient(self, patient_id: str) -> None:
        ...


# =============================================================================
# STAGE 2: IN-MEMORY IMPLEMENTATION
# =============================================================================


class InMemoryPatientRepository:
    """
    Patient repository held in process memory.

    What it does:
        Stores PatientRecord objects in a dict keyed by patient ID and
        hands out deep copies on every operation.

    When to use:
        - Development, demos and tests
        - Seeding from an exported JSON dataset

    Example:
        >>> repo = InMemoryPatientRepository()
        >>> created = repo.add_patient(personal)
        >>> created.encounters.append(encounter)  # does not touch the store
        >>> repo.get_patient(created.patient_id).encounter_count
        0
    """

    UPDATABLE_FIELDS = ("personal", "billing", "background")

    def __init__(self, records: Optional[Iterable[PatientRecord]] = None):
        self._records: Dict[str, PatientRecord] = {}
        self._lock = threading.Lock()

        for record in records or []:
            if not record.patient_id:
                raise RecordError("Seed record without patient_id")
            self._records[record.patient_id] = copy.deepcopy(record)

        logger.debug(f"InMemoryPatientRepository initialized | Patients: {len(self._records)}")

    # =========================================================================
    # STAGE 3: DATASET LOADING
    # =========================================================================

    @classmethod
    def from_json_file(cls, dataset_path: str) -> "InMemoryPatientRepository":
        """
        Seed a repository from a JSON list of patient records.

        Raises:
            DatasetLoadError: If the file is missing, unreadable or malformed
        """
        path = Path(dataset_path)
        if not path.exists():
            raise DatasetLoadError(str(path), "File not found")

        logger.info(f"Loading patient dataset from: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise DatasetLoadError(str(path), f"Invalid JSON: {e}")
        except PermissionError:
            raise DatasetLoadError(str(path), "Permission denied")

        if not isinstance(raw_data, list):
            raise DatasetLoadError(str(path), "Expected a JSON list of patient records")

        try:
            records = [PatientRecord.from_dict(item) for item in raw_data]
        except (KeyError, TypeError, ValueError) as e:
            raise DatasetLoadError(str(path), f"Invalid patient record: {e}")

        repository = cls(records)
        logger.info(f"Loaded {repository.total_patients} patients from dataset")
        return repository

    # =========================================================================
    # STAGE 4: READS
    # =========================================================================

    def get_patient(self, patient_id: str) -> Optional[PatientRecord]:
        """Return a copy of the record, or None if absent."""
        with self._lock:
            record = self._records.get(patient_id)
            return copy.deepcopy(record) if record else None

    def get_patient_or_raise(self, patient_id: str) -> PatientRecord:
        """
        Return a copy of the record.

        Raises:
            PatientNotFoundError: If no record has this ID
        """
        record = self.get_patient(patient_id)
        if record is None:
            raise PatientNotFoundError(patient_id)
        return record

    def list_patients(self) -> List[PatientRecord]:
        """Return copies of all records, most recently updated first."""
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        with self._lock:
            records = [copy.deepcopy(record) for record in self._records.values()]
        return sorted(records, key=lambda r: _as_utc(r.updated_at) or epoch, reverse=True)

    # =========================================================================
    # STAGE 5: WRITES
    # =========================================================================

    def add_patient(
        self,
        personal: PersonalDetails,
        billing: Optional[BillingDetails] = None,
        background: Optional[BackgroundInformation] = None,
    ) -> PatientRecord:
        """Create a record with no encounters and return a copy of it."""
        now = _now()
        record = PatientRecord(
            patient_id=f"patient-{uuid.uuid4().hex[:12]}",
            personal=personal,
            billing=billing,
            background=background,
            encounters=[],
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._records[record.patient_id] = copy.deepcopy(record)

        logger.info(f"Patient created | ID: {record.patient_id}")
        return record

    def update_patient(self, patient_id: str, **changes) -> PatientRecord:
        """
        Replace top-level blocks (personal, billing, background).

        Passing billing=None or background=None clears that block.

        Raises:
            PatientNotFoundError: If no record has this ID
            RecordError: If a change names a field that cannot be updated
        """
        unknown = [name for name in changes if name not in self.UPDATABLE_FIELDS]
        if unknown:
            raise RecordError(
                f"Cannot update fields: {unknown}",
                context={"patient_id": patient_id, "allowed": list(self.UPDATABLE_FIELDS)},
            )

        with self._lock:
            stored = self._records.get(patient_id)
            if stored is None:
                raise PatientNotFoundError(patient_id)
            for name, value in changes.items():
                setattr(stored, name, copy.deepcopy(value))
            stored.updated_at = _now()
            result = copy.deepcopy(stored)

        logger.info(f"Patient updated | ID: {patient_id} | Fields: {sorted(changes)}")
        return result

    def add_encounter(self, patient_id: str, date: DateValue, details: str) -> PatientRecord:
        """
        Append an encounter and return a copy of the updated record.

        Raises:
            PatientNotFoundError: If no record has this ID
        """
        encounter = MedicalEncounter(
            encounter_id=f"enc-{uuid.uuid4().hex[:12]}", date=date, details=details
        )
        with self._lock:
            stored = self._records.get(patient_id)
            if stored is None:
                raise PatientNotFoundError(patient_id)
            stored.encounters.append(encounter)
            stored.updated_at = _now()
            result = copy.deepcopy(stored)

        logger.info(f"Encounter added | Patient: {patient_id} | Encounter: {encounter.encounter_id}")
        return result

    def delete_patient(self, patient_id: str) -> None:
        """
        Remove a record.

        Raises:
            PatientNotFoundError: If no record has this ID
        """
        with self._lock:
            if self._records.pop(patient_id, None) is None:
                raise PatientNotFoundError(patient_id)

        logger.info(f"Patient deleted | ID: {patient_id}")

    # =========================================================================
    # STAGE 6: METRICS
    # =========================================================================

    @property
    def total_patients(self) -> int:
        with self._lock:
            return len(self._records)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
