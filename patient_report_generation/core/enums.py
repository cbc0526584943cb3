"""
Enumerations for Patient Document Generation

Enumeration Categories:
    DocumentKind → Which narrative document is being produced
    DigestStyle  → How the encounter history is rendered
    Role         → Staff roles used to derive capabilities

Author: Shubham Singh
Date: January 2026
"""

from enum import Enum


# =============================================================================
# STAGE 1: DOCUMENT KIND
# =============================================================================


class DocumentKind(str, Enum):
    """
    The two narrative documents the pipeline can produce.

    Each kind maps to the single string field the external generator
    must populate in its reply.
    """

    SUMMARY = "summary"
    """Concise clinical summary of the patient record."""

    REPORT = "report"
    """Full Markdown medical report with blank conclusions for the physician."""

    @property
    def output_field(self) -> str:
        """Name of the field returned by the text-generation collaborator."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> "DocumentKind":
        """
        Convert string to DocumentKind with case-insensitive matching.

        Raises:
            ValueError: If string doesn't match any kind
        """
        normalized = value.strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unknown document kind: '{value}'. Valid kinds: {[k.value for k in cls]}")


# =============================================================================
# STAGE 2: DIGEST STYLE
# =============================================================================
# Summary and report prompts render the same encounters differently.


class DigestStyle(str, Enum):
    """
    Rendering style for the encounter digest.

    Style Comparison:
        SUMMARY: short date label, "---" separator, short empty sentinel
        REPORT:  long-form date heading, dashed rule, full-sentence sentinel
    """

    SUMMARY = "summary"
    REPORT = "report"


# =============================================================================
# STAGE 3: STAFF ROLE
# =============================================================================


class Role(str, Enum):
    """Staff roles recognised by the capability model."""

    DOCTOR = "doctor"
    SECRETARY = "secretary"
