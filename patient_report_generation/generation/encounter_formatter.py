"""
Encounter Formatter - Chronological Encounter Digest

This module turns an unordered list of medical encounters into the text
digest embedded in both prompt documents.

Rules:
    1. Encounters are stably sorted newest first; ties keep input order
    2. Each encounter renders as a date label followed by its notes
    3. Blocks are joined by a style-specific separator
    4. An empty list renders a style-specific sentinel
    5. A date that cannot be parsed is shown verbatim and never raises

Pipeline Position:
    Repository → [EncounterFormatter] → PromptBuilder → DocumentGenerator
                  ^^^^^^^^^^^^^^^^^^
                  You are here

Author: Shubham Singh
Date: January 2026
"""

from datetime import date, datetime, time, timezone
from typing import List, Optional, Sequence, Tuple

from patient_report_generation.core.constants import (
    ENCOUNTER_SEPARATORS,
    MONTH_NAMES,
    NO_DETAILS_SENTINEL,
    NO_ENCOUNTERS_SENTINELS,
    NOT_RECORDED,
    REPORT_DATE_LABEL,
    SUMMARY_DATE_LABEL,
)
from patient_report_generation.core.enums import DigestStyle
from patient_report_generation.core.models import DateValue, MedicalEncounter


# =============================================================================
# STAGE 1: DATE PARSING
# =============================================================================


def parse_encounter_date(value: DateValue) -> Optional[datetime]:
    """
    Parse a stored encounter date.

    Accepts datetime, date, and ISO-8601 strings (with or without time,
    with a trailing "Z" or an explicit offset).

    Args:
        value: Raw stored date

    Returns:
        Parsed datetime (as written, timezone untouched), or None when the
        value cannot be interpreted
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _sort_instant(parsed: datetime) -> float:
    # Naive values are treated as UTC so they compare with aware ones.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def format_short_date(value: date) -> str:
    """Render a date as DD/MM/YYYY."""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def format_long_date(value: date) -> str:
    """
    Render a date in Spanish long form.

    Example:
        >>> format_long_date(date(2024, 3, 1))
        '1 de marzo de 2024'
    """
    return f"{value.day} de {MONTH_NAMES[value.month]} de {value.year}"


# =============================================================================
# STAGE 2: ORDERING
# =============================================================================


def sort_encounters(encounters: Sequence[MedicalEncounter]) -> List[MedicalEncounter]:
    """
    Return encounters newest first.

    The sort is stable: encounters with equal dates keep their input order.
    Encounters with unparsable dates are placed after all dated ones,
    also in input order.
    """

    def sort_key(encounter: MedicalEncounter) -> Tuple[int, float]:
        parsed = parse_encounter_date(encounter.date)
        if parsed is None:
            return (1, 0.0)
        return (0, -_sort_instant(parsed))

    return sorted(encounters, key=sort_key)


def find_unparsable_dates(encounters: Sequence[MedicalEncounter]) -> List[str]:
    """Return the IDs of encounters whose date could not be parsed."""
    return [
        encounter.encounter_id
        for encounter in encounters
        if parse_encounter_date(encounter.date) is None
    ]


# =============================================================================
# STAGE 3: RENDERING
# =============================================================================


def _date_label(encounter: MedicalEncounter, style: DigestStyle) -> str:
    parsed = parse_encounter_date(encounter.date)

    if parsed is None:
        raw = str(encounter.date).strip() if encounter.date is not None else ""
        shown = raw or NOT_RECORDED
    elif style == DigestStyle.REPORT:
        shown = format_long_date(parsed.date())
    else:
        shown = format_short_date(parsed.date())

    if style == DigestStyle.REPORT:
        return f"{REPORT_DATE_LABEL} {shown}"
    return f"{SUMMARY_DATE_LABEL}: {shown}"


def _render_encounter(encounter: MedicalEncounter, style: DigestStyle) -> str:
    details = (encounter.details or "").strip() or NO_DETAILS_SENTINEL
    return f"{_date_label(encounter, style)}\n{details}"


def format_encounters(
    encounters: Sequence[MedicalEncounter], style: DigestStyle = DigestStyle.SUMMARY
) -> str:
    """
    Build the chronological encounter digest.

    Algorithm:
        1. Return the style sentinel for an empty list
        2. Stable-sort newest first
        3. Render one block per encounter
        4. Join blocks with the style separator

    Args:
        encounters: Encounters in stored (arbitrary) order
        style: SUMMARY or REPORT rendering

    Returns:
        Digest text. Never raises on malformed dates.

    Example:
        >>> format_encounters([], DigestStyle.SUMMARY)
        'Sin consultas registradas.'
    """
    if not encounters:
        return NO_ENCOUNTERS_SENTINELS[style]

    blocks = [_render_encounter(encounter, style) for encounter in sort_encounters(encounters)]
    return ENCOUNTER_SEPARATORS[style].join(blocks)
