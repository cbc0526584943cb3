"""Tests for the encounter digest: ordering, labels, sentinels and malformed dates."""

from datetime import date, datetime, timedelta, timezone

from patient_report_generation.core.constants import (
    ENCOUNTER_SEPARATORS,
    NO_DETAILS_SENTINEL,
    NO_ENCOUNTERS_SENTINELS,
)
from patient_report_generation.core.enums import DigestStyle
from patient_report_generation.core.models import MedicalEncounter
from patient_report_generation.generation.encounter_formatter import (
    find_unparsable_dates,
    format_encounters,
    format_long_date,
    format_short_date,
    parse_encounter_date,
    sort_encounters,
)


def _enc(encounter_id: str, when, details: str = "") -> MedicalEncounter:
    return MedicalEncounter(encounter_id=encounter_id, date=when, details=details or f"Notas {encounter_id}")


class TestParseEncounterDate:
    """Tests for parse_encounter_date."""

    def test_plain_iso_date(self):
        assert parse_encounter_date("2024-03-01") == datetime(2024, 3, 1)

    def test_trailing_z_is_utc(self):
        parsed = parse_encounter_date("2024-03-01T10:00:00Z")
        assert parsed == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)

    def test_date_object(self):
        assert parse_encounter_date(date(2024, 3, 1)) == datetime(2024, 3, 1)

    def test_garbage_returns_none(self):
        assert parse_encounter_date("ayer por la tarde") is None

    def test_blank_returns_none(self):
        assert parse_encounter_date("   ") is None


class TestDateFormatting:
    def test_short_date(self):
        assert format_short_date(date(2024, 3, 1)) == "01/03/2024"

    def test_long_date(self):
        assert format_long_date(date(2024, 3, 1)) == "1 de marzo de 2024"
        assert format_long_date(date(1985, 12, 25)) == "25 de diciembre de 1985"


class TestSortEncounters:
    """Tests for sort_encounters."""

    def test_newest_first(self):
        encounters = [_enc("a", "2023-01-01"), _enc("b", "2024-06-01"), _enc("c", "2023-09-15")]
        assert [e.encounter_id for e in sort_encounters(encounters)] == ["b", "c", "a"]

    def test_ties_keep_input_order(self):
        encounters = [_enc("first", "2024-01-01"), _enc("second", "2024-01-01"), _enc("third", "2024-01-01")]
        assert [e.encounter_id for e in sort_encounters(encounters)] == ["first", "second", "third"]

    def test_unparsable_dates_sort_last_in_input_order(self):
        encounters = [_enc("bad1", "n/a"), _enc("good", "2020-01-01"), _enc("bad2", "??")]
        assert [e.encounter_id for e in sort_encounters(encounters)] == ["good", "bad1", "bad2"]

    def test_aware_and_naive_compare_as_utc(self):
        earlier_aware = datetime(2024, 3, 1, 9, tzinfo=timezone(timedelta(hours=-5)))  # 14:00 UTC
        later_naive = datetime(2024, 3, 1, 15)  # treated as 15:00 UTC
        encounters = [_enc("aware", earlier_aware), _enc("naive", later_naive)]
        assert [e.encounter_id for e in sort_encounters(encounters)] == ["naive", "aware"]

    def test_does_not_mutate_input(self):
        encounters = [_enc("a", "2023-01-01"), _enc("b", "2024-01-01")]
        sort_encounters(encounters)
        assert [e.encounter_id for e in encounters] == ["a", "b"]


class TestFormatEncounters:
    """Tests for format_encounters."""

    def test_empty_sentinels_differ_by_style(self):
        summary = format_encounters([], DigestStyle.SUMMARY)
        report = format_encounters([], DigestStyle.REPORT)
        assert summary == NO_ENCOUNTERS_SENTINELS[DigestStyle.SUMMARY]
        assert report == NO_ENCOUNTERS_SENTINELS[DigestStyle.REPORT]
        assert summary != report

    def test_one_block_per_encounter(self):
        encounters = [_enc(str(i), f"2024-0{i}-01") for i in range(1, 6)]
        for style in DigestStyle:
            text = format_encounters(encounters, style)
            assert len(text.split(ENCOUNTER_SEPARATORS[style])) == len(encounters)

    def test_summary_labels_and_separator(self):
        encounters = [_enc("jan", "2024-01-01", "Enero"), _enc("mar", "2024-03-01", "Marzo")]
        text = format_encounters(encounters, DigestStyle.SUMMARY)
        assert text == "Fecha: 01/03/2024\nMarzo\n\n---\n\nFecha: 01/01/2024\nEnero"

    def test_report_labels_and_separator(self):
        encounters = [_enc("jan", "2024-01-01", "Enero"), _enc("mar", "2024-03-01", "Marzo")]
        text = format_encounters(encounters, DigestStyle.REPORT)
        assert text == (
            "### Consulta del 1 de marzo de 2024\nMarzo"
            "\n------------------------------------\n"
            "### Consulta del 1 de enero de 2024\nEnero"
        )

    def test_malformed_date_rendered_verbatim(self):
        text = format_encounters([_enc("x", "fecha desconocida", "Notas")], DigestStyle.SUMMARY)
        assert text == "Fecha: fecha desconocida\nNotas"

    def test_blank_details_use_sentinel(self):
        encounter = MedicalEncounter(encounter_id="x", date="2024-01-01", details="   ")
        assert format_encounters([encounter]).endswith(NO_DETAILS_SENTINEL)

    def test_default_style_is_summary(self):
        assert format_encounters([]) == NO_ENCOUNTERS_SENTINELS[DigestStyle.SUMMARY]


def test_find_unparsable_dates():
    encounters = [_enc("ok", "2024-01-01"), _enc("bad", "31/02/2024"), _enc("empty", "")]
    assert find_unparsable_dates(encounters) == ["bad", "empty"]
