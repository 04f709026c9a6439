from datetime import date, datetime, timedelta, timezone

from src.tasktrack.normalizer import normalize, parse_datetime, strip_diacritics, utc_or_none


class TestTextFields:
    def test_trailing_whitespace_is_ignored(self):
        for s in ["Buy milk", "  Buy milk", "x", ""]:
            assert normalize("title", s) == normalize("title", s + " ")

    def test_case_and_accents_are_folded(self):
        assert normalize("title", "Café") == normalize("title", "cafe")
        assert normalize("title", "É") == normalize("title", "e")
        assert normalize("description", "Mua sữa tươi") == "mua sua tuoi"

    def test_absent_value_is_empty_string(self):
        assert normalize("title", None) == ""
        assert normalize("description", None) == ""

    def test_strip_diacritics_keeps_base_letters(self):
        assert strip_diacritics("Crème brûlée") == "Creme brulee"


class TestPriority:
    def test_trimmed_and_lowercased(self):
        assert normalize("priority", " HIGH ") == "high"
        assert normalize("priority", "Low") == "low"

    def test_missing_defaults_to_medium(self):
        assert normalize("priority", None) == "medium"
        assert normalize("priority", "") == "medium"
        assert normalize("priority", "   ") == "medium"


class TestDueDate:
    def test_same_calendar_day_normalizes_identically(self):
        morning = normalize("due_date", "2025-03-01T08:00:00")
        night = normalize("due_date", "2025-03-01T23:59:59")
        assert morning == night == "2025-03-01"
        assert normalize("due_date", "2025-03-01") == "2025-03-01"

    def test_timezone_aware_values_use_the_utc_day(self):
        assert normalize("due_date", "2025-03-01T10:00:00Z") == "2025-03-01"
        assert normalize("due_date", "2025-03-01T23:30:00-05:00") == "2025-03-02"

    def test_date_and_datetime_objects(self):
        assert normalize("due_date", date(2025, 3, 1)) == "2025-03-01"
        assert normalize("due_date", datetime(2025, 3, 1, 17, 45)) == "2025-03-01"

    def test_unparseable_or_absent_degrades_to_none(self):
        assert normalize("due_date", "not a date") is None
        assert normalize("due_date", "2025-13-45") is None
        assert normalize("due_date", None) is None
        assert normalize("due_date", "") is None
        assert normalize("due_date", 12345) is None

    def test_out_of_range_after_utc_conversion_degrades_to_none(self):
        assert normalize("due_date", "0001-01-01T00:00:00+05:00") is None
        assert normalize("due_date", "9999-12-31T23:00:00-05:00") is None


class TestOtherFields:
    def test_identity(self):
        marker = object()
        assert normalize("completed", True) is True
        assert normalize("id", "abc") == "abc"
        assert normalize("whatever", marker) is marker


class TestParseDatetime:
    def test_zulu_suffix_is_utc(self):
        parsed = parse_datetime("2025-01-31T13:45:00Z")
        assert parsed == datetime(2025, 1, 31, 13, 45, tzinfo=timezone.utc)

    def test_date_only_is_midnight(self):
        assert parse_datetime("2025-01-31") == datetime(2025, 1, 31)

    def test_garbage_is_none(self):
        assert parse_datetime("tomorrow") is None
        assert parse_datetime(["2025-01-31"]) is None


class TestUtcOrNone:
    def test_converts_aware_values(self):
        moment = datetime(2025, 3, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert utc_or_none(moment) == datetime(2025, 3, 2, 4, 30, tzinfo=timezone.utc)

    def test_calendar_edges_are_none(self):
        assert utc_or_none(datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5)))) is None
        assert utc_or_none(datetime(9999, 12, 31, 23, tzinfo=timezone(timedelta(hours=-5)))) is None
