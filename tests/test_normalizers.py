"""Tests for workbook value normalizers."""
from datetime import datetime, timezone

import pytest

from app.services.normalizers import (
    GENDER_KEYWORDS,
    cell_to_string,
    currency_to_integer,
    event_groups_from_text,
    event_name_matches_group,
    infer_gender,
    infer_program_scope,
    map_division_code,
    match_keywords,
    nullify_empty_string,
    parse_date,
    parse_float,
    percentage_to_decimal,
    percentile_range,
    primary_specialty_from_text,
    remove_null_values,
    specific_event_names_from_text,
)


@pytest.mark.parametrize("value", [None, "", "   ", "-"])
def test_nullify_empty_string_blank_values(value):
    """Blank, whitespace and dash cells become None."""
    assert nullify_empty_string(value) is None


def test_nullify_empty_string_passes_values_through():
    assert nullify_empty_string("Big Ten") == "Big Ten"


def test_remove_null_values():
    assert remove_null_values({"a": 1, "b": None, "c": 0}) == {"a": 1, "c": 0}


@pytest.mark.parametrize(
    "value, expected",
    [("45%", 0.45), ("45", 0.45), (0.45, 0.45), ("0.45", 0.45), ("100%", 1.0), (" 7.5 % ", 0.075)],
)
def test_percentage_to_decimal(value, expected):
    assert percentage_to_decimal(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "-", "", "n/a"])
def test_percentage_to_decimal_invalid(value):
    assert percentage_to_decimal(value) is None


def test_percentile_range():
    assert percentile_range("600-700") == {"min": 600, "max": 700}
    assert percentile_range(" 21 - 27 ") == {"min": 21, "max": 27}


def test_percentile_range_halves_fail_independently():
    assert percentile_range("600-abc") == {"min": 600, "max": None}
    assert percentile_range("-") == {"min": None, "max": None}
    assert percentile_range("600") == {"min": None, "max": None}
    assert percentile_range(None) == {"min": None, "max": None}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("$32,564", 32564),
        ("US$32.564", 32564),
        ("32,564", 32564),
        ("32.564", 32564),
        ("€1.234.567", 1234567),
        ("£500", 500),
        ("$1,234.56", 1234),
        ("1.5", 1),
        ("12000", 12000),
    ],
)
def test_currency_to_integer(value, expected):
    """US and European thousands separators recover the same integer."""
    assert currency_to_integer(value) == expected


@pytest.mark.parametrize("value", [None, "-", "", "call office"])
def test_currency_to_integer_invalid(value):
    assert currency_to_integer(value) is None


def test_parse_float():
    assert parse_float("3.45") == pytest.approx(3.45)
    assert parse_float("1,234.5") == pytest.approx(1234.5)
    assert parse_float("-") is None
    assert parse_float("abc") is None


def test_parse_date_formats():
    expected = datetime(2021, 8, 15, tzinfo=timezone.utc)
    assert parse_date("2021-08-15") == expected
    assert parse_date("08/15/2021") == expected
    assert parse_date("Aug 15, 2021") == expected


def test_parse_date_invalid():
    assert parse_date("sometime last fall") is None
    assert parse_date(None) is None


def test_match_keywords_respects_table_order():
    table = (("first", ("a",)), ("second", ("b",)), ("third", ("z",)))
    assert match_keywords("B and A", table) == ["first", "second"]
    assert match_keywords(None, table) == []


def test_event_groups_from_text():
    assert event_groups_from_text("Sprints and Hurdles") == ["sprints", "hurdles"]
    assert event_groups_from_text("Throws (shot put, discus)") == ["throws"]
    assert event_groups_from_text("Cross Country") == ["distance"]
    assert event_groups_from_text("Recruiting coordinator") == []


def test_primary_specialty_uses_table_order():
    """Sprints come before distance in the table, whatever the text order."""
    assert primary_specialty_from_text("Distance / XC and sprints") == "sprints"
    assert primary_specialty_from_text(None) is None


def test_specific_event_names_from_text():
    assert specific_event_names_from_text("Shot put and 4x400 relay") == [
        "Shot Put",
        "4x400m Relay",
    ]
    assert specific_event_names_from_text("Pole vault, high jump") == ["High Jump", "Pole Vault"]


def test_event_name_matches_group():
    assert event_name_matches_group("Shot Put", "throws")
    assert event_name_matches_group("Pole Vault", "jumps")
    assert event_name_matches_group("Heptathlon", "combined")
    assert not event_name_matches_group("Shot Put", "jumps")


@pytest.mark.parametrize(
    "sport_code, expected",
    [
        ("Women's Track", "women"),
        ("Woman's T&F", "women"),
        ("Men's Track", "men"),
        ("Track & Field", "men"),
        (None, "men"),
    ],
)
def test_infer_gender(sport_code, expected):
    assert infer_gender(sport_code) == expected


def test_gender_table_checks_women_first():
    assert GENDER_KEYWORDS[0][0] == "women"


def test_infer_program_scope():
    assert infer_program_scope("Men's Track", "Director of Track & Field") == "both"
    assert infer_program_scope(None, "Head Coach") == "both"
    assert infer_program_scope("Women's Track", "Head Coach") == "women"
    assert infer_program_scope("Men's Track", "Assistant Coach") == "men"


def test_map_division_code():
    assert map_division_code("DI") == "DI"
    assert map_division_code("JuCo") == "JuCo"
    assert map_division_code("d2") == "DII"
    assert map_division_code("Club") == "Club"
    assert map_division_code(None) is None


def test_cell_to_string():
    assert cell_to_string(5.0) == "5"
    assert cell_to_string(3.5) == "3.5"
    assert cell_to_string(90210) == "90210"
    assert cell_to_string(datetime(2021, 8, 15)) == "2021-08-15"
    assert cell_to_string("") is None
    assert cell_to_string(None) is None
