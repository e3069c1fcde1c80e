import pytest

from gradesheet.validators import (
    parse_grade,
    sanitize_text_input,
    validate_grade_input,
    validate_numeric_input,
)


@pytest.mark.parametrize("raw", [
    "12", "12.5", "25", "-3", "abc", "", "1.2.3", "..", "007", "99999", "4,5", "1e5", " 19.99 ",
])
@pytest.mark.parametrize("max_grade", [20, 100])
def test_validate_grade_input_is_in_range_or_empty(raw, max_grade):
    result = validate_grade_input(raw, max_grade)
    if result != "":
        assert 0 <= float(result) <= max_grade


def test_validate_grade_input_keeps_valid_text():
    assert validate_grade_input("12.5", 20) == "12.5"
    assert validate_grade_input("12.", 20) == "12."


def test_validate_grade_input_clamps_to_max():
    assert validate_grade_input("25", 20) == "20"
    assert validate_grade_input("150", 100) == "100"


def test_validate_grade_input_strips_non_numeric():
    assert validate_grade_input("1a4", 20) == "14"
    # The minus sign is stripped, not interpreted
    assert validate_grade_input("-5", 20) == "5"


def test_validate_grade_input_collapses_extra_dots():
    assert validate_grade_input("1.2.3", 20) == "1.23"


def test_validate_grade_input_empty_when_unparsable():
    assert validate_grade_input("abc", 20) == ""
    assert validate_grade_input(".", 20) == ""
    assert validate_grade_input("", 20) == ""


def test_validate_numeric_input():
    assert validate_numeric_input("12h") == "12"
    assert validate_numeric_input("3.5") == "35"
    assert validate_numeric_input("none") == ""


def test_sanitize_script_tag():
    result = sanitize_text_input("<script>alert(1)</script>")
    assert "<" not in result
    assert ">" not in result
    assert "javascript:" not in result.lower()


def test_sanitize_removes_scheme_and_handlers():
    result = sanitize_text_input('JavaScript:alert(1) <img src=x onerror=alert(1)>')
    assert "javascript:" not in result.lower()
    assert "onerror=" not in result.lower()


def test_sanitize_nested_payload():
    assert "javascript:" not in sanitize_text_input("javajavascript:script:void(0)").lower()


def test_sanitize_truncates():
    assert len(sanitize_text_input("a" * 800)) == 500
    assert len(sanitize_text_input("a" * 800, max_length=20)) == 20


def test_sanitize_keeps_plain_text():
    assert sanitize_text_input("Résoudre des équations") == "Résoudre des équations"


def test_parse_grade():
    assert parse_grade("12.5") == 12.5
    assert parse_grade("12.") == 12.0
    assert parse_grade("") is None
    assert parse_grade(None) is None
    assert parse_grade("abs") is None
    assert parse_grade("nan") is None
