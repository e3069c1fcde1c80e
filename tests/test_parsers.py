import logging

import pytest

from conftest import workbook_bytes
from gradesheet.errors import TemplateParseError, UnsupportedFileError
from gradesheet.models import Gender
from gradesheet.parsers import (
    clean_name,
    parse_delimited_content,
    parse_gender,
    parse_student_file,
    parse_student_list,
    title_case,
)


def test_delimited_row_with_matricule_name_gender():
    records = parse_delimited_content("12,Jane Doe,Female")
    assert len(records) == 1
    assert records[0].name == "Jane Doe"
    assert records[0].matricule == "12"
    assert records[0].gender == Gender.FEMALE


def test_numeric_line_is_dropped():
    assert parse_student_list("42") == []
    assert parse_delimited_content("42") == []


def test_list_plain_names_are_title_cased():
    records = parse_student_list("ABONG KOUDI camilou\n\n  bella marie  ")
    assert [r.name for r in records] == ["Abong Koudi Camilou", "Bella Marie"]
    assert all(r.matricule is None for r in records)
    assert all(r.gender == Gender.MALE for r in records)


def test_list_name_matricule_gender():
    records = parse_student_list("Jane Doe, MAT001, fille")
    assert records[0].name == "Jane Doe"
    assert records[0].matricule == "MAT001"
    assert records[0].gender == Gender.FEMALE


def test_list_name_then_gender():
    records = parse_student_list("Jane Doe, féminin\nJohn Roe, garçon")
    assert records[0].matricule is None
    assert records[0].gender == Gender.FEMALE
    assert records[1].gender == Gender.MALE


def test_list_leading_row_counter_is_shifted():
    records = parse_student_list("3, Jane Doe, MAT003, F")
    assert records[0].name == "Jane Doe"
    assert records[0].matricule == "MAT003"
    assert records[0].gender == Gender.FEMALE


@pytest.mark.parametrize("line, name, matricule", [
    ("Jane Doe (MAT01)", "Jane Doe", "MAT01"),
    ("Jane Doe - 2267", "Jane Doe", "2267"),
    ("Jane Doe MAT01", "Jane Doe", "MAT01"),
])
def test_list_fallback_shapes(line, name, matricule):
    records = parse_student_list(line)
    assert records[0].name == name
    assert records[0].matricule == matricule


def test_list_strips_ordinal_prefix_and_periods():
    records = parse_student_list("1. jane doe.")
    assert records[0].name == "Jane Doe"


def test_list_preserves_order_without_dedup():
    records = parse_student_list("Ann\nBob\nAnn")
    assert [r.name for r in records] == ["Ann", "Bob", "Ann"]


def test_delimited_skips_header_and_blank_rows():
    content = "Ide,NOM ET PRENOM,Sexe\n,,\n\nJane Doe,2267,F\r\nJohn Roe,2268,M"
    records = parse_delimited_content(content)
    assert [r.name for r in records] == ["Jane Doe", "John Roe"]
    assert records[0].matricule == "2267"


def test_delimited_header_match_is_whole_word():
    # "Davide" contains "ide" but is not a header
    records = parse_delimited_content("Davide Nkou,101,M")
    assert records[0].name == "Davide Nkou"


@pytest.mark.parametrize("header", [
    "STUDENT NAMES,MATRICULE,SEX",
    "Full Name;Matricule;Gender",
    "N°\tNom et prénom\tSexe",
])
def test_delimited_skips_headers_containing_tokens(header):
    records = parse_delimited_content(header + "\nJane Doe,2267,F")
    assert [r.name for r in records] == ["Jane Doe"]


def test_delimited_quoted_thousands_matricule():
    records = parse_delimited_content('"2,267",ABONG KOUDI CAMILOU,f')
    assert records[0].matricule == "2267"
    assert records[0].name == "Abong Koudi Camilou"
    assert records[0].gender == Gender.FEMALE


@pytest.mark.parametrize("content", [
    "Jane Doe;2267;femme",
    "Jane Doe\t2267\tgirl",
])
def test_delimited_semicolon_and_tab(content):
    records = parse_delimited_content(content)
    assert records[0].name == "Jane Doe"
    assert records[0].matricule == "2267"
    assert records[0].gender == Gender.FEMALE


def test_delimited_single_column():
    records = parse_delimited_content("jane doe")
    assert records[0].name == "Jane Doe"
    assert records[0].matricule is None


def test_delimited_defaults_gender_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="gradesheet.parsers"):
        records = parse_delimited_content("Jane Doe,2267")
    assert records[0].gender == Gender.MALE
    assert "recorded as male" in caplog.text


def test_delimited_drops_unusable_rows():
    assert parse_delimited_content("12,34\n-,-") == []


def test_parse_student_file_csv():
    records = parse_student_file("class.csv", "Name,Matricule,Gender\nJane Doe,1,F\n".encode("utf-8-sig"))
    assert len(records) == 1
    assert records[0].gender == Gender.FEMALE


def test_parse_student_file_xlsx():
    content = workbook_bytes({
        (0, 0): "Matricule", (0, 1): "Name", (0, 2): "Gender",
        (1, 0): 2267, (1, 1): "ABONG KOUDI", (1, 2): "F",
        (2, 0): 2268, (2, 1): "BELLA MARIE", (2, 2): "M",
    })
    records = parse_student_file("class.xlsx", content)
    assert [(r.matricule, r.name, r.gender) for r in records] == [
        ("2267", "Abong Koudi", Gender.FEMALE),
        ("2268", "Bella Marie", Gender.MALE),
    ]


def test_parse_student_file_rejects_other_extensions():
    with pytest.raises(UnsupportedFileError):
        parse_student_file("class.pdf", b"%PDF")


def test_helpers():
    assert parse_gender("FÉMININ") == Gender.FEMALE
    assert parse_gender("unknown") == Gender.MALE
    assert parse_gender(None) == Gender.MALE
    assert title_case("mARIE  claire") == "Marie  Claire"
    assert clean_name("12") is None
    assert clean_name("  ") is None


def test_parse_student_file_unreadable_xlsx():
    with pytest.raises(TemplateParseError):
        parse_student_file("class.xlsx", b"not a workbook")
