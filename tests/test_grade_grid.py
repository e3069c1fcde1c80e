import pytest

from gradesheet.classes import GradingConvention
from gradesheet.errors import ReadOnlyFieldError, TemplateParseError
from gradesheet.grade_grid import (
    GradeGrid,
    build_display_rows,
    cell_text,
    is_app_sheet,
    load_grading_file,
    read_sheet_rows,
)
from gradesheet.template_schema import APP_HEADER


def test_load_template_extracts_display_table(template_bytes):
    grid = load_grading_file(template_bytes, "6eme")
    assert grid.header == APP_HEADER
    assert grid.data_rows == [
        ["1", "ABONG KOUDI CAMILOU", "12", "14"],
        ["2", "BELLA MARIE", "8.5", ""],
        ["3", "CHO PAUL", "", ""],
        ["4", "DIKA ANNE", "15", "9"],
    ]
    assert grid.student_count == 4
    # The full template is retained for side fields
    assert grid.all_rows[0] == ["LYCEE BILINGUE DE BAFIA"]
    assert grid.all_rows[1] == []


def test_convention_resolved_from_class(template_bytes):
    assert load_grading_file(template_bytes, "6eme").convention == GradingConvention.TWENTY_POINT
    assert load_grading_file(template_bytes, "Form 1").convention == GradingConvention.HUNDRED_POINT
    assert load_grading_file(template_bytes, None).convention == GradingConvention.HUNDRED_POINT


def test_load_app_sheet_is_used_as_is(app_sheet_bytes):
    grid = load_grading_file(app_sheet_bytes, "Tle D")
    assert grid.data_rows == [
        ["1", "Jane Doe", "13.5", "10"],
        ["2", "John Smith", "", ""],
    ]
    assert grid.all_rows[0] == APP_HEADER


def test_load_rejects_non_workbook():
    with pytest.raises(TemplateParseError):
        load_grading_file(b"not a workbook", "6eme")


def test_set_grade_validates_against_convention(template_bytes):
    grid = load_grading_file(template_bytes, "6eme")
    assert grid.set_grade(1, 2, "25") is True
    assert grid.get_cell(1, 2) == "20"
    assert grid.set_grade(2, 3, "1x3.5") is True
    assert grid.get_cell(2, 3) == "13.5"

    grid = load_grading_file(template_bytes, "Form 3")
    grid.set_grade(1, 2, "85")
    assert grid.get_cell(1, 2) == "85"


@pytest.mark.parametrize("row, col", [(0, 2), (1, 0), (1, 1), (1, 4), (99, 2), (-1, 2)])
def test_set_grade_ignores_non_grade_cells(template_bytes, row, col):
    grid = load_grading_file(template_bytes, "6eme")
    before = [list(r) for r in grid.cells]
    assert grid.set_grade(row, col, "12") is False
    assert grid.cells == before


def test_read_side_fields(template_bytes):
    grid = load_grading_file(template_bytes, "6eme")
    assert grid.read_field("statistics_title") == "STATISTIQUES"
    assert grid.read_field("competencies") == "Solve linear equations"
    assert grid.read_field("lessons_planned") == "40"
    assert grid.read_field("annual_remarks") == "Conseil annuel"
    assert grid.field_label("courses_expected") == "Cours prévus"
    assert grid.field_label("lessons_planned") == "Lessons planned"


def test_write_side_fields_use_validators(template_bytes):
    grid = load_grading_file(template_bytes, "6eme")
    assert grid.write_field("hours_planned", "72 h") == "72"
    assert grid.read_field("hours_planned") == "72"
    assert grid.write_field("competencies", "<b>Read</b> maps") == "bRead/b maps"
    with pytest.raises(ReadOnlyFieldError):
        grid.write_field("statistics_title", "x")
    with pytest.raises(KeyError):
        grid.read_field("no_such_field")


def test_write_field_extends_short_grid():
    grid = GradeGrid([list(APP_HEADER)])
    grid.write_field("tp_td_done", "3")
    assert len(grid.all_rows) == 14
    assert grid.read_field("tp_td_done") == "3"


def test_term_counters(template_bytes):
    grid = load_grading_file(template_bytes, "6eme")
    counters = grid.term_counters()
    assert counters.courses_expected == 8
    assert counters.courses_done == 6
    assert counters.period_hours_expected == 24
    assert counters.period_hours_done == 18
    assert counters.tp_td_expected == 4
    assert counters.tp_td_done == 0
    assert GradeGrid([list(APP_HEADER)]).term_counters().courses_expected == 0


def test_records_and_statistics(template_bytes):
    grid = load_grading_file(template_bytes, "6eme")
    records = grid.records()
    assert [(r.name, r.score_slot1, r.score_slot2) for r in records] == [
        ("Abong Koudi Camilou", 12.0, 14.0),
        ("Bella Marie", 8.5, None),
        ("Cho Paul", None, None),
        ("Dika Anne", 15.0, 9.0),
    ]
    stats = grid.statistics()
    assert stats.total_students == 3
    assert stats.students_above_10 == 2
    assert stats.average_grade == pytest.approx(35.5 / 3)


def test_to_dataframe(template_bytes):
    df = load_grading_file(template_bytes, "6eme").to_dataframe()
    assert list(df.columns) == APP_HEADER
    assert len(df) == 4
    assert df.iloc[1]["NOTE 2"] == ""


def test_helpers():
    assert cell_text(None) == ""
    assert cell_text(12.0) == "12"
    assert cell_text(12.25) == "12.25"
    assert cell_text(7) == "7"
    assert is_app_sheet([["ide", "nom et prenom", "note 1", "note 2"]])
    assert not is_app_sheet([["Ide", "Name"]])
    assert not is_app_sheet([])
    rows = [[], [], [], ["", "", "", "", "  "], ["", "", "", "", "Ann", "9"]]
    assert build_display_rows(rows) == [APP_HEADER, ["1", "Ann", "9", ""]]


def test_read_sheet_rows_drops_trailing_blanks(app_sheet_bytes):
    rows = read_sheet_rows(app_sheet_bytes)
    assert rows[-1] == ["2", "John Smith"]
