"""Cell coordinates of the school grading template.

The template layout is fixed by the school office. The display table and the
side tables are read from hard coordinates, so they are all described here
and nowhere else.
"""

from dataclasses import dataclass, field
from enum import Enum


class FieldKind(Enum):
    NUMERIC = "numeric"
    TEXT = "text"
    LABEL = "label"


@dataclass(frozen=True)
class SideField:
    row: int
    col: int
    kind: FieldKind
    label: str = ""


APP_HEADER = ["Ide", "NOM ET PRENOM", "NOTE 1", "NOTE 2"]


@dataclass(frozen=True)
class TemplateSchema:
    """
    Layout of a grading template.
    
    Attributes:
        table_start_row: First row (0-based) of student data.
        name_col: Column holding the student name.
        score_cols: Columns holding the two marks, in slot order.
        label_col: Column holding the captions of the counter rows.
        fields: Named side-table cells.
    """

    table_start_row: int = 3
    name_col: int = 4
    score_cols: tuple[int, int] = (5, 6)
    label_col: int = 0
    fields: dict[str, SideField] = field(default_factory=dict)

    def get_field(self, name: str) -> SideField:
        try:
            return self.fields[name]
        except KeyError:
            raise KeyError(f"Unknown template field: {name}") from None

    def fields_of_kind(self, kind: FieldKind) -> list[str]:
        return [name for name, f in self.fields.items() if f.kind == kind]


TERM_COUNTER_FIELDS = [
    "courses_expected",
    "courses_done",
    "period_hours_expected",
    "period_hours_done",
    "tp_td_expected",
    "tp_td_done",
]

ANNUAL_FIELDS = ["lessons_planned", "hours_planned", "tp_td_planned"]

DEFAULT_SCHEMA = TemplateSchema(
    fields={
        "statistics_title": SideField(7, 0, FieldKind.LABEL, "Statistics"),
        "courses_expected": SideField(8, 1, FieldKind.NUMERIC, "Courses expected"),
        "courses_done": SideField(9, 1, FieldKind.NUMERIC, "Courses done"),
        "period_hours_expected": SideField(10, 1, FieldKind.NUMERIC, "Period hours expected"),
        "period_hours_done": SideField(11, 1, FieldKind.NUMERIC, "Period hours done"),
        "tp_td_expected": SideField(12, 1, FieldKind.NUMERIC, "TP/TD expected"),
        "tp_td_done": SideField(13, 1, FieldKind.NUMERIC, "TP/TD done"),
        "competencies": SideField(4, 8, FieldKind.TEXT, "Targeted term competencies"),
        "lessons_planned": SideField(8, 9, FieldKind.NUMERIC, "Lessons planned"),
        "hours_planned": SideField(9, 9, FieldKind.NUMERIC, "Hours planned"),
        "tp_td_planned": SideField(10, 9, FieldKind.NUMERIC, "TP/TD planned"),
        "annual_remarks": SideField(8, 10, FieldKind.LABEL, ""),
    }
)
