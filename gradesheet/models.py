"""Data types shared by the parsers, the grid and the statistics engine."""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


@dataclass
class StudentRecord:
    """
    One student row.
    
    ``score_slot1`` is the grade used for statistics; ``score_slot2`` is the
    second mark column of the sheet. ``remarks`` is the teacher comment sent
    with a grade-report entry.
    """

    name: str
    matricule: str | None = None
    gender: Gender = Gender.MALE
    score_slot1: float | None = None
    score_slot2: float | None = None
    remarks: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Return the JSON body the grade-report endpoints expect."""
        body: dict[str, Any] = {
            "studentName": self.name,
            "gender": self.gender.value,
        }
        if self.matricule:
            body["matricule"] = self.matricule
        if self.score_slot1 is not None:
            body["grade"] = self.score_slot1
        if self.remarks:
            body["remarks"] = self.remarks
        return body


GRADE_STATISTICS_KEYS = {
    "total_students": "totalStudents",
    "students_above_10": "studentsAbove10",
    "students_below_10": "studentsBelow10",
    "female_above_10": "femaleAbove10",
    "female_below_10": "femaleBelow10",
    "male_above_10": "maleAbove10",
    "male_below_10": "maleBelow10",
    "average_grade": "averageGrade",
    "pass_rate": "passRate",
}


@dataclass
class GradeStatistics:
    total_students: int = 0
    students_above_10: int = 0
    students_below_10: int = 0
    female_above_10: int = 0
    female_below_10: int = 0
    male_above_10: int = 0
    male_below_10: int = 0
    average_grade: float = 0.0
    pass_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the statistics keyed the way the dashboard API names them."""
        return {GRADE_STATISTICS_KEYS[k]: v for k, v in asdict(self).items()}


@dataclass
class ActivityStatistics:
    expected: int = 0
    done: int = 0
    percentage: int = 0


@dataclass
class TermCounters:
    """Planned and completed activity counts entered for a term."""

    courses_expected: int = 0
    courses_done: int = 0
    period_hours_expected: int = 0
    period_hours_done: int = 0
    tp_td_expected: int = 0
    tp_td_done: int = 0


@dataclass
class TermStatistics:
    courses: ActivityStatistics
    period_hours: ActivityStatistics
    tp_td: ActivityStatistics

    def to_dict(self) -> dict[str, Any]:
        return {
            "courses": asdict(self.courses),
            "periodHours": asdict(self.period_hours),
            "tpTd": asdict(self.tp_td),
        }
