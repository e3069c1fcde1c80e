"""Aggregate statistics over graded student records and term counters."""

import math
from typing import Iterable

from .models import (
    ActivityStatistics,
    Gender,
    GradeStatistics,
    StudentRecord,
    TermCounters,
    TermStatistics,
)

PASS_MARK = 10


def calculate_statistics(
    records: Iterable[StudentRecord],
    pass_mark: float = PASS_MARK
) -> GradeStatistics:
    """
    Compute pass/fail counts, gender breakdowns, average and pass rate.
    
    Only records with a score in the first slot are counted. When none
    qualify every field is zero.
    """
    graded = [r for r in records if r.score_slot1 is not None]
    total = len(graded)
    if total == 0:
        return GradeStatistics()
    
    above = [r for r in graded if r.score_slot1 >= pass_mark]
    female = [r for r in graded if r.gender == Gender.FEMALE]
    male = [r for r in graded if r.gender == Gender.MALE]
    female_above = sum(1 for r in female if r.score_slot1 >= pass_mark)
    male_above = sum(1 for r in male if r.score_slot1 >= pass_mark)
    
    return GradeStatistics(
        total_students=total,
        students_above_10=len(above),
        students_below_10=total - len(above),
        female_above_10=female_above,
        female_below_10=len(female) - female_above,
        male_above_10=male_above,
        male_below_10=len(male) - male_above,
        average_grade=sum(r.score_slot1 for r in graded) / total,
        pass_rate=len(above) / total * 100,
    )


def _percentage(done: int, expected: int) -> int:
    if expected <= 0:
        return 0
    # Half-up rounding, so 12.5% reports as 13 like the school dashboards
    return math.floor(done / expected * 100 + 0.5)


def _activity(expected: int, done: int) -> ActivityStatistics:
    return ActivityStatistics(
        expected=expected,
        done=done,
        percentage=_percentage(done, expected),
    )


def calculate_term_statistics(counters: TermCounters) -> TermStatistics:
    """Return completion percentages for courses, period hours and TP/TD sessions."""
    return TermStatistics(
        courses=_activity(counters.courses_expected, counters.courses_done),
        period_hours=_activity(counters.period_hours_expected, counters.period_hours_done),
        tp_td=_activity(counters.tp_td_expected, counters.tp_td_done),
    )
