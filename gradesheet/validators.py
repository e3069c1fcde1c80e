"""Validation utilities for grade sheet cell input.

Every function here is a pure string transform. Invalid input never raises:
it degrades to an empty string or a clamped value so that the editor can
never hold an illegal cell.
"""

import math
import re

TEXT_MAX_LENGTH = 500

_NON_GRADE_CHARS = re.compile(r"[^0-9.]")
_NON_DIGITS = re.compile(r"[^0-9]")
_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return str(value)


def validate_grade_input(raw: str, max_grade: float = 20) -> str:
    """
    Constrain raw text to a legal grade.
    
    Keeps digits and the first decimal point (later points are dropped, their
    digits join the fractional part), then clamps to ``[0, max_grade]``.
    
    Args:
        raw: Text typed into a grade cell.
        max_grade: 20 or 100 depending on the class grading convention.
    
    Returns:
        The cleaned text, ``max_grade`` as text when above range, or ``""``
        when nothing numeric remains.
    """
    sanitized = _NON_GRADE_CHARS.sub("", raw or "")
    
    parts = sanitized.split(".")
    if len(parts) > 2:
        sanitized = parts[0] + "." + "".join(parts[1:])
    
    try:
        value = float(sanitized)
    except ValueError:
        return ""
    
    if value < 0:
        return "0"
    if value > max_grade:
        return _format_number(max_grade)
    
    return sanitized


def validate_numeric_input(raw: str) -> str:
    """Strip everything but digits (lesson and hour counters)."""
    return _NON_DIGITS.sub("", raw or "")


def sanitize_text_input(raw: str, max_length: int = TEXT_MAX_LENGTH) -> str:
    """
    Clean free text such as competency notes.
    
    Removes angle brackets, the ``javascript:`` scheme and inline event
    handler attributes (``onclick=`` and friends), then truncates.
    Removal repeats until the text is stable, so nested payloads such as
    ``javajavascript:script:`` do not survive.
    """
    text = raw or ""
    while True:
        cleaned = _ANGLE_BRACKETS.sub("", text)
        cleaned = _JAVASCRIPT_SCHEME.sub("", cleaned)
        cleaned = _EVENT_HANDLER.sub("", cleaned)
        if cleaned == text:
            break
        text = cleaned
    return text[:max_length]


def parse_grade(value) -> float | None:
    """Return a cell's grade as a float, or None when the cell holds no number."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
