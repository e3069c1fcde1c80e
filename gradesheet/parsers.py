"""Parsers turning pasted text and uploaded student lists into records.

Both entry points are lenient: rows that cannot be understood are dropped
silently (logged at DEBUG) instead of raising.
"""

from zipfile import BadZipFile
import csv
import io
import logging
import re

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .errors import TemplateParseError, UnsupportedFileError
from .models import Gender, StudentRecord

logger = logging.getLogger(__name__)

FEMALE_TOKENS = {"female", "f", "femme", "féminin", "girl", "fille"}
MALE_TOKENS = {"male", "m", "masculin", "homme", "boy", "garçon"}
GENDER_TOKENS = FEMALE_TOKENS | MALE_TOKENS

# Header cells: a bare "Ide" index title, or a cell mentioning a name or student column
HEADER_PATTERN = re.compile(r"^ide$|\b(nom et pr[eé]nom|names?|students?)\b", re.IGNORECASE)

# Shapes tried, in order, for a pasted line without commas
MATRICULE_PATTERNS = [
    re.compile(r"^(.+?)\s*\(([^)]+)\)$"),   # Name (Matricule)
    re.compile(r"^(.+?)\s*-\s*(.+)$"),      # Name - Matricule
    re.compile(r"^(.+?)\s+([A-Z0-9]+)$"),   # Name MATRICULE
]

_NUMERIC = re.compile(r"^\d+$")
_GROUPED_NUMBER = re.compile(r"^[\d,]+$")
_ORDINAL_PREFIX = re.compile(r"^\d+\.?\s*")
_TRAILING_PERIODS = re.compile(r"\.+$")
_EDGE_QUOTES = re.compile(r"^[\"']|[\"']$")


def parse_gender(token: str | None) -> Gender:
    """Map an English or French gender token to a Gender, defaulting to male."""
    if token and token.strip().lower() in FEMALE_TOKENS:
        return Gender.FEMALE
    return Gender.MALE


def is_gender_token(token: str | None) -> bool:
    return bool(token) and token.strip().lower() in GENDER_TOKENS


def title_case(name: str) -> str:
    """Capitalise each space-separated word independently."""
    return " ".join(word.capitalize() for word in name.split(" "))


def clean_name(raw: str) -> str | None:
    """
    Apply the cleanup shared by both parsers.
    
    Strips a leading ordinal such as ``"3. "`` and trailing periods, then
    title-cases the result. Returns None for names that end up empty or
    purely numeric.
    """
    name = _ORDINAL_PREFIX.sub("", raw.strip())
    name = _TRAILING_PERIODS.sub("", name).strip()
    if not name or _NUMERIC.match(name):
        return None
    return title_case(name)


def _split_list_line(line: str) -> tuple[str, str, str | None]:
    """Return (name, matricule, gender token) for one pasted line."""
    if "," in line:
        parts = [p.strip() for p in line.split(",")]
        
        # Leading row counter: "3, Name, Matricule, Gender"
        if _NUMERIC.match(parts[0]) and len(parts) >= 2:
            return (
                parts[1],
                parts[2] if len(parts) > 2 else "",
                parts[3] if len(parts) > 3 else None,
            )
        
        second = parts[1] if len(parts) > 1 else ""
        if second and not is_gender_token(second):
            return parts[0], second, parts[2] if len(parts) > 2 else None
        return parts[0], "", second or None
    
    for pattern in MATRICULE_PATTERNS:
        match = pattern.match(line)
        if match:
            return match.group(1).strip(), match.group(2).strip(), None
    
    return line, "", None


def parse_student_list(text: str) -> list[StudentRecord]:
    """
    Parse a free-text student list, one student per line.
    
    Accepted shapes include ``Name``, ``Name, Matricule, Gender``,
    ``N, Name, Matricule, Gender``, ``Name, Gender``, ``Name (Matricule)``,
    ``Name - Matricule`` and ``Name MATRICULE``.
    
    Args:
        text: Pasted text.
    
    Returns:
        Records in input order; no de-duplication.
    """
    students = []
    for line_no, line in enumerate(text.split("\n"), 1):
        trimmed = line.strip()
        if not trimmed:
            continue
        
        # Row numbers on their own line
        if _NUMERIC.match(trimmed):
            logger.debug("Skipping numeric line %d", line_no)
            continue
        
        raw_name, matricule, gender_token = _split_list_line(trimmed)
        name = clean_name(raw_name)
        if name is None:
            logger.debug("Skipping line %d: no usable name", line_no)
            continue
        
        students.append(StudentRecord(
            name=name,
            matricule=matricule or None,
            gender=parse_gender(gender_token),
        ))
    
    return students


def _split_delimited(line: str) -> list[str]:
    if "," in line:
        delimiter = ","
    elif ";" in line:
        delimiter = ";"
    elif "\t" in line:
        delimiter = "\t"
    else:
        return [line]
    
    row = next(csv.reader([line], delimiter=delimiter), [])
    return [_EDGE_QUOTES.sub("", col.strip()).strip() for col in row]


def _is_header(columns: list[str]) -> bool:
    return any(HEADER_PATTERN.search(col) for col in columns)


def _starts_with_letter(text: str) -> bool:
    return bool(text) and text[0].isalpha()


def parse_delimited_content(content: str) -> list[StudentRecord]:
    """
    Parse CSV-like content (from a .csv file or a converted spreadsheet).
    
    Each line is split on the first delimiter found among comma, semicolon
    and tab. With two or more columns, a numeric first column is the
    matricule and the second the name; otherwise the first column is the
    name and the second the matricule. A third column is read as gender.
    
    Rows with no gender column default to male; a warning reports how many.
    """
    students = []
    defaulted = 0
    
    for line_no, line in enumerate(re.split(r"\r?\n", content), 1):
        line = line.strip()
        if not line:
            continue
        
        columns = _split_delimited(line)
        if not any(columns) or _is_header(columns):
            logger.debug("Skipping header or blank line %d", line_no)
            continue
        
        raw_name = ""
        matricule = ""
        gender_col = ""
        
        if len(columns) >= 2:
            if _GROUPED_NUMBER.match(columns[0]) and _starts_with_letter(columns[1]):
                matricule = columns[0].replace(",", "")
                raw_name = columns[1]
            elif _starts_with_letter(columns[0]):
                raw_name = columns[0]
                matricule = columns[1].replace(",", "")
            gender_col = columns[2].lower() if len(columns) > 2 else ""
        else:
            raw_name = columns[0]
        
        name = clean_name(raw_name)
        if name is None or not _starts_with_letter(name):
            logger.debug("Skipping line %d: no usable name", line_no)
            continue
        
        if not gender_col:
            defaulted += 1
        
        students.append(StudentRecord(
            name=name,
            matricule=matricule or None,
            gender=parse_gender(gender_col),
        ))
    
    if defaulted:
        logger.warning(
            "%d of %d imported students had no gender column and were recorded as male",
            defaulted, len(students)
        )
    
    return students


def workbook_to_delimited_text(content: bytes) -> str:
    """
    Convert the first sheet of an .xlsx file to comma-separated text.

    Raises:
        TemplateParseError: The content is not a readable .xlsx workbook.
    """
    try:
        df = pd.read_excel(io.BytesIO(content), header=None, dtype=object, engine="openpyxl")
    except (InvalidFileException, BadZipFile, KeyError, ValueError, OSError) as exc:
        raise TemplateParseError(f"Error reading Excel file: {exc}") from exc
    df = df.fillna("")
    return df.to_csv(header=False, index=False)


def parse_student_file(file_name: str, content: bytes) -> list[StudentRecord]:
    """
    Parse an uploaded student list file.
    
    Raises:
        UnsupportedFileError: The extension is not .csv, .txt or .xlsx.
    """
    lower = file_name.lower()
    if lower.endswith((".csv", ".txt")):
        text = content.decode("utf-8-sig", errors="replace")
    elif lower.endswith(".xlsx"):
        text = workbook_to_delimited_text(content)
    else:
        raise UnsupportedFileError(f"Please select a CSV or Excel file, got {file_name!r}")
    
    students = parse_delimited_content(text)
    logger.info("Parsed %d students from %s", len(students), file_name)
    return students
