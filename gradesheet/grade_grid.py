"""Editable grade grid built from a grading workbook."""

from datetime import date, datetime
from typing import Any
from zipfile import BadZipFile
import io
import logging

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .classes import GradingConvention, resolve_convention
from .errors import ReadOnlyFieldError, TemplateParseError
from .models import GradeStatistics, StudentRecord, TermCounters
from .parsers import clean_name
from .statistics import calculate_statistics
from .template_schema import (
    APP_HEADER,
    DEFAULT_SCHEMA,
    TERM_COUNTER_FIELDS,
    FieldKind,
    TemplateSchema,
)
from .validators import (
    TEXT_MAX_LENGTH,
    parse_grade,
    sanitize_text_input,
    validate_grade_input,
    validate_numeric_input,
)

logger = logging.getLogger(__name__)

NAME_COLUMN = 1
GRADE_COLUMNS = (2, 3)


def cell_text(value: Any) -> str:
    """Render a spreadsheet value as the text shown in the editor."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _trim_row(row: list[str]) -> list[str]:
    end = len(row)
    while end and row[end - 1] == "":
        end -= 1
    return row[:end]


def read_sheet_rows(content: bytes) -> list[list[str]]:
    """
    Read every row of the first sheet as text.
    
    Trailing empty cells and trailing empty rows are dropped.
    
    Raises:
        TemplateParseError: The content is not a readable .xlsx workbook.
    """
    try:
        wb = load_workbook(io.BytesIO(content), data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, ValueError, OSError) as exc:
        raise TemplateParseError(f"Failed to parse Excel file: {exc}") from exc
    
    try:
        ws = wb.worksheets[0]
        rows = [_trim_row([cell_text(v) for v in row]) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
    
    while rows and not rows[-1]:
        rows.pop()
    return rows


def is_app_sheet(rows: list[list[str]]) -> bool:
    """True when the first row is the header this application writes."""
    if not rows or len(rows[0]) < len(APP_HEADER):
        return False
    return all(
        rows[0][i].strip().upper() == h.upper()
        for i, h in enumerate(APP_HEADER)
    )


def build_display_rows(
    all_rows: list[list[str]],
    schema: TemplateSchema = DEFAULT_SCHEMA
) -> list[list[str]]:
    """
    Extract the editable table from a school template.
    
    Rows from ``schema.table_start_row`` with a non-blank name become
    ``[running index, name, mark 1, mark 2]`` under the application header.
    """
    def at(row: list[str], col: int) -> str:
        return row[col] if col < len(row) else ""
    
    table = [list(APP_HEADER)]
    for row in all_rows[schema.table_start_row:]:
        name = at(row, schema.name_col)
        if not name.strip():
            continue
        table.append([
            str(len(table)),
            name,
            at(row, schema.score_cols[0]),
            at(row, schema.score_cols[1]),
        ])
    return table


class GradeGrid:
    """
    In-memory grade sheet.
    
    ``cells`` is the display table (row 0 is the header). ``all_rows`` keeps
    the full source template so that side-table fields can be read and
    written by their schema coordinates.
    """

    def __init__(
        self,
        cells: list[list[str]],
        all_rows: list[list[str]] | None = None,
        convention: GradingConvention = GradingConvention.HUNDRED_POINT,
        schema: TemplateSchema = DEFAULT_SCHEMA,
        text_max_length: int = TEXT_MAX_LENGTH
    ):
        self.cells = [list(row) for row in cells]
        self.all_rows = [list(row) for row in (all_rows or [])]
        self.convention = convention
        self.schema = schema
        self.text_max_length = text_max_length

    @property
    def header(self) -> list[str]:
        return self.cells[0] if self.cells else []

    @property
    def data_rows(self) -> list[list[str]]:
        return self.cells[1:]

    @property
    def student_count(self) -> int:
        return max(len(self.cells) - 1, 0)

    def get_cell(self, row: int, col: int) -> str:
        if 0 <= row < len(self.cells) and 0 <= col < len(self.cells[row]):
            return self.cells[row][col]
        return ""

    def set_grade(self, row: int, col: int, raw: str) -> bool:
        """
        Write a mark through the grade validator.
        
        Only data rows and the two mark columns are editable; any other
        coordinate is ignored and False is returned.
        """
        if row < 1 or row >= len(self.cells) or col not in GRADE_COLUMNS:
            return False
        
        value = validate_grade_input(raw, self.convention.max_grade)
        target = self.cells[row]
        while len(target) <= col:
            target.append("")
        target[col] = value
        return True

    def _source_cell(self, row: int, col: int) -> str:
        if row < len(self.all_rows) and col < len(self.all_rows[row]):
            return self.all_rows[row][col]
        return ""

    def read_field(self, name: str) -> str:
        side = self.schema.get_field(name)
        return self._source_cell(side.row, side.col)

    def field_label(self, name: str) -> str:
        """Caption of a side field: the template's own caption cell when present."""
        side = self.schema.get_field(name)
        if side.col == self.schema.label_col + 1:
            caption = self._source_cell(side.row, self.schema.label_col)
            if caption.strip():
                return caption
        return side.label

    def write_field(self, name: str, raw: str) -> str:
        """
        Write a side-table field through its validator and return the stored value.
        
        Raises:
            ReadOnlyFieldError: The field is a template caption.
        """
        side = self.schema.get_field(name)
        if side.kind == FieldKind.LABEL:
            raise ReadOnlyFieldError(f"Template field {name!r} is read-only")
        
        if side.kind == FieldKind.NUMERIC:
            value = validate_numeric_input(raw)
        else:
            value = sanitize_text_input(raw, self.text_max_length)
        
        while len(self.all_rows) <= side.row:
            self.all_rows.append([])
        target = self.all_rows[side.row]
        while len(target) <= side.col:
            target.append("")
        target[side.col] = value
        return value

    def term_counters(self) -> TermCounters:
        values = {}
        for name in TERM_COUNTER_FIELDS:
            digits = validate_numeric_input(self.read_field(name))
            values[name] = int(digits) if digits else 0
        return TermCounters(**values)

    def records(self) -> list[StudentRecord]:
        """Return one record per data row with a usable name."""
        records = []
        for row in self.data_rows:
            name = clean_name(row[NAME_COLUMN] if len(row) > NAME_COLUMN else "")
            if name is None:
                continue
            records.append(StudentRecord(
                name=name,
                score_slot1=parse_grade(row[GRADE_COLUMNS[0]] if len(row) > GRADE_COLUMNS[0] else None),
                score_slot2=parse_grade(row[GRADE_COLUMNS[1]] if len(row) > GRADE_COLUMNS[1] else None),
            ))
        return records

    def statistics(self) -> GradeStatistics:
        return calculate_statistics(self.records())

    def to_dataframe(self) -> pd.DataFrame:
        """Return the data rows as a DataFrame with the header as columns."""
        width = len(self.header)
        rows = [(row + [""] * width)[:width] for row in self.data_rows]
        return pd.DataFrame(rows, columns=self.header)


def load_grading_file(
    content: bytes,
    class_name: str | None = None,
    schema: TemplateSchema = DEFAULT_SCHEMA,
    text_max_length: int = TEXT_MAX_LENGTH
) -> GradeGrid:
    """
    Build a grid from a template or from a sheet this application produced.
    
    Args:
        content: Raw .xlsx bytes.
        class_name: Class the sheet belongs to; selects the grading convention.
        schema: Template layout.
        text_max_length: Limit applied to free-text side fields.
    
    Returns:
        A GradeGrid whose convention is resolved once, here.
    """
    all_rows = read_sheet_rows(content)
    
    if is_app_sheet(all_rows):
        width = len(APP_HEADER)
        cells = [list(APP_HEADER)] + [(r + [""] * width)[:max(width, len(r))] for r in all_rows[1:]]
    else:
        cells = build_display_rows(all_rows, schema)
    
    convention = resolve_convention(class_name)
    logger.info(
        "Loaded grading sheet for %s: %d students, graded out of %d",
        class_name or "unknown class", len(cells) - 1, convention.max_grade
    )
    return GradeGrid(cells, all_rows, convention, schema, text_max_length)
