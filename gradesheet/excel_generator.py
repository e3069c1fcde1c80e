"""Excel workbook generation for filled grade sheets."""

import io

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from .grade_grid import GRADE_COLUMNS, NAME_COLUMN, GradeGrid
from .validators import parse_grade

SHEET_TITLE = "Sheet1"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DEFAULT_TERM = "T1"
DEFAULT_NOTE_COLUMNS = "NOTE_1|NOTE_2"


def col_letter(col_num: int) -> str:
    """Convert 1-based column number to Excel column letter."""
    return get_column_letter(col_num)


def _cell_value(text: str, col_idx: int):
    """Marks and the running index are written as numbers, everything else as text."""
    if col_idx in GRADE_COLUMNS or col_idx == 0:
        number = parse_grade(text)
        if number is not None:
            return int(number) if number.is_integer() else number
    return text


def generate_workbook(grid: GradeGrid) -> Workbook:
    """
    Rebuild a single-sheet workbook from the grid's display table.
    
    Only the simplified table (header plus student rows) is written; the
    source template layout and formatting are not reproduced.
    
    Args:
        grid: The edited grade grid.
        
    Returns:
        openpyxl Workbook object
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    
    # Styles
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    grade_fill = PatternFill(start_color="FFE699", end_color="FFE699", fill_type="solid")
    center_align = Alignment(horizontal="center", vertical="center")
    thin_border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin")
    )
    
    # --- Row 1: Header ---
    for col_idx, title in enumerate(grid.header, 1):
        cell = ws.cell(row=1, column=col_idx, value=title)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = center_align
        cell.border = thin_border
    
    # --- Student rows ---
    for row_idx, row in enumerate(grid.data_rows, 2):
        for col_idx, text in enumerate(row):
            cell = ws.cell(row=row_idx, column=col_idx + 1, value=_cell_value(text, col_idx))
            cell.border = thin_border
            if col_idx != NAME_COLUMN:
                cell.alignment = center_align
            if col_idx in GRADE_COLUMNS:
                cell.fill = grade_fill
    
    # Adjust column widths
    ws.column_dimensions[col_letter(1)].width = 8
    ws.column_dimensions[col_letter(NAME_COLUMN + 1)].width = 35
    for c in GRADE_COLUMNS:
        ws.column_dimensions[col_letter(c + 1)].width = 12
    
    return wb


def workbook_to_bytes(wb: Workbook) -> bytes:
    """Save a workbook to an in-memory .xlsx payload."""
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def upload_file_name(file_name: str, term: str, header: list[str]) -> str:
    """
    Name of an uploaded grade sheet: subject, term and mark columns.
    
    ``Maths.xlsx`` in term 2 with headers ``NOTE 1``/``NOTE 2`` becomes
    ``Maths-2-NOTE 1|NOTE 2.xlsx``. A blank term is written as ``T1``.
    
    Args:
        file_name: Name of the template or sheet being edited.
        term: Term entered by the teacher.
        header: Display header of the grid.
    
    Returns:
        The .xlsx file name used for the upload.
    """
    subject = file_name[:-5] if file_name.lower().endswith(".xlsx") else file_name
    note_columns = "|".join(h for h in header[GRADE_COLUMNS[0]:] if h and "NOTE" in h)
    return f"{subject}-{term.strip() or DEFAULT_TERM}-{note_columns or DEFAULT_NOTE_COLUMNS}.xlsx"
