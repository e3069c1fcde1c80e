import io

import pytest
from openpyxl import Workbook

from gradesheet.session import EditorSession, MemoryStorage


def workbook_bytes(cells: dict) -> bytes:
    """Build an .xlsx payload from {(row, col): value} using 0-based coordinates."""
    wb = Workbook()
    ws = wb.active
    for (row, col), value in cells.items():
        ws.cell(row=row + 1, column=col + 1, value=value)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


TEMPLATE_CELLS = {
    (0, 0): "LYCEE BILINGUE DE BAFIA",
    (2, 4): "NOM ET PRENOM",
    (2, 5): "NOTE 1",
    (2, 6): "NOTE 2",
    (3, 4): "ABONG KOUDI CAMILOU",
    (3, 5): 12,
    (3, 6): 14,
    (4, 4): "BELLA MARIE",
    (4, 5): 8.5,
    (4, 8): "Solve linear equations",
    (5, 5): 11,
    (6, 4): "CHO PAUL",
    (7, 0): "STATISTIQUES",
    (7, 4): "DIKA ANNE",
    (7, 5): 15,
    (7, 6): 9,
    (8, 0): "Cours prévus",
    (8, 1): 8,
    (8, 9): 40,
    (8, 10): "Conseil annuel",
    (9, 0): "Cours faits",
    (9, 1): 6,
    (9, 9): 60,
    (10, 0): "Heures prévues",
    (10, 1): 24,
    (10, 9): 10,
    (11, 0): "Heures faites",
    (11, 1): 18,
    (12, 0): "TP/TD prévus",
    (12, 1): 4,
    (13, 0): "TP/TD faits",
    (13, 1): 0,
}


@pytest.fixture
def template_bytes() -> bytes:
    return workbook_bytes(TEMPLATE_CELLS)


@pytest.fixture
def app_sheet_bytes() -> bytes:
    return workbook_bytes({
        (0, 0): "Ide", (0, 1): "NOM ET PRENOM", (0, 2): "NOTE 1", (0, 3): "NOTE 2",
        (1, 0): 1, (1, 1): "Jane Doe", (1, 2): 13.5, (1, 3): 10,
        (2, 0): 2, (2, 1): "John Smith",
    })


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def editor(storage) -> EditorSession:
    return EditorSession(storage)
