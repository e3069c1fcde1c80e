"""Grade editor session: state machine plus persistence between page loads."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, MutableMapping, Protocol
import json
import logging
import time

from .classes import resolve_convention
from .errors import InvalidTransitionError, TransportError
from .excel_generator import generate_workbook, upload_file_name, workbook_to_bytes
from .grade_grid import GradeGrid, cell_text
from .validators import TEXT_MAX_LENGTH, sanitize_text_input

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "gradeEditorState"


class SessionStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Dictionary-backed storage for tests and the command line."""

    def __init__(self, data: MutableMapping[str, str] | None = None):
        self.data = {} if data is None else data

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class StreamlitStorage(MemoryStorage):
    """Storage living in ``st.session_state`` for the lifetime of a browser tab."""

    def __init__(self, session_state: MutableMapping[str, Any] | None = None):
        if session_state is None:
            import streamlit as st
            session_state = st.session_state
        super().__init__(session_state)

    def delete(self, key: str) -> None:
        if key in self.data:
            del self.data[key]


def _text_rows(rows: Any) -> list[list[str]]:
    """
    Coerce a stored grid to rows of text; older clients stored numbers.
    
    Raises:
        TypeError: The value is not a list of lists.
    """
    if rows is None:
        return []
    if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
        raise TypeError("Stored grid is not a list of rows")
    return [[cell_text(value) for value in row] for row in rows]


class EditorState(Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    EDITING = "editing"
    FINALIZING = "finalizing"
    UPLOADED = "uploaded"


@dataclass
class FinalizeResult:
    success: bool
    message: str
    file_name: str = ""


class EditorSession:
    """
    One grade-editing session.
    
    Every edit goes through the grid validators and is persisted to the
    injected storage under ``key``. A successful upload or a cancel clears
    the stored state.
    """

    def __init__(
        self,
        storage: SessionStorage,
        key: str = DEFAULT_SESSION_KEY,
        text_max_length: int = TEXT_MAX_LENGTH
    ):
        self.storage = storage
        self.key = key
        self.text_max_length = text_max_length
        self.state = EditorState.EMPTY
        self.grid: GradeGrid | None = None
        self.file_name = ""
        self.class_name = ""
        self.term = ""

    # --- State helpers ---

    def _transition(self, target: EditorState, allowed: tuple[EditorState, ...]):
        if self.state not in allowed:
            raise InvalidTransitionError(
                f"Cannot move from {self.state.value} to {target.value}"
            )
        logger.info("Editor session %s -> %s", self.state.value, target.value)
        self.state = target

    def _require_grid(self) -> GradeGrid:
        if self.state not in (EditorState.LOADED, EditorState.EDITING) or self.grid is None:
            raise InvalidTransitionError(f"No editable grade sheet ({self.state.value})")
        if self.state == EditorState.LOADED:
            self._transition(EditorState.EDITING, (EditorState.LOADED,))
        return self.grid

    # --- Persistence ---

    def to_state(self) -> dict[str, Any]:
        """Return the persisted form of the session."""
        grid = self.grid
        stats: dict[str, str] = {}
        if grid is not None:
            stats = {
                "statistiques": grid.read_field("statistics_title"),
                "lessonsPlanned": grid.read_field("lessons_planned"),
                "lessonsDone": grid.read_field("courses_done"),
                "hoursPlanned": grid.read_field("hours_planned"),
                "hoursDone": grid.read_field("period_hours_done"),
            }
        return {
            "editorData": grid.cells if grid else [],
            "editorFileName": self.file_name,
            "editorClass": self.class_name,
            "term": self.term,
            "stats": stats,
            "allRows": grid.all_rows if grid else [],
        }

    def save(self) -> None:
        self.storage.set(self.key, json.dumps(self.to_state(), ensure_ascii=False))

    def load(self) -> bool:
        """
        Restore a session saved by an earlier page.
        
        Returns:
            False when nothing is stored or the stored value is unreadable.
        """
        raw = self.storage.get(self.key)
        if not raw:
            return False
        
        try:
            data = json.loads(raw)
            editor_data = _text_rows(data.get("editorData"))
            all_rows = _text_rows(data.get("allRows"))
        except (json.JSONDecodeError, AttributeError, TypeError):
            logger.warning("Discarding unreadable editor state under %s", self.key)
            self.storage.delete(self.key)
            return False

        self.class_name = cell_text(data.get("editorClass"))
        self.file_name = cell_text(data.get("editorFileName"))
        self.term = cell_text(data.get("term"))
        self.grid = GradeGrid(
            editor_data,
            all_rows,
            resolve_convention(self.class_name),
            text_max_length=self.text_max_length,
        )
        self.state = EditorState.LOADED
        logger.info("Restored editor session for %s", self.file_name)
        return True

    def clear(self) -> None:
        self.storage.delete(self.key)

    # --- Operations ---

    def start(self, grid: GradeGrid, file_name: str, class_name: str) -> None:
        """Open a freshly parsed grade sheet, replacing any previous one."""
        self._transition(
            EditorState.LOADED,
            (EditorState.EMPTY, EditorState.LOADED, EditorState.EDITING, EditorState.UPLOADED),
        )
        self.grid = grid
        self.file_name = file_name
        self.class_name = class_name
        self.term = ""
        self.save()

    def edit_grade(self, row: int, col: int, raw: str) -> bool:
        changed = self._require_grid().set_grade(row, col, raw)
        if changed:
            self.save()
        return changed

    def edit_field(self, name: str, raw: str) -> str:
        value = self._require_grid().write_field(name, raw)
        self.save()
        return value

    def set_term(self, raw: str) -> str:
        self._require_grid()
        self.term = sanitize_text_input(raw, self.text_max_length)
        self.save()
        return self.term

    def cancel(self) -> None:
        """Discard the session without persisting anything."""
        if self.state == EditorState.EMPTY:
            return
        logger.info("Editor session %s -> %s", self.state.value, EditorState.EMPTY.value)
        self.state = EditorState.EMPTY
        self.grid = None
        self.file_name = ""
        self.class_name = ""
        self.term = ""
        self.clear()

    def finalize(self, client, uploaded_by: str | None) -> FinalizeResult:
        """
        Serialise the grid and upload it.
        
        Transport failures are reported in the result and leave the session
        editable with its data intact.
        """
        if not uploaded_by:
            return FinalizeResult(False, "User not authenticated")
        
        self._transition(EditorState.FINALIZING, (EditorState.LOADED, EditorState.EDITING))
        out_name = upload_file_name(self.file_name, self.term, self.grid.header)
        
        try:
            content = workbook_to_bytes(generate_workbook(self.grid))
            related_id = f"{uploaded_by}-{int(time.time() * 1000)}"
            client.upload_grade_sheet(out_name, content, related_id, uploaded_by)
        except TransportError as exc:
            logger.error("Uploading %s failed: %s", out_name, exc.message)
            self._transition(EditorState.EDITING, (EditorState.FINALIZING,))
            self.save()
            return FinalizeResult(False, exc.message or "Upload failed", out_name)
        
        self._transition(EditorState.UPLOADED, (EditorState.FINALIZING,))
        self.clear()
        return FinalizeResult(True, "Grades uploaded successfully!", out_name)
