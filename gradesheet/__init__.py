"""Grade sheet import, editing and export."""

from .config_schema import DEFAULT_CONFIG, get_default_config, merge_config, load_config
from .classes import GradingConvention, ClassDefinition, class_names, resolve_convention
from .validators import validate_grade_input, validate_numeric_input, sanitize_text_input
from .models import Gender, StudentRecord, GradeStatistics, TermCounters, TermStatistics
from .parsers import parse_student_list, parse_delimited_content, parse_student_file
from .statistics import calculate_statistics, calculate_term_statistics
from .grade_grid import GradeGrid, load_grading_file
from .excel_generator import generate_workbook, workbook_to_bytes
from .session import EditorSession, EditorState, MemoryStorage, StreamlitStorage
from .api_client import GradingApiClient
from .templates import list_templates

__all__ = [
    "DEFAULT_CONFIG",
    "get_default_config",
    "merge_config",
    "load_config",
    "GradingConvention",
    "ClassDefinition",
    "class_names",
    "resolve_convention",
    "validate_grade_input",
    "validate_numeric_input",
    "sanitize_text_input",
    "Gender",
    "StudentRecord",
    "GradeStatistics",
    "TermCounters",
    "TermStatistics",
    "parse_student_list",
    "parse_delimited_content",
    "parse_student_file",
    "calculate_statistics",
    "calculate_term_statistics",
    "GradeGrid",
    "load_grading_file",
    "generate_workbook",
    "workbook_to_bytes",
    "EditorSession",
    "EditorState",
    "MemoryStorage",
    "StreamlitStorage",
    "GradingApiClient",
    "list_templates",
]
