"""Server-side listing of grading templates."""

from pathlib import Path
import re

_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_class_segment(class_name: str) -> str:
    """Keep only letters, digits, underscores and hyphens, blocking path traversal."""
    return _UNSAFE.sub("", class_name or "")


def list_templates(templates_root: str | Path, class_name: str) -> list[str]:
    """
    Return the .xlsx templates stored for a class.
    
    Raises:
        ValueError: The class name is empty after sanitising.
    """
    safe = sanitize_class_segment(class_name)
    if not safe:
        raise ValueError("Class not specified")
    
    directory = Path(templates_root) / safe
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.iterdir() if p.is_file() and p.name.endswith(".xlsx"))
