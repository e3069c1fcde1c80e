"""Exception types raised by the grade sheet workflow."""


class GradeSheetError(Exception):
    """Base class for all grade sheet errors."""


class TransportError(GradeSheetError):
    """A network call to the school API failed or was rejected."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidTransitionError(GradeSheetError):
    """The editor session was asked to move to a state it cannot reach."""


class ReadOnlyFieldError(GradeSheetError):
    """A write was attempted on a template field that is display-only."""


class UnsupportedFileError(GradeSheetError):
    """An uploaded student list has an extension we cannot read."""


class TemplateParseError(GradeSheetError):
    """A grading workbook could not be opened."""
