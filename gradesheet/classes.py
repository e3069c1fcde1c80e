"""Class catalogue and the grading convention each class uses."""

from dataclasses import dataclass
from enum import Enum


class GradingConvention(Enum):
    """Maximum mark of a grading system."""

    TWENTY_POINT = 20
    HUNDRED_POINT = 100

    @property
    def max_grade(self) -> int:
        return self.value

    @property
    def placeholder(self) -> str:
        return f"0-{self.value}"


@dataclass(frozen=True)
class ClassDefinition:
    name: str
    folder: str
    convention: GradingConvention


ENGLISH_CLASSES = [
    "Form 1",
    "Form 2",
    "Form 3",
    "Form 4",
    "Form 5",
    "Lower Six",
    "Upper 6",
]

FRENCH_CLASSES = [
    "6eme",
    "5eme",
    "4eme",
    "3eme",
    "2nd C",
    "2nd A",
    "Pre A",
    "Pre C",
    "Pre D",
    "Tle A",
    "Tle C",
    "Tle D",
]

CLASS_DEFINITIONS: list[ClassDefinition] = [
    ClassDefinition(name, name.replace(" ", ""), GradingConvention.HUNDRED_POINT)
    for name in ENGLISH_CLASSES
] + [
    ClassDefinition(name, name.replace(" ", ""), GradingConvention.TWENTY_POINT)
    for name in FRENCH_CLASSES
]

_BY_NAME = {c.name: c for c in CLASS_DEFINITIONS}


def class_names() -> list[str]:
    """Return every known class name in catalogue order."""
    return [c.name for c in CLASS_DEFINITIONS]


def get_class(name: str) -> ClassDefinition | None:
    return _BY_NAME.get(name)


def resolve_convention(class_name: str | None) -> GradingConvention:
    """
    Return the grading convention of a class.
    
    Classes outside the catalogue are graded out of 100.
    """
    definition = get_class(class_name or "")
    if definition is None:
        return GradingConvention.HUNDRED_POINT
    return definition.convention


def class_folder(class_name: str) -> str:
    """Return the template folder of a class, falling back to the name without spaces."""
    definition = get_class(class_name)
    if definition is None:
        return class_name.replace(" ", "")
    return definition.folder
