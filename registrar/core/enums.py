"""
Enumerations and constants for the registrar.
"""

from enum import Enum
from typing import Optional


class ModuleStatus(Enum):
    """Display status of a (student, module) pair, derived on every query."""
    IN_PROGRESS = "In Progress"
    PASS = "Pass"
    FAIL = "Fail"
    COMPLETED = "Completed"
    TO_REPEAT = "To Repeat"
    
    @property
    def is_passed(self) -> bool:
        return self in (ModuleStatus.PASS, ModuleStatus.COMPLETED)


class RecordSection(Enum):
    """Sections of the text data file, in the order they are written."""
    STUDENTS = "Students"
    MODULES = "Modules"
    GRADES = "Grades"
    ENROLLMENTS = "Enrollments"
    
    @property
    def field_count(self) -> int:
        return _FIELD_COUNTS[self]
    
    @classmethod
    def from_header(cls, line: str) -> Optional["RecordSection"]:
        """Return the section a bare header line introduces, or None."""
        for section in cls:
            if line == section.value:
                return section
        return None


_FIELD_COUNTS = {
    RecordSection.STUDENTS: 3,
    RecordSection.MODULES: 4,
    RecordSection.GRADES: 3,
    RecordSection.ENROLLMENTS: 2,
}

# Grade value at or above which a graded module counts as passed.
PASS_THRESHOLD = 40.0

# Semester identifiers shown for each study year.
YEAR_SEMESTERS = {
    1: ("SEM1", "SEM2"),
    2: ("SEM3", "SEM4"),
    3: ("SEM5", "SEM6"),
}
