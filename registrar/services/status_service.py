"""
Derived status of (student, module) pairs and the dashboard built from it.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.entities import AbstractEntity, Student, Module
from ..core.enums import ModuleStatus, PASS_THRESHOLD, YEAR_SEMESTERS
from ..core.exceptions import ValidationError
from ..persistence.repository import StudentManagementSystem


def derive_status(enrolled: bool, grade: Optional[float]) -> Optional[ModuleStatus]:
    """Classify a pair from its enrollment and grade.

    Returns None for a pair that is neither enrolled nor graded; such
    pairs are not shown anywhere.
    """
    if enrolled:
        if grade is None:
            return ModuleStatus.IN_PROGRESS
        return ModuleStatus.PASS if grade >= PASS_THRESHOLD else ModuleStatus.FAIL
    if grade is None:
        return None
    return ModuleStatus.COMPLETED if grade >= PASS_THRESHOLD else ModuleStatus.TO_REPEAT


@dataclass
class DashboardRow:
    """One line of the dashboard."""
    student_id: str
    student_name: str
    module_id: str
    module_name: str
    grade: Optional[float]
    status: ModuleStatus
    enrolled: bool
    
    def cells(self) -> List[str]:
        """Displayed text of the row, as the filter sees it."""
        return [
            self.student_name,
            self.module_name,
            "" if self.grade is None else str(self.grade),
            self.status.value,
            "Yes" if self.enrolled else "No",
        ]


@dataclass
class StudentSummary:
    """Headline information about one student."""
    student_id: str
    name: str
    email: str
    passed_modules: int


@dataclass
class BoardEntry:
    """A module offered in a semester, seen from one student."""
    module_id: str
    module_name: str
    enrolled: bool
    locked: bool


class StatusService:
    """Read-only queries over a StudentManagementSystem.

    Nothing is cached: every call recomputes from the current state.
    """
    
    def __init__(self, system: StudentManagementSystem):
        self._system = system
    
    @property
    def system(self) -> StudentManagementSystem:
        return self._system
    
    def status_for(self, student: Student, module: Module) -> Optional[ModuleStatus]:
        """Derived status of one pair, or None if the pair is not shown."""
        grade = self._system.find_grade(student, module)
        return derive_status(
            self._system.is_enrolled(student, module),
            None if grade is None else grade.value,
        )
    
    def dashboard(self) -> List[DashboardRow]:
        """Rows for every student x module pair that has a status."""
        rows = []
        students = sorted(self._system.students, key=lambda s: s.id)
        modules = sorted(self._system.modules, key=lambda m: m.id)
        for student in students:
            for module in modules:
                grade = self._system.find_grade(student, module)
                value = None if grade is None else grade.value
                enrolled = self._system.is_enrolled(student, module)
                status = derive_status(enrolled, value)
                if status is None:
                    continue
                rows.append(DashboardRow(
                    student_id=student.id,
                    student_name=student.name,
                    module_id=module.id,
                    module_name=module.name,
                    grade=value,
                    status=status,
                    enrolled=enrolled,
                ))
        return rows
    
    @staticmethod
    def _compile_filter(pattern: str):
        try:
            return re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise ValidationError(f"Invalid filter {pattern!r}: {e}", error_code="invalid_filter")
    
    @staticmethod
    def filter_rows(rows: List[DashboardRow], pattern: Optional[str]) -> List[DashboardRow]:
        """Keep rows where any displayed cell matches the regular expression."""
        if not pattern:
            return list(rows)
        regex = StatusService._compile_filter(pattern)
        return [row for row in rows if any(regex.search(cell) for cell in row.cells())]
    
    @staticmethod
    def filter_records(entities: Sequence[AbstractEntity], pattern: Optional[str]) -> List[AbstractEntity]:
        """Keep students, modules or grades with a record field matching the pattern.

        Matches against the same fields the data file holds, e.g. ID, name
        and email for a student.
        """
        if not pattern:
            return list(entities)
        regex = StatusService._compile_filter(pattern)
        return [entity for entity in entities
                if any(regex.search(cell) for cell in entity.to_record())]
    
    def status_counts(self) -> Dict[str, int]:
        counts = Counter(row.status for row in self.dashboard())
        return {status.value: counts.get(status, 0) for status in ModuleStatus}
    
    def student_summary(self, student: Student) -> StudentSummary:
        passed = 0
        for module in self._system.modules:
            status = self.status_for(student, module)
            if status is not None and status.is_passed:
                passed += 1
        return StudentSummary(student.id, student.name, student.email, passed)
    
    def has_passed(self, student: Student, module: Module) -> bool:
        status = self.status_for(student, module)
        return status is not None and status.is_passed
    
    # Semester board
    
    @staticmethod
    def semesters_for_year(year: int) -> Tuple[str, str]:
        if year not in YEAR_SEMESTERS:
            raise ValidationError(f"Year must be one of {sorted(YEAR_SEMESTERS)}, got {year}")
        return YEAR_SEMESTERS[year]
    
    def modules_for_semester(self, semester_identifier: str) -> List[Module]:
        return sorted(
            (m for m in self._system.modules if m.runs_in(semester_identifier)),
            key=lambda m: m.id,
        )
    
    def semester_board(self, student: Student, year: int) -> Dict[str, List[BoardEntry]]:
        """Modules of both semesters of a year with the student's enrollment.

        Modules the student already passed are locked against changes.
        """
        board = {}
        for identifier in self.semesters_for_year(year):
            board[identifier] = [
                BoardEntry(
                    module_id=module.id,
                    module_name=module.name,
                    enrolled=self._system.is_enrolled(student, module),
                    locked=self.has_passed(student, module),
                )
                for module in self.modules_for_semester(identifier)
            ]
        return board
