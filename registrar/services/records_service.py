"""
ID addressed operations on the repository for user-facing drivers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from ..core.entities import Student, Module, Grade
from ..core.exceptions import ResourceNotFoundError, ValidationError
from ..persistence.repository import StudentManagementSystem
from .status_service import StatusService

EMPTY_FIELDS_MESSAGE = "All fields must be filled out."


@dataclass
class SyncResult:
    """Outcome of applying a set of enrollment choices."""
    enrolled: List[str] = field(default_factory=list)
    unenrolled: List[str] = field(default_factory=list)
    locked: List[str] = field(default_factory=list)


def _clean_text(*values: Optional[Union[str, float]]) -> List[str]:
    """Trim every field; a field left empty is rejected."""
    cleaned = ["" if value is None else str(value).strip() for value in values]
    if not all(cleaned):
        raise ValidationError(EMPTY_FIELDS_MESSAGE, error_code="empty_field")
    return cleaned


def _trim(value: str) -> str:
    return value.strip() if isinstance(value, str) else value


class RecordsService:
    """Resolves IDs, validates free text and calls into the repository.

    Unlike the repository, misses here raise ResourceNotFoundError so a
    driver can tell the user what went wrong.
    """
    
    def __init__(self, system: StudentManagementSystem, status_service: Optional[StatusService] = None):
        self._system = system
        self._status_service = status_service or StatusService(system)
    
    @property
    def system(self) -> StudentManagementSystem:
        return self._system
    
    # Lookups
    
    def get_student(self, student_id: str) -> Student:
        student = self._system.get_student_by_id(_trim(student_id))
        if student is None:
            raise ResourceNotFoundError("Student not found.", details={"student_id": student_id})
        return student
    
    def get_module(self, module_id: str) -> Module:
        module = self._system.get_module_by_id(_trim(module_id))
        if module is None:
            raise ResourceNotFoundError("Module not found.", details={"module_id": module_id})
        return module
    
    def get_pair(self, student_id: str, module_id: str):
        student = self._system.get_student_by_id(_trim(student_id))
        module = self._system.get_module_by_id(_trim(module_id))
        if student is None or module is None:
            raise ResourceNotFoundError(
                "Student or module not found.",
                details={"student_id": student_id, "module_id": module_id},
            )
        return student, module
    
    def get_grade(self, student_id: str, module_id: str) -> Grade:
        student, module = self.get_pair(student_id, module_id)
        grade = self._system.find_grade(student, module)
        if grade is None:
            raise ResourceNotFoundError("Grade not found.",
                                        details={"student_id": student_id, "module_id": module_id})
        return grade
    
    # Students
    
    def add_student(self, name: str, student_id: str, email: str) -> Student:
        name, student_id, email = _clean_text(name, student_id, email)
        student = Student(name, student_id, email)
        self._system.add_student(student)
        return student
    
    def update_student(self, student_id: str, name: str, new_id: str, email: str) -> Student:
        name, new_id, email = _clean_text(name, new_id, email)
        student = self.get_student(student_id)
        self._system.update_student(student, name, new_id, email)
        return student
    
    def remove_student(self, student_id: str) -> Student:
        student = self.get_student(*_clean_text(student_id))
        self._system.remove_student(student)
        return student
    
    # Modules
    
    def add_module(self, name: str, module_id: str, teacher: str, semester: str) -> Module:
        name, module_id, teacher, semester = _clean_text(name, module_id, teacher, semester)
        module = Module(name, module_id, teacher, semester)
        self._system.add_module(module)
        return module
    
    def update_module(self, module_id: str, name: str, new_id: str,
                      teacher: Optional[str] = None, semester: Optional[str] = None) -> Module:
        name, new_id = _clean_text(name, new_id)
        if teacher is not None:
            teacher, = _clean_text(teacher)
        if semester is not None:
            semester, = _clean_text(semester)
        module = self.get_module(module_id)
        self._system.update_module(module, name, new_id, teacher=teacher, semester=semester)
        return module
    
    def remove_module(self, module_id: str) -> Module:
        module = self.get_module(*_clean_text(module_id))
        self._system.remove_module(module)
        return module
    
    # Enrollment
    
    def enroll(self, student_id: str, module_id: str) -> Module:
        student, module = self.get_pair(*_clean_text(student_id, module_id))
        self._system.enroll_student_in_module(student, module)
        return module
    
    def unenroll(self, student_id: str, module_id: str) -> Module:
        student, module = self.get_pair(*_clean_text(student_id, module_id))
        self._system.unenroll_student_from_module(student, module)
        return module
    
    def sync_enrollments(self, student_id: str, choices: Dict[str, bool]) -> SyncResult:
        """Apply enrolled/not-enrolled choices for several modules at once.

        All module IDs are resolved before anything changes. Modules the
        student has already passed are left as they are.
        """
        student = self.get_student(student_id)
        modules = {module_id: self.get_module(module_id) for module_id in choices}
        result = SyncResult()
        for module_id in sorted(choices):
            module = modules[module_id]
            if self._status_service.has_passed(student, module):
                result.locked.append(module.id)
                continue
            if choices[module_id]:
                self._system.enroll_student_in_module(student, module)
                result.enrolled.append(module.id)
            else:
                self._system.unenroll_student_from_module(student, module)
                result.unenrolled.append(module.id)
        return result
    
    # Grades
    
    def record_grade(self, student_id: str, module_id: str, value: Union[str, float]) -> Grade:
        """Add a grade, or change the existing one for the pair."""
        student_id, module_id, text = _clean_text(student_id, module_id, value)
        number = self._parse_value(text)
        student, module = self.get_pair(student_id, module_id)
        return self._system.add_grade(student, module, number)
    
    def update_grade(self, student_id: str, module_id: str, value: Union[str, float]) -> Grade:
        text, = _clean_text(value)
        number = self._parse_value(text)
        grade = self.get_grade(student_id, module_id)
        self._system.update_grade(grade, number)
        return grade
    
    def remove_grade(self, student_id: str, module_id: str) -> Grade:
        grade = self.get_grade(student_id, module_id)
        self._system.remove_grade(grade)
        return grade
    
    @staticmethod
    def _parse_value(value: str) -> float:
        try:
            return float(value)
        except ValueError:
            raise ValidationError(f"Grade must be a number, got {value!r}", error_code="invalid_grade")
