"""
Core entities of the registrar: students, modules and grades.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Set, Tuple

from .enums import PASS_THRESHOLD


class AbstractEntity(ABC):
    """Base entity identified by a caller-supplied, case-sensitive ID.

    Equality and hashing follow the ID. Since the ID can change through
    ``StudentManagementSystem.update_student``/``update_module``, an entity
    held in a caller's set or used as a dict key must be re-inserted after
    such a change; the repository itself only keys by ID strings.
    """
    
    def __init__(self, entity_id: str):
        self._id = entity_id
    
    @property
    def id(self) -> str:
        """Get the entity ID."""
        return self._id
    
    def update(self, **kwargs: Any) -> None:
        """Update entity fields in place.

        Only the repository should change ``id``, since it also has to
        re-key its indexes.
        """
        for key, value in kwargs.items():
            if hasattr(self, f"_{key}"):
                setattr(self, f"_{key}", value)
    
    @abstractmethod
    def to_record(self) -> List[str]:
        """Fields of the entity as written to the data file."""
        pass
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AbstractEntity):
            return NotImplemented
        return type(self) is type(other) and self._id == other._id
    
    def __hash__(self) -> int:
        return hash((type(self).__name__, self._id))
    
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id!r})"


class Student(AbstractEntity):
    """Student entity with the set of modules they are enrolled in."""
    
    def __init__(self, name: str, student_id: str, email: str):
        super().__init__(student_id)
        self._name = name
        self._email = email
        self._enrolled_modules: Set[str] = set()  # Module IDs
    
    @property
    def name(self) -> str:
        return self._name
    
    @property
    def email(self) -> str:
        return self._email
    
    @property
    def enrolled_modules(self) -> Set[str]:
        """IDs of the modules the student is enrolled in (a copy)."""
        return self._enrolled_modules.copy()
    
    def is_enrolled_in(self, module_id: str) -> bool:
        return module_id in self._enrolled_modules
    
    def enroll_in_module(self, module_id: str) -> None:
        """Record enrollment in a module."""
        self._enrolled_modules.add(module_id)
    
    def drop_module(self, module_id: str) -> None:
        """Forget enrollment in a module."""
        self._enrolled_modules.discard(module_id)
    
    def to_record(self) -> List[str]:
        return [self._id, self._name, self._email]
    
    def __str__(self) -> str:
        return f"Name: {self._name}, ID: {self._id}, Email: {self._email}"


class Module(AbstractEntity):
    """A course offering, scheduled in one or more semesters.

    The semester text normally looks like ``SEM1`` or ``SEM1&SEM2``.
    """
    
    def __init__(self, name: str, module_id: str, teacher: str, semester: str):
        super().__init__(module_id)
        self._name = name
        self._teacher = teacher
        self._semester = semester
        self._enrolled_students: Set[str] = set()  # Student IDs
    
    @property
    def name(self) -> str:
        return self._name
    
    @property
    def teacher(self) -> str:
        return self._teacher
    
    @property
    def semester(self) -> str:
        return self._semester
    
    @property
    def semesters(self) -> List[str]:
        """The individual semester slots, upper-cased."""
        return [part.strip().upper() for part in self._semester.split("&") if part.strip()]
    
    @property
    def enrolled_students(self) -> Set[str]:
        """IDs of the students enrolled in this module (a copy)."""
        return self._enrolled_students.copy()
    
    def runs_in(self, semester_identifier: str) -> bool:
        """Case-insensitive match of an identifier such as ``SEM3``."""
        return semester_identifier.upper() in self._semester.upper()
    
    def has_student(self, student_id: str) -> bool:
        return student_id in self._enrolled_students
    
    def add_student(self, student_id: str) -> None:
        self._enrolled_students.add(student_id)
    
    def drop_student(self, student_id: str) -> None:
        self._enrolled_students.discard(student_id)
    
    def to_record(self) -> List[str]:
        return [self._id, self._name, self._teacher, self._semester]
    
    def __str__(self) -> str:
        return (f"Module: {self._name}, ID: {self._id}, "
                f"Teacher: {self._teacher}, Semesters: {self._semester}")


class Grade:
    """Grade of one student in one module."""
    
    def __init__(self, student: Student, module: Module, value: float):
        self._student = student
        self._module = module
        self._value = float(value)
    
    @property
    def student(self) -> Student:
        return self._student
    
    @property
    def module(self) -> Module:
        return self._module
    
    @property
    def value(self) -> float:
        return self._value
    
    @value.setter
    def value(self, value: float) -> None:
        self._value = float(value)
    
    @property
    def key(self) -> Tuple[str, str]:
        """The (student ID, module ID) pair identifying this grade."""
        return (self._student.id, self._module.id)
    
    @property
    def is_pass(self) -> bool:
        return self._value >= PASS_THRESHOLD
    
    def to_record(self) -> List[str]:
        return [self._student.id, self._module.id, repr(self._value)]
    
    def __repr__(self) -> str:
        return f"Grade(student={self._student.id!r}, module={self._module.id!r}, value={self._value!r})"
    
    def __str__(self) -> str:
        return f"Student ID: {self._student.id}, Module ID: {self._module.id}, Grade: {self._value}"
