"""
In-memory repository holding students, modules, grades and enrollments.
"""

from typing import Dict, Iterator, List, Optional, Tuple

from ..core.entities import Student, Module, Grade
from ..core.exceptions import DuplicateEntityError


class StudentManagementSystem:
    """Owns the three entity collections and keeps them consistent.

    Students and modules are indexed by ID, grades by the
    (student ID, module ID) pair, so every lookup is deterministic and a
    pair can never carry two grades. Operations given an entity that was
    never added are silent no-ops. The class does no locking; callers
    sharing an instance between threads must serialise access.
    """
    
    def __init__(self):
        self._students: Dict[str, Student] = {}
        self._modules: Dict[str, Module] = {}
        self._grades: Dict[Tuple[str, str], Grade] = {}
    
    # Accessors
    
    @property
    def students(self) -> List[Student]:
        return list(self._students.values())
    
    @property
    def modules(self) -> List[Module]:
        return list(self._modules.values())
    
    @property
    def grades(self) -> List[Grade]:
        return list(self._grades.values())
    
    def enrollments(self) -> Iterator[Tuple[str, str]]:
        """Yield every (student ID, module ID) enrollment pair."""
        for student in self._students.values():
            for module_id in sorted(student.enrolled_modules):
                yield (student.id, module_id)
    
    def get_student_by_id(self, student_id: str) -> Optional[Student]:
        return self._students.get(student_id)
    
    def get_module_by_id(self, module_id: str) -> Optional[Module]:
        return self._modules.get(module_id)
    
    def find_grade(self, student: Student, module: Module) -> Optional[Grade]:
        """Return the grade for the pair, or None."""
        grade = self._grades.get((student.id, module.id))
        if grade is None or grade.student is not student or grade.module is not module:
            return None
        return grade
    
    def has_student(self, student: Student) -> bool:
        return self._students.get(student.id) is student
    
    def has_module(self, module: Module) -> bool:
        return self._modules.get(module.id) is module
    
    def is_enrolled(self, student: Student, module: Module) -> bool:
        return (self.has_student(student) and self.has_module(module)
                and student.is_enrolled_in(module.id))
    
    # Students
    
    def add_student(self, student: Student) -> None:
        """Add a student. A different student with the same ID is rejected."""
        existing = self._students.get(student.id)
        if existing is student:
            return
        if existing is not None:
            raise DuplicateEntityError(
                f"Student ID {student.id} is already in use",
                error_code="duplicate_student",
                details={"student_id": student.id},
            )
        self._students[student.id] = student
    
    def remove_student(self, student: Student) -> None:
        """Remove a student together with their grades and enrollments."""
        if not self.has_student(student):
            return
        del self._students[student.id]
        for module_id in student.enrolled_modules:
            module = self._modules.get(module_id)
            if module is not None:
                module.drop_student(student.id)
            student.drop_module(module_id)
        for key in [k for k, g in self._grades.items() if g.student is student]:
            del self._grades[key]
    
    def update_student(self, student: Student, name: str, student_id: str, email: str) -> None:
        """Change a student's fields, re-keying everything that refers to the ID."""
        if not self.has_student(student):
            return
        old_id = student.id
        if student_id != old_id and student_id in self._students:
            raise DuplicateEntityError(
                f"Student ID {student_id} is already in use",
                error_code="duplicate_student",
                details={"student_id": student_id},
            )
        student.update(name=name, email=email, id=student_id)
        if student_id == old_id:
            return
        
        del self._students[old_id]
        self._students[student_id] = student
        for module_id in student.enrolled_modules:
            module = self._modules.get(module_id)
            if module is not None:
                module.drop_student(old_id)
                module.add_student(student_id)
        self._rekey_grades()
    
    # Modules
    
    def add_module(self, module: Module) -> None:
        """Add a module. A different module with the same ID is rejected."""
        existing = self._modules.get(module.id)
        if existing is module:
            return
        if existing is not None:
            raise DuplicateEntityError(
                f"Module ID {module.id} is already in use",
                error_code="duplicate_module",
                details={"module_id": module.id},
            )
        self._modules[module.id] = module
    
    def remove_module(self, module: Module) -> None:
        """Remove a module together with its grades and enrollments."""
        if not self.has_module(module):
            return
        del self._modules[module.id]
        for student_id in module.enrolled_students:
            student = self._students.get(student_id)
            if student is not None:
                student.drop_module(module.id)
            module.drop_student(student_id)
        for key in [k for k, g in self._grades.items() if g.module is module]:
            del self._grades[key]
    
    def update_module(self, module: Module, name: str, module_id: str,
                      teacher: Optional[str] = None, semester: Optional[str] = None) -> None:
        """Change a module's fields. Teacher and semester are kept unless given."""
        if not self.has_module(module):
            return
        old_id = module.id
        if module_id != old_id and module_id in self._modules:
            raise DuplicateEntityError(
                f"Module ID {module_id} is already in use",
                error_code="duplicate_module",
                details={"module_id": module_id},
            )
        changes = {"name": name, "id": module_id}
        if teacher is not None:
            changes["teacher"] = teacher
        if semester is not None:
            changes["semester"] = semester
        module.update(**changes)
        if module_id == old_id:
            return
        
        del self._modules[old_id]
        self._modules[module_id] = module
        for student_id in module.enrolled_students:
            student = self._students.get(student_id)
            if student is not None:
                student.drop_module(old_id)
                student.enroll_in_module(module_id)
        self._rekey_grades()
    
    # Enrollment
    
    def enroll_student_in_module(self, student: Student, module: Module) -> None:
        """Enroll a student; both sides of the relationship change together."""
        if not (self.has_student(student) and self.has_module(module)):
            return
        student.enroll_in_module(module.id)
        module.add_student(student.id)
    
    def unenroll_student_from_module(self, student: Student, module: Module) -> None:
        """Unenroll a student; grades are kept."""
        if not (self.has_student(student) and self.has_module(module)):
            return
        student.drop_module(module.id)
        module.drop_student(student.id)
    
    # Grades
    
    def add_grade(self, student: Student, module: Module, value: float) -> Optional[Grade]:
        """Record a grade for the pair.

        An existing grade for the same pair is updated instead of being
        duplicated. Returns None when either entity is not in the system.
        """
        if not (self.has_student(student) and self.has_module(module)):
            return None
        existing = self._grades.get((student.id, module.id))
        if existing is not None:
            existing.value = value
            return existing
        grade = Grade(student, module, value)
        self._grades[grade.key] = grade
        return grade
    
    def remove_grade(self, grade: Grade) -> None:
        if self._grades.get(grade.key) is grade:
            del self._grades[grade.key]
    
    def update_grade(self, grade: Grade, new_value: float) -> None:
        if self._grades.get(grade.key) is grade:
            grade.value = new_value
    
    def _rekey_grades(self) -> None:
        self._grades = {grade.key: grade for grade in self._grades.values()}
    
    # Whole-state operations
    
    def clear(self) -> None:
        """Forget every entity."""
        self._students = {}
        self._modules = {}
        self._grades = {}
    
    def replace_with(self, other: "StudentManagementSystem") -> None:
        """Take over the full state of another repository."""
        self._students = other._students
        self._modules = other._modules
        self._grades = other._grades
    
    def save_to_file(self, file_name: str) -> None:
        """Write the full state to a text data file."""
        from .file_store import TextFileStore
        TextFileStore(file_name).save(self)
    
    def load_from_file(self, file_name: str, strict_references: bool = False):
        """Replace the state with the contents of a text data file.

        Nothing changes unless the whole file parses. Returns the load report.
        """
        from .file_store import TextFileStore
        loaded, report = TextFileStore(file_name, strict_references=strict_references).load()
        self.replace_with(loaded)
        return report
    
    def __repr__(self) -> str:
        return (f"StudentManagementSystem(students={len(self._students)}, "
                f"modules={len(self._modules)}, grades={len(self._grades)})")
