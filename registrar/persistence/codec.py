"""
Line-oriented text format for the full repository state.

The file holds four sections, each introduced by a bare header line::

    Students
    <id>, <name>, <email>
    Modules
    <id>, <name>, <teacher>, <semester>
    Grades
    <studentId>, <moduleId>, <gradeValue>
    Enrollments
    <studentId>, <moduleId>

Sections are written in that order but may appear in any order on read;
all records are buffered before cross references are resolved.
"""

import io
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, TextIO, Tuple

from ..core.entities import Student, Module
from ..core.enums import RecordSection
from ..core.exceptions import (
    DuplicateEntityError, MalformedRecordError, PersistenceError, RecordParseError
)
from .repository import StudentManagementSystem

FIELD_SEPARATOR = ", "


@dataclass
class SkippedRecord:
    """A record left out of a load because it names an unknown entity."""
    line_number: int
    section: RecordSection
    reason: str


@dataclass
class LoadReport:
    """Summary of a completed load."""
    students: int = 0
    modules: int = 0
    grades: int = 0
    enrollments: int = 0
    skipped: List[SkippedRecord] = field(default_factory=list)
    
    def __str__(self) -> str:
        text = (f"{self.students} students, {self.modules} modules, "
                f"{self.grades} grades, {self.enrollments} enrollments")
        if self.skipped:
            text += f" ({len(self.skipped)} records skipped)"
        return text


# (line number, fields)
_Record = Tuple[int, List[str]]


class TextRecordCodec:
    """Encodes a StudentManagementSystem to and from the text format."""
    
    def __init__(self, strict_references: bool = False):
        self._strict_references = strict_references
    
    @property
    def strict_references(self) -> bool:
        return self._strict_references
    
    # Writing
    
    def encode_lines(self, system: StudentManagementSystem) -> List[str]:
        """Render every line of the file, without line terminators.

        Raises PersistenceError if a field cannot be represented.
        """
        lines = [RecordSection.STUDENTS.value]
        for student in sorted(system.students, key=lambda s: s.id):
            lines.append(self._encode_fields(student.to_record()))
        
        lines.append(RecordSection.MODULES.value)
        for module in sorted(system.modules, key=lambda m: m.id):
            lines.append(self._encode_fields(module.to_record()))
        
        lines.append(RecordSection.GRADES.value)
        for grade in sorted(system.grades, key=lambda g: g.key):
            lines.append(self._encode_fields(grade.to_record()))
        
        lines.append(RecordSection.ENROLLMENTS.value)
        for student_id, module_id in sorted(system.enrollments()):
            lines.append(self._encode_fields([student_id, module_id]))
        
        return lines
    
    def dump(self, system: StudentManagementSystem, stream: TextIO) -> None:
        """Write the full state to a text stream."""
        lines = self.encode_lines(system)
        stream.write("".join(line + "\n" for line in lines))
    
    def dumps(self, system: StudentManagementSystem) -> str:
        return "".join(line + "\n" for line in self.encode_lines(system))
    
    @staticmethod
    def _encode_fields(fields: List[str]) -> str:
        for value in fields:
            if FIELD_SEPARATOR in value or "\n" in value or "\r" in value:
                raise PersistenceError(
                    f"Cannot save field {value!r}: it contains a line break "
                    f"or the separator {FIELD_SEPARATOR!r}",
                    error_code="unencodable_field",
                )
        return FIELD_SEPARATOR.join(fields)
    
    # Reading
    
    def load(self, stream: TextIO) -> Tuple[StudentManagementSystem, LoadReport]:
        """Build a fresh repository from a text stream."""
        return self.parse(stream)
    
    def loads(self, text: str) -> Tuple[StudentManagementSystem, LoadReport]:
        return self.parse(io.StringIO(text, newline=""))
    
    def parse(self, lines: Iterable[str]) -> Tuple[StudentManagementSystem, LoadReport]:
        """Parse lines of the text format.

        Malformed records abort the whole parse with MalformedRecordError;
        nothing partial is ever returned.
        """
        records = self._split_sections(lines)
        system = StudentManagementSystem()
        report = LoadReport()
        
        for line_number, (student_id, name, email) in records[RecordSection.STUDENTS]:
            try:
                system.add_student(Student(name, student_id, email))
            except DuplicateEntityError:
                raise MalformedRecordError(f"duplicate student ID {student_id!r}",
                                           line_number=line_number)
            report.students += 1
        
        for line_number, (module_id, name, teacher, semester) in records[RecordSection.MODULES]:
            try:
                system.add_module(Module(name, module_id, teacher, semester))
            except DuplicateEntityError:
                raise MalformedRecordError(f"duplicate module ID {module_id!r}",
                                           line_number=line_number)
            report.modules += 1
        
        for line_number, (student_id, module_id, value) in records[RecordSection.GRADES]:
            pair = self._resolve(system, report, RecordSection.GRADES, line_number, student_id, module_id)
            if pair is None:
                continue
            system.add_grade(pair[0], pair[1], self._parse_grade(value, line_number))
            report.grades += 1
        
        for line_number, (student_id, module_id) in records[RecordSection.ENROLLMENTS]:
            pair = self._resolve(system, report, RecordSection.ENROLLMENTS, line_number, student_id, module_id)
            if pair is None:
                continue
            system.enroll_student_in_module(pair[0], pair[1])
            report.enrollments += 1
        
        return system, report
    
    def _split_sections(self, lines: Iterable[str]) -> Dict[RecordSection, List[_Record]]:
        records: Dict[RecordSection, List[_Record]] = {section: [] for section in RecordSection}
        current = None
        
        for line_number, raw in enumerate(lines, 1):
            line = raw.rstrip("\r\n")
            if not line.strip():
                continue
            
            header = RecordSection.from_header(line.strip())
            if header is not None:
                current = header
                continue
            
            if current is None:
                raise MalformedRecordError("record found before any section header",
                                           line_number=line_number)
            
            fields = line.split(FIELD_SEPARATOR)
            if len(fields) != current.field_count:
                raise MalformedRecordError(
                    f"{current.value} record needs {current.field_count} fields, "
                    f"found {len(fields)}: {line!r}",
                    line_number=line_number,
                    details={"section": current.value, "line": line},
                )
            if current is RecordSection.GRADES:
                self._parse_grade(fields[2], line_number)
            records[current].append((line_number, fields))
        
        return records
    
    @staticmethod
    def _parse_grade(value: str, line_number: int) -> float:
        try:
            return float(value)
        except ValueError:
            raise RecordParseError(f"grade value {value!r} is not a number",
                                   line_number=line_number)
    
    def _resolve(self, system: StudentManagementSystem, report: LoadReport,
                 section: RecordSection, line_number: int,
                 student_id: str, module_id: str):
        student = system.get_student_by_id(student_id)
        module = system.get_module_by_id(module_id)
        if student is not None and module is not None:
            return student, module
        
        missing = []
        if student is None:
            missing.append(f"student {student_id!r}")
        if module is None:
            missing.append(f"module {module_id!r}")
        reason = "unknown " + " and ".join(missing)
        
        if self._strict_references:
            raise MalformedRecordError(reason, line_number=line_number,
                                       details={"section": section.value})
        report.skipped.append(SkippedRecord(line_number, section, reason))
        return None
