"""Tests for the ID addressed records service."""

import pytest

from registrar.core.exceptions import (
    DuplicateEntityError, ResourceNotFoundError, ValidationError
)
from registrar.services import EMPTY_FIELDS_MESSAGE, RecordsService


@pytest.fixture
def service(populated):
    return RecordsService(populated)


class TestValidation:
    """Test the emptiness checks."""

    @pytest.mark.parametrize("name, student_id, email", [
        ("", "S3", "c@x.com"),
        ("Carol", "   ", "c@x.com"),
        ("Carol", "S3", None),
    ])
    def test_empty_student_fields(self, service, name, student_id, email):
        with pytest.raises(ValidationError) as exc_info:
            service.add_student(name, student_id, email)

        assert exc_info.value.message == EMPTY_FIELDS_MESSAGE

    def test_empty_module_fields(self, service):
        with pytest.raises(ValidationError):
            service.add_module("Networks", "M3", "", "SEM3")

    def test_non_numeric_grade(self, service):
        with pytest.raises(ValidationError):
            service.record_grade("S1", "M1", "excellent")

    def test_empty_grade(self, service):
        with pytest.raises(ValidationError):
            service.record_grade("S1", "M1", "")


class TestLookups:
    """Test not found handling."""

    def test_unknown_student(self, service):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            service.remove_student("S9")

        assert exc_info.value.message == "Student not found."

    def test_unknown_module(self, service):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            service.get_module("M9")

        assert exc_info.value.message == "Module not found."

    def test_unknown_pair(self, service):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            service.enroll("S1", "M9")

        assert exc_info.value.message == "Student or module not found."

    def test_unknown_grade(self, service):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            service.get_grade("S1", "M1")

        assert exc_info.value.message == "Grade not found."


class TestTrimming:
    """Surrounding whitespace never becomes part of stored text."""

    def test_student_fields_are_trimmed(self, service):
        service.add_student("  Carol ", " S3 ", " c@x.com\t")

        student = service.get_student("S3")
        assert (student.id, student.name, student.email) == ("S3", "Carol", "c@x.com")

    def test_module_fields_are_trimmed(self, service):
        service.add_module(" Networks ", " M3", "Dr. Z ", " SEM3 ")

        module = service.get_module("M3")
        assert (module.name, module.teacher, module.semester) == ("Networks", "Dr. Z", "SEM3")

    def test_lookups_ignore_surrounding_whitespace(self, service, populated):
        service.enroll(" S2 ", "M1 ")
        service.record_grade("S2 ", " M1", " 61 ")

        assert populated.get_module_by_id("M1").enrolled_students == {"S1", "S2"}
        assert service.get_grade(" S2", "M1").value == 61.0

    def test_update_trims_new_id(self, service, populated):
        service.update_module("M1", "Maths", " M10 ", teacher=" Dr. W ")

        module = populated.get_module_by_id("M10")
        assert module.teacher == "Dr. W"


class TestOperations:
    """Test operations by ID."""

    def test_add_and_update_student(self, service, populated):
        service.add_student("Carol", "S3", "c@x.com")
        service.update_student("S3", "Caroline", "S30", "caroline@x.com")

        student = populated.get_student_by_id("S30")
        assert student.name == "Caroline"
        assert populated.get_student_by_id("S3") is None

    def test_duplicate_student(self, service):
        with pytest.raises(DuplicateEntityError):
            service.add_student("Alicia", "S1", "b@x.com")

    def test_update_module_keeps_optional_fields(self, service):
        module = service.update_module("M1", "Mathematics", "M1")

        assert module.teacher == "Dr. X"

    def test_record_grade_accepts_text(self, service):
        grade = service.record_grade("S1", "M1", " 55.5 ")

        assert grade.value == 55.5

    def test_record_grade_twice_updates(self, service, populated):
        service.record_grade("S1", "M1", 30)
        service.record_grade("S1", "M1", 60)

        assert service.get_grade("S1", "M1").value == 60.0
        assert len(populated.grades) == 2

    def test_update_and_remove_grade(self, service):
        service.update_grade("S2", "M2", "38")
        assert service.get_grade("S2", "M2").value == 38.0

        service.remove_grade("S2", "M2")
        with pytest.raises(ResourceNotFoundError):
            service.get_grade("S2", "M2")

    def test_enroll_and_unenroll(self, service, populated):
        service.enroll("S2", "M1")
        assert populated.get_module_by_id("M1").enrolled_students == {"S1", "S2"}

        service.unenroll("S1", "M1")
        assert populated.get_module_by_id("M1").enrolled_students == {"S2"}

    def test_remove_module(self, service, populated):
        service.remove_module("M2")

        assert populated.get_module_by_id("M2") is None
        assert populated.grades == []


class TestSyncEnrollments:
    """Test applying several enrollment choices."""

    def test_sync(self, service, populated):
        result = service.sync_enrollments("S1", {"M1": False, "M2": True})

        assert result.enrolled == ["M2"]
        assert result.unenrolled == ["M1"]
        assert result.locked == []
        assert populated.get_student_by_id("S1").enrolled_modules == {"M2"}

    def test_passed_modules_are_locked(self, service, populated):
        result = service.sync_enrollments("S2", {"M2": True, "M1": True})

        assert result.locked == ["M2"]
        assert result.enrolled == ["M1"]
        assert populated.get_student_by_id("S2").enrolled_modules == {"M1"}

    def test_unknown_module_changes_nothing(self, service, populated):
        with pytest.raises(ResourceNotFoundError):
            service.sync_enrollments("S1", {"M1": False, "M9": True})

        assert populated.get_student_by_id("S1").enrolled_modules == {"M1"}
