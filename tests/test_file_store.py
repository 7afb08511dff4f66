"""Tests for the file-backed store."""

import pytest

from registrar.core.entities import Student, Module
from registrar.core.exceptions import ConfigurationError, MalformedRecordError, PersistenceError
from registrar.persistence import (
    StoreFactory, StudentManagementSystem, TextFileStore, load, save
)


class TestTextFileStore:
    """Test saving and loading files."""

    def test_save_then_load_reproduces_data(self, tmp_path, populated):
        path = tmp_path / "records.txt"

        save(populated, str(path))
        loaded = load(str(path))

        assert sorted((s.id, s.name, s.email) for s in loaded.students) == [
            ("S1", "Alice", "a@x.com"),
            ("S2", "Bob", "bob@x.com"),
        ]
        assert sorted((m.id, m.name, m.teacher, m.semester) for m in loaded.modules) == [
            ("M1", "Maths", "Dr. X", "SEM1"),
            ("M2", "Programming", "Dr. Y", "SEM1&SEM2"),
        ]
        assert [(g.key, g.value) for g in loaded.grades] == [(("S2", "M2"), 72.5)]
        assert list(loaded.enrollments()) == [("S1", "M1")]

    def test_save_overwrites_and_leaves_no_temp_files(self, tmp_path, populated):
        path = tmp_path / "records.txt"
        path.write_text("old contents\n", encoding="utf-8")

        TextFileStore(str(path)).save(populated)

        assert path.read_text(encoding="utf-8").startswith("Students\n")
        assert [p.name for p in tmp_path.iterdir()] == ["records.txt"]

    def test_utf8_round_trip(self, tmp_path, system):
        system.add_student(Student("Zoë Ó Briain", "S1", "zoe@x.ie"))
        path = tmp_path / "records.txt"

        save(system, str(path))

        assert load(str(path)).get_student_by_id("S1").name == "Zoë Ó Briain"

    def test_missing_file_is_an_io_failure(self, tmp_path):
        store = TextFileStore(str(tmp_path / "missing.txt"))

        assert not store.exists()
        with pytest.raises(PersistenceError):
            store.load()

    def test_unwritable_location_is_an_io_failure(self, tmp_path, populated):
        with pytest.raises(PersistenceError):
            TextFileStore(str(tmp_path / "no-such-dir" / "records.txt")).save(populated)

    def test_unencodable_text_is_an_io_failure(self, tmp_path, system):
        path = tmp_path / "records.txt"
        path.write_text("Students\n", encoding="utf-8")
        system.add_student(Student("Bad\ud800", "S1", "a@x.com"))

        with pytest.raises(PersistenceError):
            TextFileStore(str(path)).save(system)

        assert [p.name for p in tmp_path.iterdir()] == ["records.txt"]
        assert path.read_text(encoding="utf-8") == "Students\n"

    def test_malformed_file_propagates(self, tmp_path):
        path = tmp_path / "records.txt"
        path.write_text("Students\nS1, Alice\n", encoding="utf-8")

        with pytest.raises(MalformedRecordError):
            TextFileStore(str(path)).load()

    def test_load_report_lists_skipped_records(self, tmp_path):
        path = tmp_path / "records.txt"
        path.write_text("Modules\nM1, Maths, Dr. X, SEM1\nEnrollments\nS1, M1\n", encoding="utf-8")

        system, report = TextFileStore(str(path)).load()

        assert len(report.skipped) == 1
        assert system.get_module_by_id("M1").enrolled_students == set()


class TestSystemFileMethods:
    """Test the repository's own save and load."""

    def test_load_from_file_replaces_state(self, tmp_path, populated):
        path = tmp_path / "records.txt"
        populated.save_to_file(str(path))
        other = StudentManagementSystem()
        other.add_module(Module("Stale", "X1", "Dr. S", "SEM9"))

        other.load_from_file(str(path))

        assert other.get_module_by_id("X1") is None
        assert other.get_student_by_id("S1").name == "Alice"

    def test_failed_load_keeps_state(self, tmp_path, populated):
        path = tmp_path / "records.txt"
        path.write_text("Students\nS1\n", encoding="utf-8")

        with pytest.raises(MalformedRecordError):
            populated.load_from_file(str(path))

        assert len(populated.students) == 2


class TestStoreFactory:
    """Test creating stores by type."""

    def test_text_store(self, tmp_path):
        store = StoreFactory.create_store("text", path=str(tmp_path / "r.txt"), strict_references=True)

        assert isinstance(store, TextFileStore)
        assert store.codec.strict_references

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            StoreFactory.create_store("sqlite", path="x.db")

    def test_missing_path(self):
        with pytest.raises(ConfigurationError):
            StoreFactory.create_store("text")
