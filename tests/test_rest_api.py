"""Tests for the REST API."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from registrar.api import RegistrarRestAPI
from registrar.persistence import StudentManagementSystem, TextFileStore


@pytest.fixture
def store(tmp_path):
    return TextFileStore(tmp_path / "registrar_data.txt")


@pytest.fixture
def client(store):
    api = RegistrarRestAPI(StudentManagementSystem(), store)
    return TestClient(api.app)


@pytest.fixture
def seeded(client):
    client.post("/students", json={"id": "S1", "name": "Alice", "email": "a@x.com"})
    client.post("/students", json={"id": "S2", "name": "Bob", "email": "bob@x.com"})
    client.post("/modules", json={"id": "M1", "name": "Maths", "teacher": "Dr. X", "semester": "SEM1"})
    client.post("/modules", json={"id": "M2", "name": "Programming", "teacher": "Dr. Y",
                                  "semester": "SEM1&SEM2"})
    client.post("/enrollments", json={"student_id": "S1", "module_id": "M1"})
    client.post("/grades", json={"student_id": "S2", "module_id": "M2", "value": 72.5})
    return client


class TestBasics:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Registrar API"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestStudents:
    """Test the student endpoints."""

    def test_create_and_get(self, client):
        response = client.post("/students", json={"id": "S1", "name": "Alice", "email": "a@x.com"})
        assert response.status_code == 201

        response = client.get("/students/S1")
        assert response.status_code == 200
        assert response.json() == {
            "id": "S1", "name": "Alice", "email": "a@x.com", "enrolled_modules": []
        }

    def test_duplicate_id(self, seeded):
        response = seeded.post("/students", json={"id": "S1", "name": "Other", "email": "o@x.com"})

        assert response.status_code == 409

    def test_blank_field(self, client):
        response = client.post("/students", json={"id": "S1", "name": "  ", "email": "a@x.com"})

        assert response.status_code == 400
        assert response.json()["detail"] == "All fields must be filled out."

    def test_missing_student(self, client):
        response = client.get("/students/S9")

        assert response.status_code == 404
        assert response.json()["detail"] == "Student not found."

    def test_list_is_ordered(self, seeded):
        response = seeded.get("/students")

        assert [s["id"] for s in response.json()] == ["S1", "S2"]

    def test_list_filter(self, seeded):
        response = seeded.get("/students", params={"filter": "alice"})

        assert [s["id"] for s in response.json()] == ["S1"]

    def test_list_invalid_filter(self, seeded):
        assert seeded.get("/students", params={"filter": "(["}).status_code == 400

    def test_update_changes_id(self, seeded):
        response = seeded.put("/students/S1", json={"id": "S10", "name": "Alice", "email": "a@x.com"})
        assert response.status_code == 200

        assert seeded.get("/students/S1").status_code == 404
        assert seeded.get("/modules/M1").json()["enrolled_students"] == ["S10"]

    def test_delete_cascades(self, seeded):
        response = seeded.delete("/students/S2")
        assert response.status_code == 204

        assert seeded.get("/grades").json() == []

    def test_summary(self, seeded):
        response = seeded.get("/students/S2/summary")

        assert response.json() == {
            "id": "S2", "name": "Bob", "email": "bob@x.com", "passed_modules": 1
        }

    def test_enrollments(self, seeded):
        assert seeded.get("/students/S1/enrollments").json() == ["M1"]

        response = seeded.put("/students/S2/enrollments", json={"choices": {"M1": True, "M2": True}})

        assert response.status_code == 200
        assert response.json() == {"enrolled": ["M1"], "unenrolled": [], "locked": ["M2"]}

    def test_board(self, seeded):
        response = seeded.get("/students/S1/board/1")

        assert response.status_code == 200
        board = response.json()["semesters"]
        assert [e["module_id"] for e in board["SEM1"]] == ["M1", "M2"]
        assert board["SEM1"][0]["enrolled"] is True

    def test_board_rejects_unknown_year(self, seeded):
        assert seeded.get("/students/S1/board/7").status_code == 400


class TestModules:
    """Test the module endpoints."""

    def test_create_and_get(self, client):
        response = client.post("/modules", json={"id": "M2", "name": "Programming",
                                                 "teacher": "Dr. Y", "semester": "SEM1&SEM2"})
        assert response.status_code == 201
        assert response.json()["semesters"] == ["SEM1", "SEM2"]

    def test_filter_by_semester(self, seeded):
        response = seeded.get("/modules", params={"semester": "SEM2"})

        assert [m["id"] for m in response.json()] == ["M2"]

    def test_filter_modules(self, seeded):
        response = seeded.get("/modules", params={"filter": "dr\\. y"})

        assert [m["id"] for m in response.json()] == ["M2"]

    def test_filter_grades(self, seeded):
        response = seeded.get("/grades", params={"filter": "S2"})

        assert [(g["student_id"], g["module_id"]) for g in response.json()] == [("S2", "M2")]
        assert seeded.get("/grades", params={"filter": "S1"}).json() == []

    def test_update_keeps_teacher(self, seeded):
        response = seeded.put("/modules/M1", json={"id": "M1", "name": "Mathematics"})

        assert response.status_code == 200
        assert response.json()["teacher"] == "Dr. X"
        assert response.json()["name"] == "Mathematics"

    def test_delete_unknown(self, client):
        response = client.delete("/modules/M9")

        assert response.status_code == 404
        assert response.json()["detail"] == "Module not found."


class TestEnrollmentsAndGrades:
    """Test enrollment, grades and derived statuses."""

    def test_enroll(self, seeded):
        response = seeded.post("/enrollments", json={"student_id": "S2", "module_id": "M1"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Student enrolled in module Maths"
        assert body["status"] == "In Progress"

    def test_enroll_unknown(self, seeded):
        response = seeded.post("/enrollments", json={"student_id": "S9", "module_id": "M1"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Student or module not found."

    def test_grade_then_unenroll(self, seeded):
        response = seeded.post("/grades", json={"student_id": "S1", "module_id": "M1", "value": 30})
        assert response.status_code == 201
        assert response.json()["status"] == "Fail"

        seeded.delete("/enrollments/S1/M1")

        response = seeded.get("/status/S1/M1")
        assert response.json() == {
            "student_id": "S1", "module_id": "M1", "enrolled": False,
            "grade": 30.0, "status": "To Repeat",
        }

    def test_update_grade(self, seeded):
        response = seeded.put("/grades/S2/M2", json={"value": 20})

        assert response.status_code == 200
        assert response.json()["status"] == "To Repeat"

    def test_update_missing_grade(self, seeded):
        response = seeded.put("/grades/S1/M1", json={"value": 20})

        assert response.status_code == 404
        assert response.json()["detail"] == "Grade not found."

    def test_delete_grade(self, seeded):
        assert seeded.delete("/grades/S2/M2").status_code == 204
        assert seeded.get("/status/S2/M2").json()["status"] is None


class TestDashboard:
    """Test the dashboard and statistics."""

    def test_dashboard(self, seeded):
        rows = seeded.get("/dashboard").json()

        assert [(r["student_id"], r["module_id"], r["status"]) for r in rows] == [
            ("S1", "M1", "In Progress"),
            ("S2", "M2", "Completed"),
        ]

    def test_dashboard_filter(self, seeded):
        rows = seeded.get("/dashboard", params={"filter": "^prog"}).json()

        assert [r["student_id"] for r in rows] == ["S2"]

    def test_dashboard_invalid_filter(self, seeded):
        assert seeded.get("/dashboard", params={"filter": "(["}).status_code == 400

    def test_statistics(self, seeded):
        statistics = seeded.get("/statistics").json()["statistics"]

        assert statistics["records"] == {"students": 2, "modules": 2, "grades": 1, "enrollments": 1}
        assert statistics["statuses"]["Completed"] == 1


class TestPersistence:
    """Test saving and loading through the API."""

    def test_save_then_load(self, seeded, store):
        response = seeded.post("/data/save")
        assert response.status_code == 200
        assert response.json()["message"] == "Data saved successfully."
        assert store.exists()

        seeded.delete("/students/S1")
        response = seeded.post("/data/load")

        assert response.status_code == 200
        assert response.json()["students"] == 2
        assert seeded.get("/students/S1").json()["enrolled_modules"] == ["M1"]

    def test_load_malformed_file(self, client, store):
        Path(store.path).write_text("Students\nS1, Alice\n", encoding="utf-8")

        response = client.post("/data/load")

        assert response.status_code == 422
        assert response.json()["detail"].startswith("Line 2:")

    def test_load_reports_skipped_records(self, client, store):
        Path(store.path).write_text("Students\nS1, Alice, a@x.com\nEnrollments\nS1, M9\n", encoding="utf-8")

        response = client.post("/data/load")

        assert response.status_code == 200
        assert response.json()["skipped"][0]["line_number"] == 4
