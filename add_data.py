"""
Seed a running registrar server with sample students, modules,
enrollments and grades through its REST API.

    registrar --rest-port 8000 &
    python add_data.py [--base-url http://127.0.0.1:8000]

The base URL can also come from REGISTRAR_BASE_URL.
"""

import argparse
import json
import os
import sys

import requests

_UTF8_CONSOLE = "utf" in (getattr(sys.stdout, "encoding", None) or "").lower()
_OK_CHAR = "✓" if _UTF8_CONSOLE else "[OK]"
_FAIL_CHAR = "✗" if _UTF8_CONSOLE else "[FAIL]"

BASE_URL = os.environ.get("REGISTRAR_BASE_URL", "http://127.0.0.1:8000")


def check_server():
    """Return True when the server answers its health check."""
    try:
        healthy = requests.get(f"{BASE_URL}/health", timeout=2).ok
    except requests.exceptions.RequestException:
        healthy = False
    if healthy:
        print(f"{_OK_CHAR} Registrar reachable at {BASE_URL}")
        return True
    print(f"{_FAIL_CHAR} No registrar answering at {BASE_URL}")
    print("Start one with:  registrar --data-file registrar_data.txt --rest-port 8000")
    return False

def _post(path, data, expected_status, what):
    try:
        response = requests.post(f"{BASE_URL}{path}", json=data, timeout=5)
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error creating {what}: {e}")
        return None
    if response.status_code == expected_status:
        print(f"{_OK_CHAR} Created {what}")
        return response.json()
    print(f"{_FAIL_CHAR} Failed to create {what}: {response.text}")
    return None

def create_student(name, student_id, email):
    """Create a new student."""
    return _post("/students", {"id": student_id, "name": name, "email": email},
                 201, f"student {name} ({student_id})")

def create_module(name, module_id, teacher, semester):
    """Create a new module."""
    data = {"id": module_id, "name": name, "teacher": teacher, "semester": semester}
    return _post("/modules", data, 201, f"module {module_id} - {name}")

def enroll_student(student_id, module_id):
    """Enroll a student in a module."""
    return _post("/enrollments", {"student_id": student_id, "module_id": module_id},
                 200, f"enrollment {student_id} -> {module_id}")

def record_grade(student_id, module_id, value):
    """Record a grade."""
    data = {"student_id": student_id, "module_id": module_id, "value": value}
    return _post("/grades", data, 201, f"grade {value} for {student_id} in {module_id}")

def _get(path, what):
    try:
        response = requests.get(f"{BASE_URL}{path}", timeout=5)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Could not fetch {what}: {e}")
        return None
    return response.json()

def show_dashboard():
    """Print every dashboard row."""
    rows = _get("/dashboard", "dashboard") or []
    print(f"\nDashboard: {len(rows)} rows")
    for row in rows:
        grade = "" if row["grade"] is None else row["grade"]
        enrolled = "Yes" if row["enrolled"] else "No"
        print(f"  {row['student_name']:15} {row['module_name']:28} {grade!s:6} "
              f"{row['status']:12} {enrolled}")
    return rows

def get_statistics():
    """Print record and status counts."""
    stats = _get("/statistics", "statistics")
    if stats is not None:
        print("\nStatistics")
        print(json.dumps(stats["statistics"], indent=2))
    return stats

def save_data():
    """Ask the server to write its data file."""
    result = _post("/data/save", None, 200, "data file")
    if result:
        print(f"  Saved to {result['location']}")
    return result


STUDENTS = [
    ("Alice Johnson", "S001", "alice.johnson@university.edu"),
    ("Bob Smith", "S002", "bob.smith@university.edu"),
    ("Carol Davis", "S003", "carol.davis@university.edu"),
    ("David Wilson", "S004", "david.wilson@university.edu"),
]

MODULES = [
    ("Introduction to Programming", "CS101", "Dr. Byrne", "SEM1"),
    ("Data Structures", "CS201", "Dr. Byrne", "SEM2"),
    ("Database Systems", "CS301", "Prof. Walsh", "SEM3"),
    ("Calculus", "MATH101", "Dr. Kelly", "SEM1&SEM2"),
    ("Software Project", "CS399", "Prof. Walsh", "SEM5&SEM6"),
]

ENROLLMENTS = [
    ("S001", "CS201"),
    ("S001", "MATH101"),
    ("S002", "CS101"),
    ("S003", "CS301"),
    ("S004", "CS399"),
]

GRADES = [
    ("S001", "CS101", 72.5),    # Completed
    ("S001", "MATH101", 38.0),  # Fail
    ("S002", "CS101", 64.0),    # Pass
    ("S003", "CS201", 22.0),    # To Repeat
]


def main():
    global BASE_URL
    parser = argparse.ArgumentParser(description="Add sample records to a running registrar")
    parser.add_argument("--base-url", type=str, help="Registrar server URL")
    args = parser.parse_args()
    if args.base_url:
        BASE_URL = args.base_url.rstrip("/")

    if not check_server():
        sys.exit(1)

    print("\nStudents")
    for name, student_id, email in STUDENTS:
        create_student(name, student_id, email)

    print("\nModules")
    for name, module_id, teacher, semester in MODULES:
        create_module(name, module_id, teacher, semester)

    print("\nEnrollments")
    for student_id, module_id in ENROLLMENTS:
        enroll_student(student_id, module_id)

    print("\nGrades")
    for student_id, module_id, value in GRADES:
        record_grade(student_id, module_id, value)

    show_dashboard()
    get_statistics()
    save_data()

    print(f"\n{_OK_CHAR} Sample records added.")
    print(f"  Dashboard:          curl {BASE_URL}/dashboard")
    print(f"  Filtered dashboard: curl '{BASE_URL}/dashboard?filter=repeat'")
    print(f"  API docs:           {BASE_URL}/docs")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n{_FAIL_CHAR} Interrupted")
        sys.exit(1)
