"""Shared fixtures for the registrar tests."""

import pytest

from registrar.core.entities import Student, Module
from registrar.persistence import StudentManagementSystem


@pytest.fixture
def system():
    return StudentManagementSystem()


@pytest.fixture
def alice():
    return Student("Alice", "S1", "a@x.com")


@pytest.fixture
def bob():
    return Student("Bob", "S2", "bob@x.com")


@pytest.fixture
def maths():
    return Module("Maths", "M1", "Dr. X", "SEM1")


@pytest.fixture
def programming():
    return Module("Programming", "M2", "Dr. Y", "SEM1&SEM2")


@pytest.fixture
def populated(system, alice, bob, maths, programming):
    """Two students, two modules, one enrollment and one grade."""
    system.add_student(alice)
    system.add_student(bob)
    system.add_module(maths)
    system.add_module(programming)
    system.enroll_student_in_module(alice, maths)
    system.add_grade(bob, programming, 72.5)
    return system
