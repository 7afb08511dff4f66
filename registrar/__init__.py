"""
Registrar: student, module, enrollment and grade records

Keeps students, academic modules, enrollments and grades for a small
institution in memory, derives each student's module status from them,
and saves the whole state to a plain text file between runs.
"""

__version__ = "1.0.0"
__author__ = "Registrar Development Team"
__description__ = "Student, module, enrollment and grade records"
