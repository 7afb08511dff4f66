"""
Core module containing the entity model, enums and exceptions.
"""

from .entities import AbstractEntity, Student, Module, Grade
from .enums import ModuleStatus, RecordSection, PASS_THRESHOLD, YEAR_SEMESTERS
from .exceptions import (
    RegistrarException,
    ValidationError,
    ResourceNotFoundError,
    DuplicateEntityError,
    PersistenceError,
    MalformedRecordError,
    RecordParseError,
    ConfigurationError,
)
from .interfaces import DataStore

__all__ = [
    # Entities
    "AbstractEntity",
    "Student",
    "Module",
    "Grade",
    
    # Enums and constants
    "ModuleStatus",
    "RecordSection",
    "PASS_THRESHOLD",
    "YEAR_SEMESTERS",
    
    # Interfaces
    "DataStore",
    
    # Exceptions
    "RegistrarException",
    "ValidationError",
    "ResourceNotFoundError",
    "DuplicateEntityError",
    "PersistenceError",
    "MalformedRecordError",
    "RecordParseError",
    "ConfigurationError",
]
