"""
Persistence module: the in-memory repository and its text file format.
"""

from .repository import StudentManagementSystem
from .codec import TextRecordCodec, LoadReport, SkippedRecord, FIELD_SEPARATOR
from .file_store import TextFileStore, StoreFactory, load, save

__all__ = [
    "StudentManagementSystem",
    "TextRecordCodec",
    "LoadReport",
    "SkippedRecord",
    "FIELD_SEPARATOR",
    "TextFileStore",
    "StoreFactory",
    "load",
    "save",
]
