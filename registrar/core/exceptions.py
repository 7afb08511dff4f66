"""
Custom exceptions for the registrar.
"""

from typing import Optional, Any, Dict


class RegistrarException(Exception):
    """Base exception for all registrar errors."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(RegistrarException):
    """Raised when caller supplied data is rejected."""
    pass


class ResourceNotFoundError(RegistrarException):
    """Raised when a requested student, module or grade is not found."""
    pass


class DuplicateEntityError(RegistrarException):
    """Raised when attempting to create a duplicate entity."""
    pass


class PersistenceError(RegistrarException):
    """Raised when reading or writing the data file fails."""
    pass


class MalformedRecordError(PersistenceError):
    """Raised when a persisted line cannot be interpreted.

    Carries the 1-based number of the offending line.
    """
    
    def __init__(self, message: str, line_number: Optional[int] = None, **kwargs):
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message, **kwargs)
        self.line_number = line_number


class RecordParseError(MalformedRecordError):
    """Raised when a grade value in the data file is not a number."""
    pass


class ConfigurationError(RegistrarException):
    """Raised when configuration is invalid."""
    pass
