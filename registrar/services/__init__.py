"""
Services built on top of the repository.
"""

from .status_service import (
    StatusService, DashboardRow, StudentSummary, BoardEntry, derive_status
)
from .records_service import RecordsService, SyncResult, EMPTY_FIELDS_MESSAGE

__all__ = [
    "StatusService",
    "DashboardRow",
    "StudentSummary",
    "BoardEntry",
    "derive_status",
    "RecordsService",
    "SyncResult",
    "EMPTY_FIELDS_MESSAGE",
]
