"""
Core interfaces and abstract base classes for the registrar.
"""

from abc import ABC, abstractmethod
from typing import Any, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..persistence.repository import StudentManagementSystem


class DataStore(ABC):
    """Abstract base class for places the repository can be saved to."""
    
    @abstractmethod
    def load(self) -> Tuple["StudentManagementSystem", Any]:
        """Read the full state. Returns the new repository and a load report."""
        pass
    
    @abstractmethod
    def save(self, system: "StudentManagementSystem") -> None:
        """Write the full state, replacing what was stored before."""
        pass
    
    @abstractmethod
    def exists(self) -> bool:
        """Check whether there is anything stored to load."""
        pass
    
    @abstractmethod
    def describe(self) -> str:
        """Human readable location of the store."""
        pass
