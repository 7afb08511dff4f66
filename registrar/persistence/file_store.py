"""
File-backed stores for the repository state.
"""

import os
import tempfile
from typing import Tuple

from ..core.interfaces import DataStore
from ..core.exceptions import ConfigurationError, PersistenceError
from .codec import LoadReport, TextRecordCodec
from .repository import StudentManagementSystem


class TextFileStore(DataStore):
    """Stores the repository in a UTF-8 text file using TextRecordCodec."""
    
    def __init__(self, path: str, strict_references: bool = False):
        self._path = os.fspath(path)
        self._codec = TextRecordCodec(strict_references=strict_references)
    
    @property
    def path(self) -> str:
        return self._path
    
    @property
    def codec(self) -> TextRecordCodec:
        return self._codec
    
    def exists(self) -> bool:
        return os.path.isfile(self._path)
    
    def describe(self) -> str:
        return f"text file {self._path}"
    
    def load(self) -> Tuple[StudentManagementSystem, LoadReport]:
        """Read the file into a new repository.

        MalformedRecordError propagates unchanged; I/O and decoding failures
        become PersistenceError.
        """
        try:
            with open(self._path, "r", encoding="utf-8", newline="") as f:
                return self._codec.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(
                f"Failed to load records from {self._path}: {str(e)}",
                error_code="io_failure",
            ) from e
    
    def save(self, system: StudentManagementSystem) -> None:
        """Write the full state, replacing the file only once it is complete."""
        content = self._codec.dumps(system)
        directory = os.path.dirname(os.path.abspath(self._path))
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile("w", encoding="utf-8", newline="\n",
                                             dir=directory, prefix=".registrar-",
                                             suffix=".tmp", delete=False) as f:
                tmp_path = f.name
                f.write(content)
            os.replace(tmp_path, self._path)
            tmp_path = None
        except (OSError, UnicodeEncodeError) as e:
            raise PersistenceError(
                f"Failed to save records to {self._path}: {str(e)}",
                error_code="io_failure",
            ) from e
        finally:
            # Only set while the temporary file has not replaced the target
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)


class StoreFactory:
    """Factory for creating data stores."""
    
    @staticmethod
    def create_store(store_type: str, **kwargs) -> DataStore:
        """Create a data store of the specified type."""
        if store_type == "text":
            if "path" not in kwargs:
                raise ConfigurationError("A text store needs a 'path'")
            return TextFileStore(**kwargs)
        raise ConfigurationError(f"Unsupported store type: {store_type}")


def load(path: str, strict_references: bool = False) -> StudentManagementSystem:
    """Load a repository from a text data file."""
    system, _ = TextFileStore(path, strict_references=strict_references).load()
    return system


def save(system: StudentManagementSystem, path: str) -> None:
    """Save a repository to a text data file, overwriting it."""
    TextFileStore(path).save(system)
