"""
Key/Value Store Module

The engine only needs ``get(key)`` and ``put(key, document)`` from its
storage. Two implementations are provided:

- JsonFileStore: one UTF-8 JSON file per key in a directory
- InMemoryStore: dictionary backed, used by tests
"""

import copy
import json
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from domain.entities import AttendanceError
from infrastructure.logger import get_logger

logger = get_logger("KeyValueStore")


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class StorageError(AttendanceError):
    """Raised when a document cannot be read from or written to the store."""
    pass


# ==============================================================================
# Store Interface
# ==============================================================================
class KeyValueStore(ABC):
    """Document store addressed by string keys."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read a document.

        Returns:
            The stored JSON-compatible document, or None when the key is absent

        Raises:
            StorageError: If the document exists but cannot be read
        """
        pass

    @abstractmethod
    def put(self, key: str, document: Any) -> None:
        """
        Write a document, replacing any previous value.

        Raises:
            StorageError: If the document cannot be written
        """
        pass


# ==============================================================================
# Implementations
# ==============================================================================
class JsonFileStore(KeyValueStore):
    """
    Stores each key as ``<directory>/<key>.json``.

    Writes go to a temporary file first and are moved into place with
    ``os.replace`` so a reader never sees a half-written document.
    """

    KEY_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not self.KEY_PATTERN.match(key):
            raise StorageError(f"Clé de stockage invalide: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Lecture impossible de '{key}': {e}") from e

    def put(self, key: str, document: Any) -> None:
        path = self._path_for(key)
        temp_path = path.with_name(f"{path.stem}.tmp{path.suffix}")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Écriture impossible de '{key}': {e}") from e
        logger.debug(f"Document '{key}' écrit dans {path}")


class InMemoryStore(KeyValueStore):
    """Dictionary backed store; documents are deep-copied in and out."""

    def __init__(self, documents: Optional[Dict[str, Any]] = None):
        self._documents: Dict[str, Any] = copy.deepcopy(documents or {})

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._documents.get(key))

    def put(self, key: str, document: Any) -> None:
        self._documents[key] = copy.deepcopy(document)

    def keys(self):
        """Keys currently stored."""
        return sorted(self._documents)
