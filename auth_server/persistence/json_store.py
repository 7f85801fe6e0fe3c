"""
JSON Store - JSON file handling

Module: persistence.json_store
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - Whole-document JSON read/write (objects or arrays)
  - Atomic writes (temp file + rename)
  - Automatic directory creation on first write
  - Restrictive file permissions (0600)

ARCHITECTURE:
JSONStore provides:
  - load(): parse the file, raising typed errors
  - load_or_default(): parse the file, falling back to a default on
    missing or corrupt content (never raises)
  - save(): atomic rewrite of the whole document
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any


class JSONStoreError(Exception):
    """Base JSON store error"""
    pass


class JSONStoreIOError(JSONStoreError):
    """File I/O error"""
    pass


class JSONStoreFormatError(JSONStoreError):
    """JSON format error"""
    pass


class JSONStore:
    """
    JSON-based persistence for a single document.

    The file is only created on the first save; a missing file is
    equivalent to the default document.
    """

    def __init__(self, file_path: str, default_data: Any = None):
        """
        Initialize JSON store

        Args:
            file_path: Path to JSON file
            default_data: Document returned when the file is missing
        """
        self.logger = logging.getLogger(f"persistence.{self.__class__.__name__}")
        self.file_path = Path(file_path)
        self.default_data = {} if default_data is None else default_data

    def load(self) -> Any:
        """
        Load data from JSON file

        Returns:
            Parsed JSON data (a copy of the default if the file is missing)

        Raises:
            JSONStoreIOError: If file cannot be read
            JSONStoreFormatError: If JSON is invalid
        """
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return copy.deepcopy(self.default_data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise JSONStoreFormatError(f"Invalid JSON in {self.file_path}: {e}")
        except OSError as e:
            raise JSONStoreIOError(f"Failed to read {self.file_path}: {e}")

    def load_or_default(self) -> Any:
        """
        Load data, falling back to the default document on any error

        Returns:
            Parsed JSON data or a copy of the default
        """
        try:
            return self.load()
        except JSONStoreError as e:
            self.logger.warning(f"{e}; starting from default data")
            return copy.deepcopy(self.default_data)

    def save(self, data: Any) -> None:
        """
        Save data to JSON file (atomic write)

        Args:
            data: Data to save

        Raises:
            JSONStoreIOError: If write fails
        """
        temp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)

            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())

            temp_path.chmod(0o600)
            temp_path.replace(self.file_path)

        except (OSError, TypeError, ValueError) as e:
            if temp_path.exists():
                temp_path.unlink()
            raise JSONStoreIOError(f"Failed to write {self.file_path}: {e}")
