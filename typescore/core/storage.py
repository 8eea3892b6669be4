from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List

from typescore.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class ResultStorage(ABC):
    """Append-only record storage keyed by a string."""

    @abstractmethod
    def append(self, key: str, record: Record) -> None:
        """Add *record* to the end of the records stored under *key*."""

    @abstractmethod
    def list(self, key: str) -> List[Record]:
        """Return all records stored under *key*, oldest first."""


class InMemoryStorage(ResultStorage):
    def __init__(self) -> None:
        self._records: Dict[str, List[Record]] = defaultdict(list)
        self._lock = threading.Lock()

    def append(self, key: str, record: Record) -> None:
        with self._lock:
            self._records[key].append(dict(record))

    def list(self, key: str) -> List[Record]:
        with self._lock:
            return [dict(r) for r in self._records.get(key, [])]


class JsonLinesStorage(ResultStorage):
    """Stores records in a JSON-lines file, one ``{"key": ..., "record": ...}`` per line.

    The file is only ever appended to, one line per write, so two appends for
    the same key can never overwrite each other. Lines that fail to parse are
    skipped with a warning.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)
        self._lock = threading.Lock()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def append(self, key: str, record: Record) -> None:
        line = json.dumps({"key": key, "record": record}, ensure_ascii=False) + "\n"
        with self._lock:
            try:
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                with self._file_path.open("a", encoding="utf-8") as f:
                    f.write(line)
            except OSError as e:
                logger.warning("Could not append to %s: %s", self._file_path, e)
                raise StoreUnavailableError(f"Could not write {self._file_path}") from e

    def list(self, key: str) -> List[Record]:
        if not self._file_path.exists():
            return []
        try:
            with self._lock:
                lines = self._file_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.warning("Could not read %s: %s", self._file_path, e)
            raise StoreUnavailableError(f"Could not read {self._file_path}") from e

        records: List[Record] = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Skipping corrupt line %d in %s: %s", lineno, self._file_path, e)
                continue
            if not isinstance(entry, dict) or not isinstance(entry.get("record"), dict):
                logger.warning("Skipping malformed line %d in %s", lineno, self._file_path)
                continue
            if entry.get("key") == key:
                records.append(entry["record"])
        return records
