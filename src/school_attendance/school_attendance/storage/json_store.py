from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..common.datetime_utils import utc_now_iso
from ..core.exceptions import PersistenceError
from ..settings.model import Settings

logger = logging.getLogger(__name__)

COLLECTIONS = ("students", "attendance", "meals")


def initial_document(settings: Optional[Settings] = None) -> dict:
    now = utc_now_iso()
    return {
        "students": [],
        "attendance": [],
        "meals": [],
        "settings": (settings or Settings()).to_document(),
        "statistics": {
            "totalRegistrations": 0,
            "totalAttendanceMarked": 0,
            "totalMealsServed": 0,
            "lastUpdated": now,
            "systemStarted": now,
        },
    }


class JsonDocumentStore:
    """Single JSON document used as the database.

    Every write replaces the whole snapshot: the new document goes to a temp
    file in the same directory and is renamed over the old one, so readers
    never see a half-written file. ``transaction()`` holds the store lock
    across read -> modify -> write.
    """

    def __init__(self, path: str | Path, *, default_settings: Optional[Settings] = None):
        self._path = Path(path)
        self._default_settings = default_settings
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> None:
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if self._path.exists():
                logger.info("Database file exists: %s", self._path)
                return
            if not self.write_all(initial_document(self._default_settings)):
                raise PersistenceError(f"Could not create database file {self._path}")
            logger.info("Database initialized with default structure: %s", self._path)

    def read_all(self) -> dict:
        with self._lock:
            if not self._path.exists():
                return initial_document(self._default_settings)
            try:
                with open(self._path, encoding="utf-8") as f:
                    doc = json.load(f)
            except (OSError, ValueError) as e:
                # Falling back to an empty document here would wipe the data on the next write.
                logger.error("Error reading database %s: %s", self._path, e)
                raise PersistenceError(f"Database file {self._path} is unreadable") from e

            if not isinstance(doc, dict):
                raise PersistenceError(f"Database file {self._path} does not hold a JSON object")
            for name in COLLECTIONS:
                doc.setdefault(name, [])
            doc.setdefault("settings", {})
            doc.setdefault("statistics", {})
            return doc

    def write_all(self, document: dict) -> bool:
        with self._lock:
            document.setdefault("statistics", {})["lastUpdated"] = utc_now_iso()
            tmp_name = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=".db-", suffix=".json", dir=self._path.parent)
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self._path)
                return True
            except (OSError, TypeError, ValueError) as e:
                logger.error("Error writing database %s: %s", self._path, e)
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                return False

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def save(self, document: dict) -> None:
        if not self.write_all(document):
            raise PersistenceError("Failed to save database")

    @contextmanager
    def transaction(self) -> Iterator[dict]:
        with self._lock:
            doc = self.read_all()
            yield doc
            self.save(doc)
