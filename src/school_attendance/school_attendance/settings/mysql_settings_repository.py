from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Settings
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    """Settings kept as key/value rows using the JSON document's key names."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Settings:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_key, setting_value FROM settings")
            doc: dict = {r["setting_key"]: r["setting_value"] for r in fetchall(cur)}

        if "recognitionThreshold" in doc:
            try:
                doc["recognitionThreshold"] = float(doc["recognitionThreshold"])
            except ValueError:
                del doc["recognitionThreshold"]
        return Settings.from_document(doc)
