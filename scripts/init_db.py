from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_attendance.school_attendance.container import SCHEMA_PATH
from src.school_attendance.school_attendance.database.bootstrap import apply_schema, list_tables
from src.school_attendance.school_attendance.database.connection import DatabaseConnection, DBConfig
from src.school_attendance.school_attendance.storage.json_store import JsonDocumentStore


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    backend = getattr(settings, "STORAGE_BACKEND", "json")

    if backend == "mysql":
        db_config = DBConfig.from_dict(dict(settings.DB_CONFIG))
        conn = DatabaseConnection.get_instance(db_config)
        apply_schema(conn, schema_path=SCHEMA_PATH)
        tables = list_tables(conn)
        print(
            "OK: Applied schema.sql -> "
            f"{db_config.user}@{db_config.host}:{db_config.port}/{db_config.database} "
            f"(tables={len(tables)})"
        )
        return

    store = JsonDocumentStore(settings.DB_PATH)
    store.initialize()
    print(f"OK: JSON database ready -> {store.path}")


if __name__ == "__main__":
    main()
