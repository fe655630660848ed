from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .common.locks import KeyedLock
from .database.bootstrap import apply_schema
from .database.connection import DBConfig, DatabaseConnection
from .meals.mysql_meal_repository import MySQLMealRepository
from .meals.repository import MealRepository
from .meals.service import MealService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .storage.json_repositories import (
    JsonAttendanceRepository,
    JsonMealRepository,
    JsonSettingsRepository,
    JsonStudentRepository,
)
from .storage.json_store import JsonDocumentStore
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .vision.extractor import DescriptorExtractor

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


@dataclass(frozen=True)
class Container:
    backend: str

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    meals_repo: MealRepository
    settings_repo: SettingsRepository

    student_service: StudentService
    attendance_service: AttendanceService
    meal_service: MealService

    extractor: Optional[DescriptorExtractor] = None


def _json_repositories(db_path: str | Path):
    store = JsonDocumentStore(db_path)
    store.initialize()
    return (
        JsonStudentRepository(store),
        JsonAttendanceRepository(store),
        JsonMealRepository(store),
        JsonSettingsRepository(store),
    )


def _mysql_repositories(db_config: dict, *, auto_init_db: bool):
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    if auto_init_db:
        apply_schema(conn, schema_path=SCHEMA_PATH)
    return (
        MySQLStudentRepository(conn),
        MySQLAttendanceRepository(conn),
        MySQLMealRepository(conn),
        MySQLSettingsRepository(conn),
    )


def build_container(
    *,
    backend: str = "json",
    db_path: str | Path | None = None,
    db_config: Optional[dict] = None,
    auto_init_db: bool = False,
    enable_face_extraction: bool = True,
    clock: Callable = now_local,
) -> Container:
    backend = (backend or "json").lower()
    if backend == "json":
        if not db_path:
            raise ValueError("DB_PATH is required for the json storage backend")
        students_repo, attendance_repo, meals_repo, settings_repo = _json_repositories(db_path)
    elif backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql storage backend")
        students_repo, attendance_repo, meals_repo, settings_repo = _mysql_repositories(
            db_config, auto_init_db=auto_init_db
        )
    else:
        raise ValueError(f"Unknown storage backend: {backend!r}")

    # One lock table shared by every service of this process.
    locks = KeyedLock()

    student_service = StudentService(students_repo, locks=locks)
    attendance_service = AttendanceService(attendance_repo, students_repo, settings_repo, locks=locks, clock=clock)
    meal_service = MealService(meals_repo, students_repo, locks=locks, clock=clock)

    extractor = DescriptorExtractor() if enable_face_extraction else None
    logger.info("Container ready (backend=%s, face extraction=%s)", backend, bool(extractor))

    return Container(
        backend=backend,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        meals_repo=meals_repo,
        settings_repo=settings_repo,
        student_service=student_service,
        attendance_service=attendance_service,
        meal_service=meal_service,
        extractor=extractor,
    )
