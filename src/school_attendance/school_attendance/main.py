from __future__ import annotations

import importlib
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common.datetime_utils import now_local
from .container import build_container
from .logging_config import setup_logging
from .attendance.controller import register as register_attendance
from .meals.controller import register as register_meals
from .students.controller import register as register_students
from .system.controller import register as register_system
from .vision.controller import register as register_vision

SETTING_KEYS = (
    "SECRET_KEY",
    "DEBUG",
    "TESTING",
    "STORAGE_BACKEND",
    "DB_PATH",
    "DB_CONFIG",
    "LOG_LEVEL",
    "LOG_DIR",
    "AUTO_INIT_DB",
    "ENABLE_FACE_EXTRACTION",
)


def _load_settings(overrides: Optional[dict]) -> dict:
    settings_module = importlib.import_module(get_settings_module())
    values = {key: getattr(settings_module, key, None) for key in SETTING_KEYS}
    values.update(overrides or {})
    return values


def create_app(overrides: Optional[dict] = None, *, clock: Callable = now_local) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings = _load_settings(overrides)
    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings["DEBUG"])
    app.config["TESTING"] = bool(settings["TESTING"])
    app.json.sort_keys = False

    setup_logging(app, log_level=settings["LOG_LEVEL"] or "INFO", log_dir=settings["LOG_DIR"])

    backend = settings["STORAGE_BACKEND"] or "json"
    if backend == "mysql":
        db_config = settings["DB_CONFIG"] or {}
        app.logger.info(
            "Storage: mysql %s@%s:%s/%s",
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )
    else:
        app.logger.info("Storage: json %s", settings["DB_PATH"])

    container = build_container(
        backend=backend,
        db_path=settings["DB_PATH"],
        db_config=settings["DB_CONFIG"],
        auto_init_db=bool(settings["AUTO_INIT_DB"]),
        enable_face_extraction=bool(settings["ENABLE_FACE_EXTRACTION"]),
        clock=clock,
    )
    app.extensions["school_attendance"] = container

    register_students(app, container)
    register_attendance(app, container)
    register_meals(app, container)
    register_vision(app, container)
    register_system(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"success": False, "message": "Endpoint not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return jsonify({"success": False, "message": "Method not allowed"}), 405

    @app.errorhandler(Exception)
    def unhandled_error(e):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "message": e.description}), e.code
        app.logger.exception("Unhandled error: %s", e)
        body = {"success": False, "message": "Internal server error"}
        if app.config["DEBUG"]:
            body["error"] = str(e)
        return jsonify(body), 500

    return app
