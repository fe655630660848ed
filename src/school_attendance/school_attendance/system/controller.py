from __future__ import annotations

from datetime import datetime, timezone

from flask import Flask, jsonify

from ..container import Container
from ..core.exceptions import PersistenceError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        now = datetime.now(timezone.utc).isoformat()
        try:
            database = {
                "backend": container.backend,
                "students": len(container.students_repo.list_all()),
                "attendance": container.attendance_repo.count_all(),
                "meals": container.meals_repo.count_all(),
            }
        except PersistenceError as e:
            app.logger.error("Health check failed: %s", e)
            return jsonify(
                {
                    "success": False,
                    "status": "unhealthy",
                    "message": "Database connection issues",
                    "timestamp": now,
                }
            ), 503

        return jsonify(
            {
                "success": True,
                "status": "healthy",
                "message": "Smart Attendance System API is running",
                "timestamp": now,
                "version": app.config.get("APP_VERSION", "1.0.0"),
                "database": database,
                "endpoints": {
                    "registration": "/api/register/*",
                    "attendance": "/api/attendance/*",
                    "meals": "/api/meal/*",
                },
            }
        ), 200

    @app.route("/api/session/current", methods=["GET"], endpoint="session_current")
    def session_current():
        session = container.attendance_service.current_session()
        return jsonify({"success": True, "session": session.to_dict()}), 200
