from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http_utils import error_response, json_body, parse_limit, request_metadata
from ..container import Container
from ..core.exceptions import PersistenceError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    def attendance_mark():
        try:
            payload = json_body(request)
            result = container.attendance_service.mark(payload, metadata=request_metadata(request))
        except ValidationError as e:
            return error_response(str(e), 400, errors=e.errors or None)
        except PersistenceError:
            app.logger.exception("Failed to save attendance record")
            return error_response("Failed to save attendance record", 500)

        return jsonify(result.to_response()), 200

    @app.route("/api/attendance/recent", methods=["GET"], endpoint="attendance_recent")
    def attendance_recent():
        try:
            limit = parse_limit(request.args.get("limit"))
        except ValidationError as e:
            return error_response(str(e), 400)

        records = container.attendance_service.recent(limit)
        return jsonify({"success": True, "records": records, "count": len(records)}), 200

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def attendance_stats():
        try:
            stats = container.attendance_service.stats(request.args.get("date"))
        except ValidationError as e:
            return error_response(str(e), 400)
        return jsonify({"success": True, **stats}), 200

