from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http_utils import error_response, json_body, parse_limit, request_metadata
from ..container import Container
from ..core.exceptions import PersistenceError, StudentNotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/meal/mark", methods=["POST"], endpoint="meal_mark")
    def meal_mark():
        try:
            payload = json_body(request)
            result = container.meal_service.mark(payload, metadata=request_metadata(request))
        except ValidationError as e:
            return error_response(str(e), 400)
        except StudentNotFoundError as e:
            return error_response(str(e), 404)
        except PersistenceError:
            app.logger.exception("Failed to save meal record")
            return error_response("Failed to save meal record", 500)

        return jsonify(result.to_response()), 200

    @app.route("/api/meal/stats", methods=["GET"], endpoint="meal_stats")
    def meal_stats():
        try:
            stats = container.meal_service.stats(request.args.get("date"))
        except ValidationError as e:
            return error_response(str(e), 400)
        return jsonify({"success": True, **stats}), 200

    @app.route("/api/meal/recent", methods=["GET"], endpoint="meal_recent")
    def meal_recent():
        try:
            limit = parse_limit(request.args.get("limit"))
        except ValidationError as e:
            return error_response(str(e), 400)

        meals = container.meal_service.recent(limit)
        return jsonify({"success": True, "meals": meals, "count": len(meals)}), 200
