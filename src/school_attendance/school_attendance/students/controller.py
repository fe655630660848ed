from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http_utils import error_response, json_body, request_metadata
from ..container import Container
from ..core.exceptions import DuplicateStudentError, PersistenceError, StudentNotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/register/check", methods=["POST"], endpoint="register_check")
    def register_check():
        try:
            payload = json_body(request)
            exists = container.student_service.exists(payload.get("studentId"))
        except ValidationError as e:
            return error_response(str(e), 400)
        return jsonify({"success": True, "exists": exists}), 200

    @app.route("/api/register", methods=["POST"], endpoint="register_student")
    def register_student():
        try:
            payload = json_body(request)
            student = container.student_service.register(payload, metadata=request_metadata(request))
        except ValidationError as e:
            return error_response(str(e), 400, errors=e.errors or None)
        except DuplicateStudentError as e:
            return error_response(str(e), 409)
        except PersistenceError:
            app.logger.exception("Failed to save student registration")
            return error_response("Failed to save student registration.", 500)

        return jsonify(
            {
                "success": True,
                "message": "Student registered successfully",
                "student": {
                    "id": student.record_id,
                    "name": student.name,
                    "studentId": student.student_id,
                    "class": student.student_class,
                    "parentName": student.parent_name,
                    "registrationTimestamp": student.registered_at,
                },
            }
        ), 201

    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    def students_list():
        students = container.student_service.list_students()
        return jsonify({"success": True, "students": students, "count": len(students)}), 200

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="students_get")
    def students_get(student_id: str):
        try:
            student = container.student_service.get(student_id)
        except StudentNotFoundError as e:
            return error_response(str(e), 404)
        return jsonify({"success": True, "student": {**student.summary(), "status": student.status.value}}), 200
