from __future__ import annotations

import pytest


def _register(client, make_descriptor, student_id="STU001", value=0.0, name="Alice Nguyen"):
    return client.post(
        "/api/register",
        json={
            "name": name,
            "studentId": student_id,
            "class": "5",
            "parentName": "Hoa Nguyen",
            "faceData": {"descriptors": [make_descriptor(value)], "confidence": 0.9},
        },
    )


def test_register_then_list(client, make_descriptor):
    resp = _register(client, make_descriptor)
    assert resp.status_code == 201
    assert resp.get_json()["student"]["studentId"] == "STU001"

    listing = client.get("/api/students").get_json()
    assert listing["count"] == 1

    check = client.post("/api/register/check", json={"studentId": "stu001"}).get_json()
    assert check == {"success": True, "exists": True}


def test_register_duplicate_is_conflict(client, make_descriptor):
    _register(client, make_descriptor)
    resp = _register(client, make_descriptor, student_id="stu001")
    assert resp.status_code == 409
    assert resp.get_json()["success"] is False


def test_register_invalid_lists_errors(client):
    resp = client.post("/api/register", json={"name": "A"})
    body = resp.get_json()
    assert resp.status_code == 400
    assert body["message"] == "Validation failed"
    assert "Name must be at least 2 characters." in body["errors"]


def test_attendance_mark_flow(client, make_descriptor):
    _register(client, make_descriptor)
    payload = {"faceDescriptor": make_descriptor(0.0), "timestamp": "2026-03-02T09:15:00.000Z"}

    first = client.post("/api/attendance/mark", json=payload)
    second = client.post("/api/attendance/mark", json=payload)

    assert first.status_code == 200
    body = first.get_json()
    assert body["recognized"] is True
    assert body["alreadyMarked"] is False
    assert body["session"] == "Morning Session"
    assert body["confidence"] == 100
    assert second.get_json()["alreadyMarked"] is True

    recent = client.get("/api/attendance/recent?limit=5").get_json()
    assert recent["count"] == 1
    assert recent["records"][0]["metadata"]["userAgent"]

    stats = client.get("/api/attendance/stats?date=2026-03-02").get_json()
    assert stats["presentToday"] == 1
    assert stats["attendanceRate"] == 100


def test_attendance_unknown_face(client, make_descriptor):
    _register(client, make_descriptor)
    resp = client.post(
        "/api/attendance/mark",
        json={"faceDescriptor": make_descriptor(1.0), "timestamp": "2026-03-02T09:15:00.000Z"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["recognized"] is False


@pytest.mark.parametrize(
    "payload",
    [
        {"faceDescriptor": [0.1] * 10, "timestamp": "2026-03-02T09:15:00.000Z"},
        {"faceDescriptor": ["a"] * 128, "timestamp": "2026-03-02T09:15:00.000Z"},
        {"timestamp": "2026-03-02T09:15:00.000Z"},
    ],
)
def test_attendance_malformed_descriptor_is_bad_request(client, payload):
    resp = client.post("/api/attendance/mark", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_non_json_body_is_bad_request(client):
    resp = client.post("/api/attendance/mark", data="hello", content_type="text/plain")
    assert resp.status_code == 400


def test_meal_mark_flow(client, make_descriptor):
    _register(client, make_descriptor)

    first = client.post("/api/meal/mark", json={"studentId": "STU001", "timestamp": "2026-03-02T12:05:00.000Z"})
    again = client.post("/api/meal/mark", json={"studentId": "STU001", "timestamp": "2026-03-02T12:45:00.000Z"})

    assert first.status_code == 200
    assert first.get_json()["alreadyMarked"] is False
    assert first.get_json()["mealRecord"]["id"].startswith("MEAL_")
    assert again.get_json()["alreadyMarked"] is True

    stats = client.get("/api/meal/stats?date=2026-03-02").get_json()
    assert stats["mealsServedToday"] == 1
    assert stats["mealRate"] == 100

    recent = client.get("/api/meal/recent").get_json()
    assert recent["count"] == 1


def test_meal_unknown_student_is_not_found(client):
    resp = client.post("/api/meal/mark", json={"studentId": "NOPE1", "timestamp": "2026-03-02T12:05:00.000Z"})
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Student not found or inactive"


def test_meal_stats_with_no_students(client):
    stats = client.get("/api/meal/stats").get_json()
    assert stats["date"] == "2026-03-02"
    assert stats["totalStudents"] == 0
    assert stats["mealRate"] == 0


def test_bad_limit_is_bad_request(client):
    assert client.get("/api/attendance/recent?limit=abc").status_code == 400


def test_health_and_current_session(client, make_descriptor):
    _register(client, make_descriptor)

    health = client.get("/api/health").get_json()
    assert health["status"] == "healthy"
    assert health["database"]["students"] == 1

    session = client.get("/api/session/current").get_json()["session"]
    assert session == {"type": "morning", "name": "Morning Session", "active": True}


def test_health_reports_unreadable_storage(app, client):
    container = app.extensions["school_attendance"]
    container.students_repo._store.path.write_text("{broken", encoding="utf-8")

    resp = client.get("/api/health")
    assert resp.status_code == 503
    assert resp.get_json()["status"] == "unhealthy"


def test_descriptor_extraction_disabled(client):
    resp = client.post("/api/descriptor/extract", json={"image": "data:image/png;base64,AAAA"})
    assert resp.status_code == 503


def test_unknown_endpoint_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Endpoint not found"}


def test_bad_stored_settings_and_rows_do_not_fail_attendance(app, client, make_descriptor, make_student):
    _register(client, make_descriptor)
    store = app.extensions["school_attendance"].students_repo._store
    doc = store.read_all()
    doc["settings"]["mealTimeStart"] = "noon"
    graduated = make_student("STU002", name="Bob Tran", value=0.5).to_document()
    graduated["status"] = "graduated"
    doc["students"].append(graduated)
    store.save(doc)

    resp = client.post(
        "/api/attendance/mark",
        json={"faceDescriptor": make_descriptor(0.0), "timestamp": "2026-03-02T09:15:00.000Z"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["studentId"] == "STU001"

    unknown = client.post(
        "/api/attendance/mark",
        json={"faceDescriptor": make_descriptor(0.5), "timestamp": "2026-03-02T09:15:00.000Z"},
    )
    assert unknown.get_json()["recognized"] is False
    assert client.get("/api/health").status_code == 200
