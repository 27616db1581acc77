from __future__ import annotations

from datetime import date, timedelta

from tests.fakes import add_student, add_teacher


def test_health(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "Server is running", "data": {"status": "ok"}}


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_student_register_login_and_me(client):
    resp = client.post(
        "/api/auth/register",
        json={
            "role": "student",
            "name": "Asha",
            "email": "asha@college.edu",
            "password": "secret123",
            "roll_number": "CS001",
            "department": "Computer Science",
        },
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["user"]["roll_number"] == "CS001"

    resp = client.post("/api/auth/login", json={"email": "asha@college.edu", "password": "secret123"})
    body = resp.get_json()
    assert resp.status_code == 200
    token = body["data"]["token"]

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["email"] == "asha@college.edu"
    assert "password_hash" not in resp.get_json()["data"]["user"]


def test_duplicate_registration_is_bad_request(client, container):
    add_student(container)

    resp = client.post(
        "/api/auth/register",
        json={"name": "X", "email": "asha@college.edu", "password": "secret123", "roll_number": "CS009"},
    )

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_teacher_identity_flow(client, container):
    container.identities_repo.add("TCH_COM_001", "Dr. Rao", "Computer Science")

    resp = client.post("/api/auth/validate-teacher-id", json={"teacher_id": "TCH_COM_001"})
    assert resp.get_json()["data"]["name"] == "Dr. Rao"
    assert client.post("/api/auth/validate-teacher-id", json={"teacher_id": "TCH_X"}).status_code == 404

    payload = {
        "role": "teacher",
        "email": "rao@college.edu",
        "password": "teach123",
        "teacher_id": "TCH_COM_001",
        "department": "Computer Science",
    }
    assert client.post("/api/auth/register", json=payload).status_code == 201
    assert client.post("/api/auth/register", json={**payload, "email": "x@college.edu"}).status_code == 400

    resp = client.post(
        "/api/auth/login", json={"role": "teacher", "teacher_id": "TCH_COM_001", "password": "teach123"}
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["teacher_id"] == "TCH_COM_001"


def test_missing_or_bad_token_is_unauthorized(client):
    assert client.get("/api/auth/me").status_code == 401
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid token."


def test_role_guards(client, container, auth_header):
    student = add_student(container)
    teacher = add_teacher(container)

    assert client.get("/api/attendance/all", headers=auth_header(student)).status_code == 403
    assert client.post("/api/attendance", headers=auth_header(teacher)).status_code == 403


def test_self_mark_twice_returns_400(client, container, auth_header):
    headers = auth_header(add_student(container))

    first = client.post("/api/attendance", json={"status": "present"}, headers=headers)
    second = client.post("/api/attendance", json={}, headers=headers)

    assert first.status_code == 201
    assert first.get_json()["data"]["attendance"]["status"] == "present"
    assert second.status_code == 400
    assert second.get_json()["message"] == "Attendance already marked for today."


def test_bulk_mark_and_stats(client, container, auth_header):
    teacher = add_teacher(container)
    asha = add_student(container)
    headers = auth_header(teacher)

    resp = client.post(
        "/api/attendance/bulk",
        json={"attendance": [{"student_id": asha.user_id, "status": "late"}, {"student_id": 4242}]},
        headers=headers,
    )
    data = resp.get_json()["data"]
    assert resp.status_code == 200
    assert (data["created"], data["updated"], data["failed"]) == (1, 0, 1)

    resp = client.get("/api/attendance/stats", headers=headers)
    stats = resp.get_json()["data"]
    assert stats["total"] == 1
    assert {"status": "late", "count": 1} in stats["breakdown"]
    assert stats["attendance_rate"] == 0

    resp = client.get("/api/attendance/students", headers=headers)
    assert resp.get_json()["count"] == 1

    resp = client.get("/api/attendance/all?page=1&limit=10", headers=headers)
    assert resp.get_json()["total"] == 1
    assert resp.get_json()["pages"] == 1


def test_bulk_mark_requires_a_list(client, container, auth_header):
    resp = client.post("/api/attendance/bulk", json={"attendance": "all"}, headers=auth_header(add_teacher(container)))

    assert resp.status_code == 400


def test_leave_endpoints(client, container, auth_header):
    student_headers = auth_header(add_student(container))
    teacher_headers = auth_header(add_teacher(container))
    start = date.today() + timedelta(days=5)

    resp = client.post(
        "/api/leave",
        json={"start_date": start.isoformat(), "end_date": (start + timedelta(days=2)).isoformat(), "reason": "medical"},
        headers=student_headers,
    )
    assert resp.status_code == 201
    leave = resp.get_json()["data"]["leave"]
    assert (leave["status"], leave["duration"]) == ("pending", 3)

    resp = client.get("/api/leave/all", headers=teacher_headers)
    assert resp.get_json()["total"] == 1

    resp = client.patch(f"/api/leave/{leave['id']}", json={"status": "approved", "remarks": "ok"}, headers=teacher_headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["leave"]["reviewer_remarks"] == "ok"

    resp = client.patch(f"/api/leave/{leave['id']}", json={"status": "rejected"}, headers=teacher_headers)
    assert resp.status_code == 400

    resp = client.delete(f"/api/leave/{leave['id']}", headers=student_headers)
    assert resp.status_code == 400

    resp = client.get("/api/leave", headers=student_headers)
    assert resp.get_json()["data"]["stats"]["approved"] == 1


def test_bad_date_is_validation_error(client, container, auth_header):
    resp = client.post(
        "/api/leave",
        json={"start_date": "10/03/2025", "end_date": "2025-03-12", "reason": "x"},
        headers=auth_header(add_student(container)),
    )

    assert resp.status_code == 400
    assert "start_date" in resp.get_json()["message"]


def test_password_change_endpoint(client, container, auth_header):
    student = add_student(container)

    resp = client.put(
        "/api/auth/password",
        json={"current_password": "wrong", "new_password": "newpass1"},
        headers=auth_header(student),
    )
    assert resp.status_code == 401

    resp = client.put(
        "/api/auth/password",
        json={"current_password": "secret123", "new_password": "newpass1"},
        headers=auth_header(student),
    )
    assert resp.status_code == 200


def test_non_string_fields_are_bad_requests(client, container, auth_header):
    student = add_student(container)
    teacher = add_teacher(container)
    base = {"name": "Ben", "email": "ben@college.edu", "password": "secret123", "roll_number": "CS002"}

    cases = [
        client.post("/api/auth/register", json={**base, "role": 5}),
        client.post("/api/auth/register", json={**base, "password": 12345678}),
        client.post("/api/auth/register", json={**base, "name": ["Ben"]}),
        client.post("/api/auth/login", json={"email": 42, "password": "secret123"}),
        client.post("/api/auth/login", json={"email": "asha@college.edu", "password": 12345678}),
        client.post("/api/auth/validate-teacher-id", json={"teacher_id": 7}),
        client.put("/api/auth/profile", json={"name": 7}, headers=auth_header(student)),
        client.put(
            "/api/auth/password",
            json={"current_password": 123456, "new_password": "newpass1"},
            headers=auth_header(student),
        ),
        client.post("/api/attendance", json={"remarks": {"a": 1}}, headers=auth_header(student)),
    ]
    for resp in cases:
        assert resp.status_code == 400, resp.get_json()
        assert resp.get_json()["success"] is False

    start = date.today() + timedelta(days=1)
    leave = client.post(
        "/api/leave",
        json={"start_date": start.isoformat(), "end_date": start.isoformat(), "reason": "medical"},
        headers=auth_header(student),
    ).get_json()["data"]["leave"]
    resp = client.patch(
        f"/api/leave/{leave['id']}", json={"status": "approved", "remarks": 5}, headers=auth_header(teacher)
    )
    assert resp.status_code == 400


def test_overlong_fields_are_bad_requests(client, container, auth_header):
    student = add_student(container)
    start = date.today() + timedelta(days=1)

    resp = client.post(
        "/api/leave",
        json={"start_date": start.isoformat(), "end_date": start.isoformat(), "reason": "x" * 1001},
        headers=auth_header(student),
    )
    assert resp.status_code == 400
    assert "at most 1000" in resp.get_json()["message"]

    resp = client.put("/api/auth/profile", json={"name": "n" * 121}, headers=auth_header(student))
    assert resp.status_code == 400
