from fastapi.testclient import TestClient

from tests.conftest import add_student, auth_headers, student_headers


def _seed(client: TestClient, headers: dict[str, str]) -> None:
    response = client.post("/gamification/admin/seed-badges", headers=headers)
    assert response.status_code == 200, response.text


def _badge_payload(code: str, **overrides) -> dict:
    payload = {
        "code": code,
        "name": "Night Owl",
        "description": "Finish a lesson after midnight",
        "icon": "🦉",
        "category": "learning",
        "condition": {"type": "lessons_completed", "value": 2},
        "xp_reward": 40,
    }
    payload.update(overrides)
    return payload


def _add_course(title: str, student_ids: list[str]) -> str:
    from academy.db.session import get_session_factory
    from academy.models.course import Course, Enrollment

    with get_session_factory()() as db:
        course = Course(title=title)
        db.add(course)
        db.flush()
        for student_id in student_ids:
            db.add(Enrollment(student_id=student_id, course_id=course.id, status="ACTIVE"))
        db.commit()
        return course.id


def test_gamification_auth_required(app_client: TestClient):
    assert app_client.get("/gamification/badges").status_code == 401
    assert app_client.get("/gamification/leaderboard/global").status_code == 401
    assert app_client.get("/gamification/my/xp").status_code == 401

    bad_token = {"Authorization": "Bearer not-a-token"}
    assert app_client.get("/gamification/badges", headers=bad_token).status_code == 401


def test_role_separation(app_client: TestClient):
    admin = auth_headers(app_client)
    student_id = add_student("Aydan")
    student = student_headers(student_id)

    assert app_client.post("/gamification/admin/seed-badges", headers=student).status_code == 403
    assert app_client.post("/gamification/admin/badges", headers=student, json=_badge_payload("OWL")).status_code == 403
    assert app_client.get("/gamification/my/xp", headers=admin).status_code == 403


def test_unknown_or_inactive_student_token(app_client: TestClient):
    inactive_id = add_student("Retired", is_active=False)

    assert app_client.get("/gamification/my/xp", headers=student_headers("missing")).status_code == 401
    assert app_client.get("/gamification/my/xp", headers=student_headers(inactive_id)).status_code == 401


def test_seed_badges_is_idempotent(app_client: TestClient):
    headers = auth_headers(app_client)

    first = app_client.post("/gamification/admin/seed-badges", headers=headers)
    second = app_client.post("/gamification/admin/seed-badges", headers=headers)

    assert first.status_code == 200
    assert len(first.json()["created"]) == 12
    assert second.json() == {"created": [], "skipped": first.json()["created"]}

    badges = app_client.get("/gamification/badges", headers=headers).json()
    assert [badge["code"] for badge in badges][:3] == ["FIRST_LESSON", "LESSON_MASTER", "FIRST_QUIZ"]
    orders = [badge["sort_order"] for badge in badges]
    assert orders == sorted(orders)


def test_admin_badge_editing_flow(app_client: TestClient):
    headers = auth_headers(app_client)

    create_response = app_client.post("/gamification/admin/badges", headers=headers, json=_badge_payload("OWL"))
    assert create_response.status_code == 201, create_response.text
    badge = create_response.json()
    assert badge["sort_order"] == 1
    assert badge["is_active"] is True

    duplicate = app_client.post("/gamification/admin/badges", headers=headers, json=_badge_payload("OWL"))
    assert duplicate.status_code == 409
    assert "OWL" in duplicate.json()["detail"]

    negative = app_client.post(
        "/gamification/admin/badges", headers=headers, json=_badge_payload("BROKE", xp_reward=-5)
    )
    assert negative.status_code == 422

    update_response = app_client.put(
        f"/gamification/admin/badges/{badge['id']}",
        headers=headers,
        json={"code": "NIGHT_OWL", "is_active": False},
    )
    assert update_response.status_code == 200, update_response.text
    assert update_response.json()["code"] == "NIGHT_OWL"

    listed = app_client.get("/gamification/badges", headers=headers).json()
    assert all(item["id"] != badge["id"] for item in listed)

    missing = app_client.put("/gamification/admin/badges/missing", headers=headers, json={"name": "x"})
    assert missing.status_code == 404


def test_awarded_badge_code_cannot_change(app_client: TestClient):
    headers = auth_headers(app_client)
    _seed(app_client, headers)
    student_id = add_student("Cavid")

    grant = app_client.post(
        f"/gamification/admin/students/{student_id}/xp",
        headers=headers,
        json={"amount": 10, "reason": "lesson_completed", "facts": {"lessons_completed": 1}},
    )
    assert grant.status_code == 200, grant.text
    badge_id = grant.json()["awarded_badges"][0]["id"]

    rename = app_client.put(f"/gamification/admin/badges/{badge_id}", headers=headers, json={"code": "FIRST_STEP"})
    assert rename.status_code == 409


def test_grant_xp_and_student_views(app_client: TestClient):
    headers = auth_headers(app_client)
    _seed(app_client, headers)
    student_id = add_student("Aysel")

    grant = app_client.post(
        f"/gamification/admin/students/{student_id}/xp",
        headers=headers,
        json={"amount": 50, "reason": "lesson_completed", "source_id": "lesson-1", "facts": {"lessons_completed": 1}},
    )
    assert grant.status_code == 200, grant.text
    payload = grant.json()
    assert payload["xp_total"] == 100
    assert payload["transaction"]["amount"] == 50
    assert payload["transaction"]["source_id"] == "lesson-1"
    assert [badge["code"] for badge in payload["awarded_badges"]] == ["FIRST_LESSON"]

    student = student_headers(student_id)

    xp_response = app_client.get("/gamification/my/xp", headers=student)
    assert xp_response.status_code == 200, xp_response.text
    xp = xp_response.json()
    assert xp["xp_total"] == 100
    assert xp["rank"] == 1
    assert xp["level"]["name"] == "Explorer"
    assert [row["reason"] for row in xp["recent_transactions"]] == ["badge_earned", "lesson_completed"]

    badges_response = app_client.get("/gamification/my/badges", headers=student)
    assert badges_response.status_code == 200
    badges = badges_response.json()
    assert [item["badge"]["code"] for item in badges["badges"]] == ["FIRST_LESSON"]
    assert list(badges["by_category"]) == ["learning"]

    summary_response = app_client.get("/gamification/my/summary", headers=student)
    assert summary_response.status_code == 200
    summary = summary_response.json()
    assert summary["total_badges"] == 12
    assert summary["earned_badges"] == 1
    assert summary["next_badges"][0]["code"] == "LESSON_MASTER"
    assert len(summary["next_badges"]) == 5


def test_grant_xp_rejections(app_client: TestClient):
    headers = auth_headers(app_client)
    student_id = add_student("Nazrin")
    url = f"/gamification/admin/students/{student_id}/xp"

    reserved = app_client.post(url, headers=headers, json={"amount": 100, "reason": "badge_earned"})
    assert reserved.status_code == 422

    unknown_reason = app_client.post(url, headers=headers, json={"amount": 100, "reason": "bribery"})
    assert unknown_reason.status_code == 422

    fractional = app_client.post(url, headers=headers, json={"amount": 1.5})
    assert fractional.status_code == 422

    missing = app_client.post("/gamification/admin/students/missing/xp", headers=headers, json={"amount": 5})
    assert missing.status_code == 404

    penalty = app_client.post(url, headers=headers, json={"amount": -20})
    assert penalty.status_code == 200
    assert penalty.json()["xp_total"] == -20
    assert penalty.json()["transaction"]["reason"] == "manual_adjustment"


def test_evaluate_endpoint(app_client: TestClient):
    headers = auth_headers(app_client)
    _seed(app_client, headers)
    student_id = add_student("Ramil")
    url = f"/gamification/admin/students/{student_id}/evaluate"

    first = app_client.post(url, headers=headers, json={"facts": {"certificates_earned": 1}})
    assert first.status_code == 200, first.text
    assert [badge["code"] for badge in first.json()["awarded_badges"]] == ["FIRST_CERT"]
    assert first.json()["xp_total"] == 250

    repeat = app_client.post(url, headers=headers)
    assert repeat.status_code == 200
    assert repeat.json() == {"xp_total": 250, "awarded_badges": []}

    missing = app_client.post("/gamification/admin/students/missing/evaluate", headers=headers)
    assert missing.status_code == 404


def test_leaderboards(app_client: TestClient):
    headers = auth_headers(app_client)
    first = add_student("Leader", student_id="student-a")
    second = add_student("Runner", student_id="student-b")
    third = add_student("Outsider", student_id="student-c")
    for student_id, amount in ((first, 300), (second, 200), (third, 900)):
        response = app_client.post(
            f"/gamification/admin/students/{student_id}/xp", headers=headers, json={"amount": amount}
        )
        assert response.status_code == 200, response.text
    course_id = _add_course("Robotics", [first, second])

    global_board = app_client.get("/gamification/leaderboard/global", headers=student_headers(first))
    assert global_board.status_code == 200
    assert [(entry["rank"], entry["student_id"]) for entry in global_board.json()] == [
        (1, "student-c"),
        (2, "student-a"),
        (3, "student-b"),
    ]

    course_board = app_client.get(f"/gamification/leaderboard/{course_id}", headers=headers)
    assert course_board.status_code == 200
    body = course_board.json()
    assert body["course"]["title"] == "Robotics"
    assert [entry["student_id"] for entry in body["entries"]] == ["student-a", "student-b"]
    assert body["entries"][0]["xp_total"] == 300

    unknown = app_client.get("/gamification/leaderboard/missing", headers=headers)
    assert unknown.status_code == 404
