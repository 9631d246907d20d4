"""태스크 CRUD, 상태 변경, 첨부, 알림 메일 시나리오를 검증하는 테스트입니다."""

from app.models.comment import Comment
from app.models.task import Attachment, Task
from app.services import notification_service
from tests.conftest import auth_headers


def _task_payload(assignee_id, **overrides):
    payload = {
        "title": "배포 파이프라인 정리",
        "description": "CI 단계를 정리한다",
        "priority": "MEDIUM",
        "assigned_to_id": assignee_id,
        "tags": ["infra"],
        "deadline": "2026-12-31T00:00:00",
    }
    payload.update(overrides)
    return payload


def _get_task(db, task_id):
    db.expire_all()
    return db.query(Task).filter(Task.task_id == task_id).first()


def test_list_tasks_requires_auth(client):
    resp = client.get("/api/tasks")
    assert resp.status_code in (401, 403)


def test_create_task_notifies_assignee(client, seed_users, sent_emails):
    headers = auth_headers(client, "admin@test.com")
    resp = client.post("/api/tasks", headers=headers, json=_task_payload(seed_users["user1"].user_id))
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "OPEN"
    assert data["created_by_id"] == seed_users["admin"].user_id
    assert data["assigned_to"]["email"] == "user1@test.com"
    assert data["tags"] == ["infra"]

    assert len(sent_emails) == 1
    assert sent_emails[0]["to"] == "user1@test.com"
    assert "배포 파이프라인 정리" in sent_emails[0]["subject"]
    assert "2026-12-31" in sent_emails[0]["text"]


def test_create_task_status_always_open(client, seed_users):
    headers = auth_headers(client, "user1@test.com")
    resp = client.post(
        "/api/tasks",
        headers=headers,
        json=_task_payload(seed_users["user2"].user_id, status="DONE"),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "OPEN"


def test_create_task_with_attachments(client, seed_users):
    headers = auth_headers(client, "user1@test.com")
    attachments = [
        {"fileName": "spec.pdf", "fileUrl": "https://files.test.com/spec.pdf", "fileSize": 1024, "mimeType": "application/pdf"},
        {"fileName": "plan.png", "fileUrl": "https://files.test.com/plan.png", "fileSize": 2048, "mimeType": "image/png"},
    ]
    resp = client.post(
        "/api/tasks",
        headers=headers,
        json=_task_payload(seed_users["user2"].user_id, attachments=attachments),
    )
    assert resp.status_code == 200
    names = [a["file_name"] for a in resp.json()["attachments"]]
    assert names == ["spec.pdf", "plan.png"]


def test_create_task_unknown_assignee(client, db, seed_users, sent_emails):
    headers = auth_headers(client, "admin@test.com")
    resp = client.post("/api/tasks", headers=headers, json=_task_payload(9999))
    assert resp.status_code == 400
    assert db.query(Task).count() == 0
    assert sent_emails == []


def test_create_task_invalid_priority(client, seed_users):
    headers = auth_headers(client, "admin@test.com")
    resp = client.post(
        "/api/tasks",
        headers=headers,
        json=_task_payload(seed_users["user1"].user_id, priority="URGENT"),
    )
    assert resp.status_code == 422


def test_create_task_email_failure_still_succeeds(client, db, seed_users, monkeypatch):
    def failing_send_email(to, subject, text, html=None):
        raise RuntimeError("relay down")

    monkeypatch.setattr(notification_service, "send_email", failing_send_email)
    headers = auth_headers(client, "admin@test.com")
    resp = client.post("/api/tasks", headers=headers, json=_task_payload(seed_users["user1"].user_id))
    assert resp.status_code == 200
    assert db.query(Task).count() == 1


def test_list_tasks_newest_first(client, seed_users):
    headers = auth_headers(client, "admin@test.com")
    for title in ("first", "second", "third"):
        resp = client.post(
            "/api/tasks",
            headers=headers,
            json=_task_payload(seed_users["user1"].user_id, title=title),
        )
        assert resp.status_code == 200

    resp = client.get("/api/tasks", headers=auth_headers(client, "user2@test.com"))
    assert resp.status_code == 200
    titles = [t["title"] for t in resp.json()]
    assert titles == ["third", "second", "first"]
    assert resp.json()[0]["created_by"]["email"] == "admin@test.com"


def test_get_task_detail_and_not_found(client, seed_task):
    headers = auth_headers(client, "user2@test.com")
    resp = client.get(f"/api/tasks/{seed_task.task_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "API 설계"
    assert resp.json()["comments"] == []

    missing = client.get("/api/tasks/9999", headers=headers)
    assert missing.status_code == 404


def test_update_task_by_creator(client, db, seed_task):
    headers = auth_headers(client, "admin@test.com")
    resp = client.put(
        f"/api/tasks/{seed_task.task_id}",
        headers=headers,
        json={"title": "API 설계 v2", "priority": "LOW", "dod": "리뷰 완료"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "API 설계 v2"
    assert data["priority"] == "LOW"
    assert data["dod"] == "리뷰 완료"
    assert data["description"] == "태스크 API 문서 정리"


def test_update_task_by_assignee_forbidden(client, db, seed_task):
    headers = auth_headers(client, "user1@test.com")
    resp = client.put(f"/api/tasks/{seed_task.task_id}", headers=headers, json={"title": "hijack"})
    assert resp.status_code == 403
    assert _get_task(db, seed_task.task_id).title == "API 설계"


def test_update_task_by_admin_who_is_not_creator(client, db, seed_users):
    headers = auth_headers(client, "user1@test.com")
    created = client.post("/api/tasks", headers=headers, json=_task_payload(seed_users["user2"].user_id))
    task_id = created.json()["task_id"]

    resp = client.put(
        f"/api/tasks/{task_id}",
        headers=auth_headers(client, "admin@test.com"),
        json={"description": "관리자 수정"},
    )
    assert resp.status_code == 200
    assert resp.json()["description"] == "관리자 수정"


def test_update_task_reassign_notifies_new_assignee(client, seed_users, seed_task, sent_emails):
    headers = auth_headers(client, "admin@test.com")
    resp = client.put(
        f"/api/tasks/{seed_task.task_id}",
        headers=headers,
        json={"assigned_to_id": seed_users["user2"].user_id},
    )
    assert resp.status_code == 200
    assert resp.json()["assigned_to"]["email"] == "user2@test.com"
    assert [m["to"] for m in sent_emails] == ["user2@test.com"]
    assert "API 설계" in sent_emails[0]["subject"]


def test_update_task_reassign_email_escapes_html(client, seed_users, sent_emails):
    headers = auth_headers(client, "user1@test.com")
    created = client.post(
        "/api/tasks",
        headers=headers,
        json=_task_payload(
            seed_users["user1"].user_id,
            title="<script>alert(1)</script>",
            description='<img src="x" onerror="steal()">',
        ),
    )
    task_id = created.json()["task_id"]
    sent_emails.clear()

    resp = client.put(f"/api/tasks/{task_id}", headers=headers, json={"assigned_to_id": seed_users["user2"].user_id})
    assert resp.status_code == 200

    body = sent_emails[0]["html"]
    assert "<script>" not in body
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
    assert "<img" not in body
    assert "&lt;img src=&quot;x&quot;" in body


def test_update_task_same_assignee_sends_no_email(client, seed_users, seed_task, sent_emails):
    headers = auth_headers(client, "admin@test.com")
    resp = client.put(
        f"/api/tasks/{seed_task.task_id}",
        headers=headers,
        json={"assigned_to_id": seed_users["user1"].user_id, "title": "같은 담당자"},
    )
    assert resp.status_code == 200
    assert sent_emails == []


def test_update_task_reassign_email_failure_still_succeeds(client, db, seed_users, seed_task, monkeypatch):
    def failing_send_email(to, subject, text, html=None):
        raise RuntimeError("relay down")

    monkeypatch.setattr(notification_service, "send_email", failing_send_email)
    headers = auth_headers(client, "admin@test.com")
    resp = client.put(
        f"/api/tasks/{seed_task.task_id}",
        headers=headers,
        json={"assigned_to_id": seed_users["user2"].user_id},
    )
    assert resp.status_code == 200
    assert _get_task(db, seed_task.task_id).assigned_to_id == seed_users["user2"].user_id


def test_update_task_unknown_assignee(client, db, seed_users, seed_task):
    headers = auth_headers(client, "admin@test.com")
    resp = client.put(f"/api/tasks/{seed_task.task_id}", headers=headers, json={"assigned_to_id": 9999})
    assert resp.status_code == 400
    assert _get_task(db, seed_task.task_id).assigned_to_id == seed_users["user1"].user_id


def test_update_status_by_assignee_notifies_creator(client, db, seed_task, sent_emails):
    headers = auth_headers(client, "user1@test.com")
    resp = client.patch(f"/api/tasks/{seed_task.task_id}/status", headers=headers, json={"status": "IN_PROGRESS"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "IN_PROGRESS"
    assert [m["to"] for m in sent_emails] == ["admin@test.com"]
    assert "IN_PROGRESS" in sent_emails[0]["text"]


def test_update_status_by_third_party_forbidden(client, db, seed_task, sent_emails):
    headers = auth_headers(client, "user2@test.com")
    resp = client.patch(f"/api/tasks/{seed_task.task_id}/status", headers=headers, json={"status": "DONE"})
    assert resp.status_code == 403
    assert _get_task(db, seed_task.task_id).status == "OPEN"
    assert sent_emails == []


def test_update_status_by_creator_who_is_not_assignee_forbidden(client, db, seed_users):
    headers = auth_headers(client, "user1@test.com")
    created = client.post("/api/tasks", headers=headers, json=_task_payload(seed_users["user2"].user_id))
    task_id = created.json()["task_id"]

    resp = client.patch(f"/api/tasks/{task_id}/status", headers=headers, json={"status": "DONE"})
    assert resp.status_code == 403


def test_update_status_by_admin(client, seed_task, sent_emails):
    headers = auth_headers(client, "admin@test.com")
    resp = client.patch(f"/api/tasks/{seed_task.task_id}/status", headers=headers, json={"status": "REVIEW"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "REVIEW"
    # 관리자 본인이 생성자이므로 상태 변경 메일은 없다.
    assert sent_emails == []


def test_update_status_invalid_value(client, seed_task):
    headers = auth_headers(client, "user1@test.com")
    resp = client.patch(f"/api/tasks/{seed_task.task_id}/status", headers=headers, json={"status": "ARCHIVED"})
    assert resp.status_code == 422


def test_delete_task_by_creator_cascades(client, db, seed_users):
    headers = auth_headers(client, "user1@test.com")
    created = client.post(
        "/api/tasks",
        headers=headers,
        json=_task_payload(
            seed_users["user2"].user_id,
            attachments=[{"fileName": "a.txt", "fileUrl": "https://files.test.com/a.txt", "fileSize": 1, "mimeType": "text/plain"}],
        ),
    )
    task_id = created.json()["task_id"]
    comment = client.post(f"/api/tasks/{task_id}/comments", headers=headers, json={"content": "메모"})
    assert comment.status_code == 200

    resp = client.delete(f"/api/tasks/{task_id}", headers=headers)
    assert resp.status_code == 200
    assert _get_task(db, task_id) is None
    assert db.query(Attachment).count() == 0
    assert db.query(Comment).count() == 0


def test_delete_task_by_assignee_forbidden(client, db, seed_task):
    headers = auth_headers(client, "user1@test.com")
    resp = client.delete(f"/api/tasks/{seed_task.task_id}", headers=headers)
    assert resp.status_code == 403
    assert _get_task(db, seed_task.task_id) is not None


def test_delete_task_by_admin_and_not_found(client, db, seed_users):
    user_headers = auth_headers(client, "user1@test.com")
    created = client.post("/api/tasks", headers=user_headers, json=_task_payload(seed_users["user2"].user_id))
    task_id = created.json()["task_id"]

    admin_headers = auth_headers(client, "admin@test.com")
    assert client.delete(f"/api/tasks/{task_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/tasks/{task_id}", headers=admin_headers).status_code == 404


def test_add_attachments_permissions(client, db, seed_task):
    payload = {
        "attachments": [
            {"fileName": "log.txt", "fileUrl": "https://files.test.com/log.txt", "fileSize": 10, "mimeType": "text/plain"},
        ]
    }
    forbidden = client.post(
        f"/api/tasks/{seed_task.task_id}/attachments",
        headers=auth_headers(client, "user2@test.com"),
        json=payload,
    )
    assert forbidden.status_code == 403

    for email in ("user1@test.com", "admin@test.com"):
        resp = client.post(
            f"/api/tasks/{seed_task.task_id}/attachments",
            headers=auth_headers(client, email),
            json=payload,
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    db.expire_all()
    assert db.query(Attachment).filter(Attachment.task_id == seed_task.task_id).count() == 2


def test_add_attachments_validation_and_not_found(client, seed_task):
    headers = auth_headers(client, "admin@test.com")
    empty = client.post(f"/api/tasks/{seed_task.task_id}/attachments", headers=headers, json={"attachments": []})
    assert empty.status_code == 422

    payload = {
        "attachments": [
            {"fileName": "x", "fileUrl": "https://files.test.com/x", "fileSize": 1, "mimeType": "text/plain"},
        ]
    }
    missing = client.post("/api/tasks/9999/attachments", headers=headers, json=payload)
    assert missing.status_code == 404
