"""독립 댓글 API(작성/수정/삭제)와 작성자 검증을 확인하는 테스트입니다."""

from app.models.comment import Comment, CommentAttachment, Mention
from tests.conftest import auth_headers


def _create_comment(client, headers, task_id, content="메모", **extra):
    payload = {"task_id": task_id, "content": content}
    payload.update(extra)
    resp = client.post("/api/comments", headers=headers, json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_create_comment_with_mentions_and_attachments(client, db, seed_users, seed_task):
    headers = auth_headers(client, "user1@test.com")
    data = _create_comment(
        client,
        headers,
        seed_task.task_id,
        content="파일 확인 부탁드립니다",
        mentions=[seed_users["admin"].user_id, seed_users["user2"].user_id],
        attachments=[
            {"fileName": "diagram.png", "fileUrl": "https://files.test.com/diagram.png", "fileSize": 512, "mimeType": "image/png"},
        ],
    )
    assert data["author"]["user_id"] == seed_users["user1"].user_id
    assert sorted(m["user_id"] for m in data["mentions"]) == sorted(
        [seed_users["admin"].user_id, seed_users["user2"].user_id]
    )
    assert data["attachments"][0]["file_name"] == "diagram.png"
    assert data["attachments"][0]["comment_id"] == data["comment_id"]


def test_create_comment_missing_task(client, db, seed_users):
    headers = auth_headers(client, "user1@test.com")
    resp = client.post("/api/comments", headers=headers, json={"task_id": 9999, "content": "hello"})
    assert resp.status_code == 404
    assert db.query(Comment).count() == 0


def test_create_comment_does_not_send_email(client, seed_users, seed_task, sent_emails):
    headers = auth_headers(client, "user2@test.com")
    _create_comment(client, headers, seed_task.task_id, mentions=[seed_users["admin"].user_id])
    assert sent_emails == []


def test_update_own_comment(client, seed_task):
    headers = auth_headers(client, "user1@test.com")
    created = _create_comment(client, headers, seed_task.task_id, content="초안")

    resp = client.put(f"/api/comments/{created['comment_id']}", headers=headers, json={"content": "수정본"})
    assert resp.status_code == 200
    assert resp.json()["content"] == "수정본"


def test_update_comment_other_author_forbidden(client, db, seed_task):
    created = _create_comment(client, auth_headers(client, "user1@test.com"), seed_task.task_id, content="초안")

    resp = client.put(
        f"/api/comments/{created['comment_id']}",
        headers=auth_headers(client, "user2@test.com"),
        json={"content": "남의 댓글 수정"},
    )
    assert resp.status_code == 403
    db.expire_all()
    assert db.query(Comment).filter(Comment.comment_id == created["comment_id"]).first().content == "초안"


def test_update_comment_admin_cannot_edit_others(client, seed_task):
    created = _create_comment(client, auth_headers(client, "user1@test.com"), seed_task.task_id)
    resp = client.put(
        f"/api/comments/{created['comment_id']}",
        headers=auth_headers(client, "admin@test.com"),
        json={"content": "관리자 수정"},
    )
    assert resp.status_code == 403


def test_update_comment_not_found(client, seed_users):
    headers = auth_headers(client, "user1@test.com")
    resp = client.put("/api/comments/9999", headers=headers, json={"content": "없음"})
    assert resp.status_code == 404


def test_update_comment_blank_content(client, seed_task):
    headers = auth_headers(client, "user1@test.com")
    created = _create_comment(client, headers, seed_task.task_id)
    resp = client.put(f"/api/comments/{created['comment_id']}", headers=headers, json={"content": "  "})
    assert resp.status_code == 400


def test_delete_own_comment_removes_children(client, db, seed_users, seed_task):
    headers = auth_headers(client, "user1@test.com")
    created = _create_comment(
        client,
        headers,
        seed_task.task_id,
        mentions=[seed_users["user2"].user_id],
        attachments=[
            {"fileName": "a.txt", "fileUrl": "https://files.test.com/a.txt", "fileSize": 1, "mimeType": "text/plain"},
        ],
    )

    resp = client.delete(f"/api/comments/{created['comment_id']}", headers=headers)
    assert resp.status_code == 200
    db.expire_all()
    assert db.query(Comment).count() == 0
    assert db.query(Mention).count() == 0
    assert db.query(CommentAttachment).count() == 0


def test_delete_comment_other_author_forbidden(client, db, seed_task):
    created = _create_comment(client, auth_headers(client, "user1@test.com"), seed_task.task_id)
    resp = client.delete(f"/api/comments/{created['comment_id']}", headers=auth_headers(client, "user2@test.com"))
    assert resp.status_code == 403
    assert db.query(Comment).count() == 1


def test_delete_comment_not_found(client, seed_users):
    headers = auth_headers(client, "user1@test.com")
    resp = client.delete("/api/comments/9999", headers=headers)
    assert resp.status_code == 404


def test_comments_require_auth(client, seed_task):
    resp = client.post("/api/comments", json={"task_id": seed_task.task_id, "content": "hello"})
    assert resp.status_code in (401, 403)
