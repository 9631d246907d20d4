"""Task Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import html
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload, selectinload

from app.models.comment import Comment, Mention
from app.models.task import Attachment, Task
from app.models.user import User
from app.schemas.task import TaskAttachmentsCreate, TaskCommentCreate, TaskCreate, TaskStatusUpdate, TaskUpdate
from app.services import comment_service, mention_service
from app.services.notification_service import Mailer
from app.utils.permissions import TaskAction, ensure_task_permission

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = ("title", "priority", "status", "assigned_to_id", "tags")


def _task_query(db: Session):
    return db.query(Task).options(
        joinedload(Task.assigned_to),
        joinedload(Task.created_by),
        selectinload(Task.attachments),
        selectinload(Task.comments).joinedload(Comment.author),
        selectinload(Task.comments).selectinload(Comment.attachments),
    )


def _format_deadline(deadline: Optional[datetime]) -> str:
    return deadline.strftime("%Y-%m-%d") if deadline else "마감일 없음"


def _get_assignee(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=400, detail="담당자를 찾을 수 없습니다.")
    return user


def _clean_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="제목을 입력해 주세요.")
    return cleaned


def _display_name(user: User) -> str:
    return user.name or user.email


def list_tasks(db: Session) -> List[Task]:
    return _task_query(db).order_by(Task.created_at.desc(), Task.task_id.desc()).all()


def get_task(db: Session, task_id: int) -> Task:
    task = _task_query(db).filter(Task.task_id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="태스크를 찾을 수 없습니다.")
    return task


def create_task(db: Session, data: TaskCreate, current_user: User, mailer: Mailer) -> Task:
    title = _clean_title(data.title)
    assignee = _get_assignee(db, data.assigned_to_id)

    task = Task(
        title=title,
        description=data.description,
        deadline=data.deadline,
        priority=data.priority,
        status="OPEN",
        tags=list(data.tags),
        dod=data.dod,
        assigned_to_id=assignee.user_id,
        created_by_id=current_user.user_id,
    )
    db.add(task)
    db.flush()
    for item in data.attachments:
        db.add(Attachment(
            task_id=task.task_id,
            file_name=item.file_name,
            file_url=item.file_url,
            file_size=item.file_size,
            mime_type=item.mime_type,
        ))
    db.commit()

    mailer.notify(
        assignee.email,
        f"[새 태스크 배정] {task.title}",
        (
            f"새 태스크가 배정되었습니다: {task.title}\n\n"
            f"설명: {task.description or '설명 없음'}\n"
            f"우선순위: {task.priority}\n"
            f"마감일: {_format_deadline(task.deadline)}"
        ),
    )
    return get_task(db, task.task_id)


def update_task(db: Session, task_id: int, data: TaskUpdate, current_user: User, mailer: Mailer) -> Task:
    task = get_task(db, task_id)
    ensure_task_permission(current_user, task, TaskAction.EDIT)

    updates = data.model_dump(exclude_unset=True)
    for key in NON_NULLABLE_FIELDS:
        if key in updates and updates[key] is None:
            updates.pop(key)
    if "title" in updates:
        updates["title"] = _clean_title(updates["title"])
    if "assigned_to_id" in updates:
        _get_assignee(db, updates["assigned_to_id"])

    previous_assignee_id = task.assigned_to_id
    for k, v in updates.items():
        setattr(task, k, v)
    db.commit()

    task = get_task(db, task_id)
    if task.assigned_to_id != previous_assignee_id:
        actor_name = html.escape(_display_name(current_user))
        title = html.escape(task.title)
        description = html.escape(task.description or "설명 없음")
        mailer.notify(
            task.assigned_to.email,
            f"[태스크 재배정] {task.title}",
            f"{_display_name(current_user)}님이 태스크 \"{task.title}\"의 담당자로 지정했습니다.",
            html=(
                "<h2>태스크 재배정</h2>"
                f"<p>{actor_name}님이 태스크 <strong>{title}</strong>의 담당자로 지정했습니다.</p>"
                f"<p><strong>설명:</strong> {description}</p>"
                f"<p><strong>우선순위:</strong> {task.priority}</p>"
                f"<p><strong>마감일:</strong> {_format_deadline(task.deadline)}</p>"
            ),
        )
    return task


def update_status(db: Session, task_id: int, data: TaskStatusUpdate, current_user: User, mailer: Mailer) -> Task:
    task = get_task(db, task_id)
    ensure_task_permission(current_user, task, TaskAction.CHANGE_STATUS)

    task.status = data.status
    db.commit()

    task = get_task(db, task_id)
    if task.created_by_id != current_user.user_id:
        mailer.notify(
            task.created_by.email,
            f"[태스크 상태 변경] {task.title}",
            f"{_display_name(current_user)}님이 태스크 \"{task.title}\"의 상태를 {data.status}(으)로 변경했습니다.",
        )
    return task


def delete_task(db: Session, task_id: int, current_user: User) -> None:
    task = get_task(db, task_id)
    ensure_task_permission(current_user, task, TaskAction.DELETE)
    db.delete(task)
    db.commit()


def add_comment(db: Session, task_id: int, data: TaskCommentCreate, current_user: User, mailer: Mailer) -> Comment:
    # 세션이 오래된 경우를 대비해 작성자 존재 여부를 다시 확인한다.
    author = db.query(User).filter(User.user_id == current_user.user_id).first()
    if not author:
        raise HTTPException(status_code=404, detail="작성자를 찾을 수 없습니다.")

    task = get_task(db, task_id)
    ensure_task_permission(author, task, TaskAction.COMMENT)
    if not data.content.strip():
        raise HTTPException(status_code=400, detail="댓글 내용을 입력해 주세요.")

    mentioned_users = mention_service.resolve_mentioned_users(db, data.mentions, data.content)
    comment = Comment(task_id=task.task_id, author_id=author.user_id, content=data.content)
    comment.mentions = [Mention(user_id=user.user_id) for user in mentioned_users]
    db.add(comment)
    db.commit()
    comment_id = comment.comment_id

    author_name = _display_name(author)
    for user in mentioned_users:
        if user.user_id == author.user_id or not user.email:
            continue
        mailer.notify(
            user.email,
            "[멘션 알림] 태스크 댓글에서 회원님을 언급했습니다",
            f"{author_name}님이 태스크 \"{task.title}\" 댓글에서 회원님을 언급했습니다:\n\n{data.content}",
        )

    notified_ids = set()
    for user in (task.created_by, task.assigned_to):
        if user.user_id == author.user_id or not user.email or user.user_id in notified_ids:
            continue
        notified_ids.add(user.user_id)
        mailer.notify(
            user.email,
            f"[새 댓글] {task.title}",
            f"{author_name}님이 태스크 \"{task.title}\"에 댓글을 남겼습니다:\n\n{data.content}",
        )

    return comment_service.get_comment(db, comment_id)


def add_attachments(db: Session, task_id: int, data: TaskAttachmentsCreate, current_user: User) -> dict:
    task = get_task(db, task_id)
    ensure_task_permission(current_user, task, TaskAction.ADD_ATTACHMENT)
    db.add_all([
        Attachment(
            task_id=task.task_id,
            file_name=item.file_name,
            file_url=item.file_url,
            file_size=item.file_size,
            mime_type=item.mime_type,
        )
        for item in data.attachments
    ])
    db.commit()
    return {"success": True}
