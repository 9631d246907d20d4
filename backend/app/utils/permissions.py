"""Permissions 관련 공용 유틸리티 헬퍼입니다.

태스크 권한 규칙은 ``is_allowed(actor, task, action)`` 한 곳에서만 판정한다.

- EDIT: 관리자, 생성자
- CHANGE_STATUS: 관리자, 담당자
- ADD_ATTACHMENT: 관리자, 담당자, 생성자
- COMMENT: 로그인한 모든 사용자
- DELETE: 관리자, 생성자
"""

from enum import Enum

from fastapi import HTTPException, status

from app.models.task import Task
from app.models.user import User


ADMIN = "ADMIN"
USER = "USER"

ALL_ROLES = (ADMIN, USER)


class TaskAction(str, Enum):
    EDIT = "edit"
    CHANGE_STATUS = "change_status"
    ADD_ATTACHMENT = "add_attachment"
    COMMENT = "comment"
    DELETE = "delete"


DENIED_MESSAGES = {
    TaskAction.EDIT: "관리자와 태스크 생성자만 태스크를 수정할 수 있습니다.",
    TaskAction.CHANGE_STATUS: "관리자와 담당자만 상태를 변경할 수 있습니다.",
    TaskAction.ADD_ATTACHMENT: "관리자, 담당자, 생성자만 첨부파일을 추가할 수 있습니다.",
    TaskAction.COMMENT: "댓글을 작성할 권한이 없습니다.",
    TaskAction.DELETE: "관리자와 태스크 생성자만 태스크를 삭제할 수 있습니다.",
}


def is_admin(user: User) -> bool:
    return user.role == ADMIN


def is_creator(user: User, task: Task) -> bool:
    return task.created_by_id == user.user_id


def is_assignee(user: User, task: Task) -> bool:
    return task.assigned_to_id == user.user_id


def is_allowed(actor: User, task: Task, action: TaskAction) -> bool:
    if actor is None or actor.role not in ALL_ROLES:
        return False
    if action == TaskAction.COMMENT:
        return True
    if is_admin(actor):
        return True
    if action in (TaskAction.EDIT, TaskAction.DELETE):
        return is_creator(actor, task)
    if action == TaskAction.CHANGE_STATUS:
        return is_assignee(actor, task)
    if action == TaskAction.ADD_ATTACHMENT:
        return is_assignee(actor, task) or is_creator(actor, task)
    return False


def ensure_task_permission(actor: User, task: Task, action: TaskAction) -> None:
    if not is_allowed(actor, task, action):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=DENIED_MESSAGES[action])
