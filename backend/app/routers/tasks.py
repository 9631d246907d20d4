from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.comment import CommentOut
from app.schemas.task import (
    TaskAttachmentsCreate,
    TaskCommentCreate,
    TaskCreate,
    TaskOut,
    TaskStatusUpdate,
    TaskUpdate,
)
from app.schemas.user import SuccessResponse
from app.services import task_service
from app.services.notification_service import Mailer, get_mailer
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskOut])
def list_tasks(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.list_tasks(db)


@router.post("", response_model=TaskOut)
def create_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    mailer: Mailer = Depends(get_mailer),
):
    return task_service.create_task(db, data, current_user, mailer)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.get_task(db, task_id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    mailer: Mailer = Depends(get_mailer),
):
    return task_service.update_task(db, task_id, data, current_user, mailer)


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    mailer: Mailer = Depends(get_mailer),
):
    return task_service.update_status(db, task_id, data, current_user, mailer)


@router.delete("/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    task_service.delete_task(db, task_id, current_user)
    return {"message": "삭제되었습니다."}


@router.post("/{task_id}/comments", response_model=CommentOut)
def add_comment(
    task_id: int,
    data: TaskCommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    mailer: Mailer = Depends(get_mailer),
):
    return task_service.add_comment(db, task_id, data, current_user, mailer)


@router.post("/{task_id}/attachments", response_model=SuccessResponse)
def add_attachments(
    task_id: int,
    data: TaskAttachmentsCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return task_service.add_attachments(db, task_id, data, current_user)
