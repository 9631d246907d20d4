"""Task 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

from app.schemas.user import UserBrief
from app.schemas.comment import AttachmentIn, CommentAttachmentOut

TaskPriority = Literal["LOW", "MEDIUM", "HIGH"]
TaskStatus = Literal["OPEN", "IN_PROGRESS", "REVIEW", "DONE"]


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    priority: TaskPriority
    assigned_to_id: int
    tags: List[str] = Field(default_factory=list)
    dod: Optional[str] = None
    attachments: List[AttachmentIn] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[List[str]] = None
    assigned_to_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    dod: Optional[str] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskCommentCreate(BaseModel):
    content: str = Field(min_length=1)
    mentions: List[int] = Field(default_factory=list)


class TaskAttachmentsCreate(BaseModel):
    attachments: List[AttachmentIn] = Field(min_length=1)


class AttachmentOut(BaseModel):
    attachment_id: int
    task_id: int
    file_name: str
    file_url: str
    file_size: int
    mime_type: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TaskCommentOut(BaseModel):
    comment_id: int
    task_id: int
    author_id: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: UserBrief
    attachments: List[CommentAttachmentOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TaskOut(BaseModel):
    task_id: int
    title: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    priority: TaskPriority
    status: TaskStatus
    tags: List[str] = Field(default_factory=list)
    dod: Optional[str] = None
    assigned_to_id: int
    created_by_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assigned_to: UserBrief
    created_by: UserBrief
    attachments: List[AttachmentOut] = Field(default_factory=list)
    comments: List[TaskCommentOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}
