"""Comment 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.schemas.user import UserBrief


class AttachmentIn(BaseModel):
    # 업로드 응답(fileName/fileUrl/...)을 그대로 넘겨도 받을 수 있도록 alias를 둔다.
    file_name: str = Field(alias="fileName", min_length=1)
    file_url: str = Field(alias="fileUrl", min_length=1)
    file_size: int = Field(alias="fileSize", ge=0)
    mime_type: str = Field(alias="mimeType", min_length=1)

    model_config = {"populate_by_name": True}


class CommentAttachmentOut(BaseModel):
    attachment_id: int
    comment_id: int
    file_name: str
    file_url: str
    file_size: int
    mime_type: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MentionOut(BaseModel):
    user_id: int
    user: UserBrief

    model_config = {"from_attributes": True}


class CommentCreate(BaseModel):
    task_id: int
    content: str = Field(min_length=1)
    mentions: List[int] = Field(default_factory=list)
    attachments: List[AttachmentIn] = Field(default_factory=list)


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1)


class CommentOut(BaseModel):
    comment_id: int
    task_id: int
    author_id: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: UserBrief
    mentions: List[MentionOut] = Field(default_factory=list)
    attachments: List[CommentAttachmentOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}
