"""메일 릴레이 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class EmailSendRequest(BaseModel):
    to: EmailStr
    subject: str = Field(min_length=1)
    text: str
    html: Optional[str] = None


class EmailSendResponse(BaseModel):
    success: bool = True
    message_id: Optional[str] = None
