"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User, OTP
from app.models.task import Task, Attachment
from app.models.comment import Comment, Mention, CommentAttachment

__all__ = [
    "User", "OTP",
    "Task", "Attachment",
    "Comment", "Mention", "CommentAttachment",
]
