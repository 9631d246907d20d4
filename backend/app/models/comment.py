"""Comment 도메인(댓글, 멘션, 댓글 첨부)의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Comment(Base):
    __tablename__ = "comment"

    comment_id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.task_id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    task = relationship("Task", back_populates="comments")
    author = relationship("User", back_populates="comments")
    mentions = relationship("Mention", back_populates="comment", cascade="all, delete-orphan")
    attachments = relationship(
        "CommentAttachment",
        back_populates="comment",
        cascade="all, delete-orphan",
        order_by="CommentAttachment.attachment_id",
    )

    __table_args__ = (
        Index("idx_comment_task", "task_id", "created_at"),
    )


class Mention(Base):
    __tablename__ = "mention"

    mention_id = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(Integer, ForeignKey("comment.comment_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    comment = relationship("Comment", back_populates="mentions")
    user = relationship("User", back_populates="mentions")

    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_mention_comment_user"),
        Index("idx_mention_user", "user_id"),
    )


class CommentAttachment(Base):
    __tablename__ = "comment_attachment"

    attachment_id = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(Integer, ForeignKey("comment.comment_id", ondelete="CASCADE"), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_url = Column(String(1000), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)  # bytes
    mime_type = Column(String(100), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    comment = relationship("Comment", back_populates="attachments")

    __table_args__ = (
        Index("idx_comment_attachment_comment", "comment_id"),
    )
