"""Task 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Task(Base):
    __tablename__ = "tasks"

    task_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    deadline = Column(DateTime)
    priority = Column(String(10), nullable=False, default="MEDIUM")  # LOW/MEDIUM/HIGH
    status = Column(String(20), nullable=False, default="OPEN")      # OPEN/IN_PROGRESS/REVIEW/DONE
    tags = Column(JSON, nullable=False, default=list)
    dod = Column(Text)  # definition of done
    assigned_to_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    assigned_to = relationship("User", foreign_keys=[assigned_to_id], back_populates="assigned_tasks")
    created_by = relationship("User", foreign_keys=[created_by_id], back_populates="created_tasks")
    attachments = relationship(
        "Attachment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Attachment.attachment_id",
    )
    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="desc(Comment.comment_id)",
    )

    __table_args__ = (
        Index("idx_task_assigned", "assigned_to_id"),
        Index("idx_task_created_by", "created_by_id"),
        Index("idx_task_created_at", "created_at"),
    )


class Attachment(Base):
    __tablename__ = "attachment"

    attachment_id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.task_id", ondelete="CASCADE"), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_url = Column(String(1000), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)  # bytes
    mime_type = Column(String(100), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    task = relationship("Task", back_populates="attachments")

    __table_args__ = (
        Index("idx_attachment_task", "task_id"),
    )
