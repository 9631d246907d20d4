"""User 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(100))
    password = Column(String(255))  # bcrypt hash
    role = Column(String(20), nullable=False, default="USER")  # ADMIN/USER
    image = Column(String(500))
    reset_token = Column(String(255))
    reset_token_expiry = Column(DateTime)
    invited_by_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    # Relationships
    invited_by = relationship("User", remote_side=[user_id], back_populates="invited_users")
    invited_users = relationship("User", back_populates="invited_by")
    assigned_tasks = relationship("Task", foreign_keys="Task.assigned_to_id", back_populates="assigned_to")
    created_tasks = relationship("Task", foreign_keys="Task.created_by_id", back_populates="created_by")
    comments = relationship("Comment", back_populates="author")
    mentions = relationship("Mention", back_populates="user")
    otps = relationship("OTP", back_populates="user", cascade="all, delete-orphan")


class OTP(Base):
    __tablename__ = "otp"

    otp_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    otp = Column(String(6), nullable=False)
    type = Column(String(30), nullable=False, default="PROFILE_UPDATE")  # PROFILE_UPDATE
    is_used = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="otps")

    __table_args__ = (
        Index("idx_otp_user_type", "user_id", "type", "is_used"),
    )
