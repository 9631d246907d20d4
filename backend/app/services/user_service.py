"""User Service 도메인 서비스 레이어입니다. 사용자 목록과 본인 프로필 조회/수정을 담당합니다."""

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import UserProfileUpdate


def list_users(db: Session):
    return db.query(User).order_by(User.created_at.desc(), User.user_id.desc()).all()


def get_profile(db: Session, current_user: User) -> User:
    user = db.query(User).filter(User.user_id == current_user.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="사용자를 찾을 수 없습니다.")
    return user


def update_name(db: Session, current_user: User, data: UserProfileUpdate) -> User:
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="이름을 입력해 주세요.")
    user = get_profile(db, current_user)
    user.name = name
    db.commit()
    db.refresh(user)
    return user
