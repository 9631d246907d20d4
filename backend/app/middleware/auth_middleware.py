"""Bearer 토큰 인증 의존성입니다. 로그인 시 발급한 JWT 의 sub(user_id)로 현재 사용자를 찾습니다."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from app.database import get_db
from app.models.user import User
from app.config import settings
from app.services.auth_service import ALGORITHM

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _unauthorized("유효하지 않거나 만료된 토큰입니다.")


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    payload = decode_token(credentials.credentials)
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise _unauthorized("토큰에 사용자 정보가 없습니다.")

    user = db.query(User).filter(User.user_id == int(subject)).first()
    if not user:
        raise _unauthorized("사용자를 찾을 수 없습니다.")
    return user
