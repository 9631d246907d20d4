"""Auth Service 도메인 서비스 레이어입니다. 로그인, 가입, 프로필 OTP 흐름을 캡슐화합니다."""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple
from urllib.parse import quote, urlparse

from fastapi import HTTPException, status
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import OTP, User
from app.schemas.user import LoginRequest, ProfileUpdateRequest, SignUpRequest
from app.services.auth_provider import AuthProviderClient, AuthProviderError
from app.services.notification_service import Mailer
from app.utils.permissions import USER

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
OTP_TYPE_PROFILE_UPDATE = "PROFILE_UPDATE"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(user_id: int) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def default_avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random"


def login(db: Session, data: LoginRequest) -> User:
    user = db.query(User).filter(User.email == str(data.email)).first()
    if not user or not verify_password(data.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="이메일 또는 비밀번호가 올바르지 않습니다.",
        )
    return user


def sign_up(db: Session, data: SignUpRequest, provider: AuthProviderClient) -> Tuple[User, Optional[str]]:
    email = str(data.email)
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="이름을 입력해 주세요.")
    hashed_password = hash_password(data.password)

    # 외부 인증 서비스에 먼저 계정을 만들고, 실패하면 로컬 DB는 건드리지 않는다.
    try:
        provider_user = provider.sign_up(email, data.password)
    except AuthProviderError as exc:
        raise HTTPException(status_code=400, detail=exc.message)

    user = User(
        email=email,
        name=name,
        password=hashed_password,
        role=USER,
        image=default_avatar_url(name),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("[auth] local insert failed after external sign-up, orphan identity may remain: %s", email)
        raise HTTPException(status_code=400, detail="이미 등록된 이메일입니다.")
    db.refresh(user)
    provider_user_id = provider_user.get("id") if isinstance(provider_user, dict) else None
    return user, provider_user_id


def _generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def send_profile_update_otp(db: Session, current_user: User, mailer: Mailer) -> dict:
    user = db.query(User).filter(User.user_id == current_user.user_id).first()
    if not user or not user.email:
        raise HTTPException(status_code=400, detail="사용자 이메일을 찾을 수 없습니다.")

    code = _generate_otp()
    row = OTP(
        user_id=user.user_id,
        otp=code,
        type=OTP_TYPE_PROFILE_UPDATE,
        is_used=False,
        expires_at=datetime.utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
    )
    db.add(row)
    db.commit()

    try:
        mailer.send_now(
            user.email,
            "[프로필 변경] 인증 코드 안내",
            f"프로필 변경 인증 코드는 {code} 입니다. {settings.OTP_EXPIRE_MINUTES}분 후 만료됩니다.",
            html=(
                "<h1>프로필 변경 인증 코드</h1>"
                f"<p>인증 코드: <strong>{code}</strong></p>"
                f"<p>이 코드는 {settings.OTP_EXPIRE_MINUTES}분 후 만료됩니다.</p>"
            ),
        )
    except Exception as exc:
        logger.warning("[auth] profile OTP delivery failed for user_id=%s: %s", user.user_id, exc)
        raise HTTPException(status_code=500, detail="인증 코드 발송에 실패했습니다.")
    return {"success": True}


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value or "")
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def update_profile(
    db: Session,
    current_user: User,
    data: ProfileUpdateRequest,
    provider: AuthProviderClient,
) -> User:
    otp_row = (
        db.query(OTP)
        .filter(
            OTP.user_id == current_user.user_id,
            OTP.otp == data.otp,
            OTP.type == OTP_TYPE_PROFILE_UPDATE,
            OTP.is_used == False,  # noqa: E712
            OTP.expires_at > datetime.utcnow(),
        )
        .order_by(OTP.otp_id.desc())
        .first()
    )
    if not otp_row:
        raise HTTPException(status_code=400, detail="인증 코드가 올바르지 않거나 만료되었습니다.")

    # 코드는 검증 직후 소모한다. 이후 단계가 실패해도 재사용할 수 없다.
    otp_row.is_used = True
    db.commit()

    updates = {}
    if data.name is not None and data.name.strip():
        updates["name"] = data.name.strip()
    if data.image:
        if not is_valid_url(data.image):
            raise HTTPException(status_code=400, detail="유효하지 않은 이미지 URL입니다.")
        updates["image"] = data.image

    user = db.query(User).filter(User.user_id == current_user.user_id).first()
    for key, value in updates.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)

    try:
        external = provider.find_user_by_email(user.email)
        if external:
            provider.update_user(
                external["id"],
                user_metadata={"name": user.name, "avatar_url": user.image},
            )
    except AuthProviderError as exc:
        logger.warning("[auth] profile metadata mirror skipped for user_id=%s: %s", user.user_id, exc)
    return user
