"""사용자 초대 및 비밀번호 설정 서비스입니다.

로컬 users 테이블과 외부 인증 서비스 두 곳에 쓰기가 필요하지만 두 저장소를 묶는 트랜잭션은 없습니다.
각 흐름은 ``ProvisioningSaga`` 에 진행 단계와 보상 작업을 기록하고, 외부 호출이 실패하면
기록된 보상 작업을 역순으로 실행합니다.
"""

import logging
import secrets
import string
import time
from datetime import datetime, timedelta
from typing import Callable, List, Tuple
from urllib.parse import quote

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User
from app.schemas.user import InviteUserRequest, SetPasswordRequest
from app.services.auth_provider import AuthProviderClient, AuthProviderError
from app.services.auth_service import hash_password
from app.services.notification_service import Mailer
from app.utils.permissions import USER, is_admin

logger = logging.getLogger(__name__)

TEMP_PASSWORD_ALPHABET = string.ascii_lowercase + string.digits


class ProvisioningSaga:
    """두 저장소에 걸친 작업의 진행 단계와 보상 작업 기록."""

    def __init__(self, name: str):
        self.name = name
        self.steps: List[str] = []
        self._compensations: List[Tuple[str, Callable[[], None]]] = []

    def record(self, step: str) -> None:
        self.steps.append(step)
        logger.info("[provisioning:%s] %s", self.name, step)

    def on_failure(self, label: str, action: Callable[[], None]) -> None:
        self._compensations.append((label, action))

    def compensate(self) -> None:
        while self._compensations:
            label, action = self._compensations.pop()
            try:
                action()
                self.record(f"compensated: {label}")
            except Exception as exc:
                # 원래 오류를 가리지 않도록 보상 실패는 기록만 한다.
                self.record(f"compensation failed: {label}")
                logger.error("[provisioning:%s] compensation '%s' failed: %s", self.name, label, exc)


def _generate_temp_password() -> str:
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(8)) + "A1!"


def _generate_reset_token(email: str) -> str:
    return hash_password(f"{email}{int(time.time() * 1000)}")


def build_set_password_url(reset_token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/auth/set-password?token={quote(reset_token, safe='')}"


def _delete_local_user(db: Session, user_id: int) -> None:
    db.query(User).filter(User.user_id == user_id).delete()
    db.commit()


def _create_external_identity(
    provider: AuthProviderClient,
    email: str,
    password: str,
    saga: ProvisioningSaga,
) -> None:
    try:
        provider.create_user(email, password, email_confirm=True)
        return
    except AuthProviderError as exc:
        if not exc.already_registered:
            raise
        saga.record("external identity already registered")

    # 로컬에는 없는데 외부에만 남아 있는 계정: 정리 후 한 번만 재시도한다.
    stray = provider.find_user_by_email(email)
    if stray:
        provider.delete_user(stray["id"])
        saga.record(f"stray external identity removed: {stray['id']}")
    provider.create_user(email, password, email_confirm=True)


def invite_user(
    db: Session,
    data: InviteUserRequest,
    current_user: User,
    provider: AuthProviderClient,
    mailer: Mailer,
) -> User:
    if not is_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="관리자만 사용자를 초대할 수 있습니다.")

    email = str(data.email)
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="이름을 입력해 주세요.")
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="이미 등록된 이메일입니다.")

    temp_password = _generate_temp_password()
    reset_token = _generate_reset_token(email)
    user = User(
        email=email,
        name=name,
        password=hash_password(temp_password),
        role=USER,
        invited_by_id=current_user.user_id,
        reset_token=reset_token,
        reset_token_expiry=datetime.utcnow() + timedelta(hours=settings.RESET_TOKEN_EXPIRE_HOURS),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="이미 등록된 이메일입니다.")
    db.refresh(user)
    user_id = user.user_id

    saga = ProvisioningSaga(f"invite:{email}")
    saga.record("local user created")
    saga.on_failure("delete local user", lambda: _delete_local_user(db, user_id))

    try:
        _create_external_identity(provider, email, temp_password, saga)
    except AuthProviderError as exc:
        saga.compensate()
        raise HTTPException(status_code=400, detail=f"인증 서비스 오류: {exc.message}")
    saga.record("external identity created")

    reset_url = build_set_password_url(reset_token)
    hours = settings.RESET_TOKEN_EXPIRE_HOURS
    # 메일 발송 실패는 초대 자체를 되돌리지 않는다.
    mailer.notify(
        email,
        "[Task Management Tool] 초대 안내",
        f"Task Management Tool에 초대되었습니다. 아래 링크에서 비밀번호를 설정해 주세요: {reset_url}",
        html=(
            "<h1>Task Management Tool 초대</h1>"
            "<p>Task Management Tool에 초대되었습니다.</p>"
            "<p>아래 링크에서 비밀번호를 설정해 주세요.</p>"
            f'<a href="{reset_url}">비밀번호 설정</a>'
            f"<p>이 링크는 {hours}시간 후 만료됩니다.</p>"
        ),
    )
    db.refresh(user)
    return user


def _restore_credentials(db: Session, user_id: int, snapshot: dict) -> None:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        return
    for key, value in snapshot.items():
        setattr(user, key, value)
    db.commit()


def set_password(db: Session, data: SetPasswordRequest, provider: AuthProviderClient) -> dict:
    user = (
        db.query(User)
        .filter(
            User.reset_token == data.token,
            User.reset_token_expiry > datetime.utcnow(),
        )
        .first()
    )
    if not user:
        raise HTTPException(status_code=400, detail="유효하지 않거나 만료된 토큰입니다.")

    snapshot = {
        "password": user.password,
        "reset_token": user.reset_token,
        "reset_token_expiry": user.reset_token_expiry,
    }
    user_id = user.user_id
    email = user.email

    user.password = hash_password(data.password)
    user.reset_token = None
    user.reset_token_expiry = None
    db.commit()

    saga = ProvisioningSaga(f"set-password:{email}")
    saga.record("local password updated")
    saga.on_failure("restore local credentials", lambda: _restore_credentials(db, user_id, snapshot))

    try:
        external = provider.find_user_by_email(email)
        if not external:
            raise AuthProviderError("인증 서비스에서 사용자를 찾을 수 없습니다.")
        provider.update_user(external["id"], password=data.password, email_confirm=True)
    except AuthProviderError as exc:
        logger.warning("[auth] external password update failed for %s: %s", email, exc)
        saga.compensate()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="인증 서비스의 비밀번호 변경에 실패했습니다.",
        )
    saga.record("external password updated")
    return {"success": True}
