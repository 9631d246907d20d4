"""Auth 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.user import (
    InviteUserRequest,
    InviteUserResponse,
    LoginRequest,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    SetPasswordRequest,
    SignUpRequest,
    SignUpResponse,
    SuccessResponse,
    TokenResponse,
    UserOut,
)
from app.services import auth_service, invitation_service
from app.services.auth_provider import AuthProviderClient, get_auth_provider
from app.services.notification_service import Mailer, get_mailer
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.login(db, request)
    token = auth_service.create_access_token(user.user_id)
    return TokenResponse(access_token=token, user=UserOut.model_validate(user))


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    return {"message": "로그아웃 되었습니다."}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/signup", response_model=SignUpResponse)
def sign_up(
    request: SignUpRequest,
    db: Session = Depends(get_db),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    user, provider_user_id = auth_service.sign_up(db, request, provider)
    return SignUpResponse(user=UserOut.model_validate(user), provider_user_id=provider_user_id)


@router.post("/invite", response_model=InviteUserResponse)
def invite_user(
    request: InviteUserRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    provider: AuthProviderClient = Depends(get_auth_provider),
    mailer: Mailer = Depends(get_mailer),
):
    user = invitation_service.invite_user(db, request, current_user, provider, mailer)
    return InviteUserResponse(user=UserOut.model_validate(user))


@router.post("/set-password", response_model=SuccessResponse)
def set_password(
    request: SetPasswordRequest,
    db: Session = Depends(get_db),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    return invitation_service.set_password(db, request, provider)


@router.post("/profile/otp", response_model=SuccessResponse)
def send_profile_update_otp(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    mailer: Mailer = Depends(get_mailer),
):
    return auth_service.send_profile_update_otp(db, current_user, mailer)


@router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    request: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    user = auth_service.update_profile(db, current_user, request, provider)
    return ProfileUpdateResponse(user=UserOut.model_validate(user), message="프로필이 수정되었습니다.")
