"""User/Auth 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime


class UserBrief(BaseModel):
    user_id: int
    name: Optional[str] = None
    email: str
    image: Optional[str] = None

    model_config = {"from_attributes": True}


class UserOut(BaseModel):
    user_id: int
    email: str
    name: Optional[str] = None
    role: Literal["ADMIN", "USER"]
    image: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserProfileUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1, max_length=100)


class SignUpResponse(BaseModel):
    user: UserOut
    provider_user_id: Optional[str] = None


class InviteUserRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=100)


class InviteUserResponse(BaseModel):
    user: UserOut


class SetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    image: Optional[str] = None
    otp: str = Field(min_length=6, max_length=6)


class ProfileUpdateResponse(BaseModel):
    user: UserOut
    message: str


class SuccessResponse(BaseModel):
    success: bool = True
