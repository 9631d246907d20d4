"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    auth_service,
    comment_service,
    invitation_service,
    mention_service,
    notification_service,
    task_service,
    user_service,
)
