"""메일 릴레이 API 라우터입니다. 서버 내부 알림 발송이 이 엔드포인트를 통해 SMTP로 전달됩니다."""

import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, status
from fastapi_mail.errors import ConnectionErrors

from app.config import settings
from app.schemas.email import EmailSendRequest, EmailSendResponse
from app.services import mail_relay_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/emails", tags=["emails"])


@router.post("/send", response_model=EmailSendResponse)
async def send_email(request: EmailSendRequest, x_relay_key: Optional[str] = Header(None)):
    if not settings.MAIL_RELAY_SECRET:
        if not settings.DEBUG:
            # 운영 환경에서 공유 키 없는 릴레이는 열어 두지 않는다.
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Mail relay is not configured")
    elif x_relay_key != settings.MAIL_RELAY_SECRET:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid relay key")
    try:
        await mail_relay_service.relay(request)
    except ConnectionErrors as exc:
        logger.warning("[email] SMTP relay failed to=%s: %s", request.to, exc)
        raise HTTPException(status_code=500, detail=f"Failed to send email: {exc}")
    return EmailSendResponse(success=True)
