"""메일 릴레이 서비스입니다. /api/emails/send 로 들어온 메시지를 SMTP(fastapi-mail)로 전달합니다."""

import html

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from app.config import settings
from app.schemas.email import EmailSendRequest


def build_connection_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.SMTP_USER,
        MAIL_PASSWORD=settings.SMTP_PASSWORD,
        MAIL_FROM=settings.SMTP_FROM_EMAIL,
        MAIL_FROM_NAME=settings.SMTP_FROM_NAME,
        MAIL_PORT=settings.SMTP_PORT,
        MAIL_SERVER=settings.SMTP_HOST,
        MAIL_STARTTLS=settings.SMTP_STARTTLS,
        MAIL_SSL_TLS=settings.SMTP_SSL_TLS,
        USE_CREDENTIALS=bool(settings.SMTP_USER),
        VALIDATE_CERTS=True,
    )


def build_message(request: EmailSendRequest) -> MessageSchema:
    body = request.html or f"<p>{html.escape(request.text)}</p>"
    return MessageSchema(
        subject=request.subject,
        recipients=[request.to],
        body=body,
        subtype=MessageType.html,
    )


async def relay(request: EmailSendRequest) -> None:
    fm = FastMail(build_connection_config())
    await fm.send_message(build_message(request))
