"""Notification Service 도메인 서비스 레이어입니다. 메일 릴레이 호출과 요청 단위 발송 큐를 담당합니다.

알림 메일은 모두 best-effort 입니다. ``Mailer.notify`` 는 메시지를 요청의 BackgroundTasks 에
독립 작업으로 등록하고, 각 작업은 재시도/백오프 후에도 실패하면 로그만 남깁니다.
"""

import logging
import time
from typing import Optional

import httpx
from fastapi import BackgroundTasks

from app.config import settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, text: str, html: Optional[str] = None) -> dict:
    logger.info("[email] sending to=%s subject=%s", to, subject)
    headers = {"X-Relay-Key": settings.MAIL_RELAY_SECRET} if settings.MAIL_RELAY_SECRET else None
    response = httpx.post(
        settings.mail_relay_url(),
        json={"to": to, "subject": subject, "text": text, "html": html},
        headers=headers,
        timeout=float(settings.MAIL_RELAY_TIMEOUT_SECONDS),
    )
    response.raise_for_status()
    if not response.content:
        return {}
    return response.json()


def deliver(to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
    attempts = max(1, int(settings.EMAIL_RETRY_ATTEMPTS))
    for attempt in range(1, attempts + 1):
        try:
            send_email(to, subject, text, html)
            return True
        except Exception as exc:
            logger.warning(
                "[email] delivery failed (attempt %s/%s) to=%s subject=%s: %s",
                attempt, attempts, to, subject, exc,
            )
            if attempt < attempts:
                time.sleep(float(settings.EMAIL_RETRY_BACKOFF_SECONDS) * (2 ** (attempt - 1)))
    logger.warning("[email] giving up on to=%s subject=%s", to, subject)
    return False


class Mailer:
    """요청 단위 발송 큐. BackgroundTasks 가 없으면 즉시 전달을 시도합니다."""

    def __init__(self, background_tasks: Optional[BackgroundTasks] = None):
        self.background_tasks = background_tasks

    def notify(self, to: Optional[str], subject: str, text: str, html: Optional[str] = None) -> None:
        if not to:
            return
        if self.background_tasks is None:
            deliver(to, subject, text, html)
            return
        self.background_tasks.add_task(deliver, to, subject, text, html)

    def send_now(self, to: str, subject: str, text: str, html: Optional[str] = None) -> dict:
        # 실패를 호출자에게 그대로 전달해야 하는 발송(OTP 등)에 사용한다.
        return send_email(to, subject, text, html)


def get_mailer(background_tasks: BackgroundTasks) -> Mailer:
    return Mailer(background_tasks)
