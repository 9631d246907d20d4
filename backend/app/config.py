"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./taskboard.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    FRONTEND_URL: str = "http://localhost:3000"
    BACKEND_URL: str = "http://localhost:8000"  # 이 API 서버의 외부 주소

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 초대/비밀번호 설정, 프로필 OTP
    RESET_TOKEN_EXPIRE_HOURS: int = 24
    OTP_EXPIRE_MINUTES: int = 10

    # 외부 인증/스토리지 서비스
    AUTH_PROVIDER_URL: str = "http://localhost:54321"
    AUTH_PROVIDER_ANON_KEY: str = "your_anon_key"
    AUTH_PROVIDER_SERVICE_KEY: str = "your_service_role_key"
    AUTH_PROVIDER_TIMEOUT_SECONDS: float = 10.0
    STORAGE_BUCKET: str = "attachments"

    # File upload
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10 MB

    # 메일 릴레이 (/api/emails/send)
    MAIL_RELAY_URL: str = ""
    MAIL_RELAY_TIMEOUT_SECONDS: float = 10.0
    MAIL_RELAY_SECRET: str = ""  # DEBUG 가 아니면 비어 있을 때 릴레이 엔드포인트를 막는다.
    EMAIL_RETRY_ATTEMPTS: int = 3
    EMAIL_RETRY_BACKOFF_SECONDS: float = 0.5

    # SMTP (fastapi-mail)
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = "noreply@example.com"
    SMTP_FROM_NAME: str = "Task Management Tool"
    SMTP_STARTTLS: bool = True
    SMTP_SSL_TLS: bool = False

    def mail_relay_url(self) -> str:
        # 별도 지정이 없으면 자기 자신의 릴레이 엔드포인트를 사용한다.
        explicit = str(self.MAIL_RELAY_URL or "").strip()
        if explicit:
            return explicit
        return f"{self.BACKEND_URL.rstrip('/')}/api/emails/send"

    def auth_provider_base_url(self) -> str:
        return str(self.AUTH_PROVIDER_URL or "").strip().rstrip("/")

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
