"""외부 인증 서비스(호스팅 Auth REST API) 어댑터입니다.

로컬 users 테이블과 별도로 자격 증명을 보관하는 외부 서비스에 대한 얇은 httpx 래퍼로,
생성/조회/수정/삭제 호출만 제공합니다. 두 저장소 사이의 정합성 보정은 서비스 레이어 책임입니다.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

ALREADY_REGISTERED_CODES = {"email_exists", "user_already_exists"}


class AuthProviderError(Exception):
    """외부 인증 서비스 호출 실패."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code

    @property
    def already_registered(self) -> bool:
        if self.error_code in ALREADY_REGISTERED_CODES:
            return True
        return "already been registered" in (self.message or "").lower()


def _extract_error(response: httpx.Response) -> AuthProviderError:
    message = response.reason_phrase or f"HTTP {response.status_code}"
    error_code = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                message = value.strip()
                break
        for key in ("error_code", "code"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                error_code = value.strip()
                break
    return AuthProviderError(message, status_code=response.status_code, error_code=error_code)


class AuthProviderClient:
    """외부 인증 서비스 REST API 클라이언트 (공개 가입 + 관리자 API)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.auth_provider_base_url()).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.AUTH_PROVIDER_ANON_KEY
        self.service_key = service_key if service_key is not None else settings.AUTH_PROVIDER_SERVICE_KEY
        self.timeout = float(timeout if timeout is not None else settings.AUTH_PROVIDER_TIMEOUT_SECONDS)
        self._transport = transport

    def _headers(self, admin: bool) -> Dict[str, str]:
        key = self.service_key if admin else self.anon_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, *, admin: bool = True, **kwargs) -> Any:
        url = f"{self.base_url}/auth/v1{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, url, headers=self._headers(admin), **kwargs)
        except httpx.HTTPError as exc:
            raise AuthProviderError(f"인증 서비스에 연결할 수 없습니다: {exc}") from exc
        if response.status_code >= 400:
            raise _extract_error(response)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/signup", admin=False, json={"email": email, "password": password})
        # 이메일 자동 확인 설정에 따라 {"user": ...} 또는 사용자 객체 자체가 반환된다.
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            return data["user"]
        return data

    def create_user(self, email: str, password: str, email_confirm: bool = True) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/admin/users",
            json={"email": email, "password": password, "email_confirm": email_confirm},
        )

    def list_users(self, per_page: int = 1000) -> List[Dict[str, Any]]:
        users: List[Dict[str, Any]] = []
        page = 1
        while True:
            data = self._request("GET", "/admin/users", params={"page": page, "per_page": per_page})
            batch = data.get("users", []) if isinstance(data, dict) else list(data or [])
            users.extend(batch)
            if len(batch) < per_page:
                return users
            page += 1

    def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        target = (email or "").strip().lower()
        for user in self.list_users():
            if str(user.get("email") or "").strip().lower() == target:
                return user
        return None

    def delete_user(self, provider_user_id: str) -> None:
        self._request("DELETE", f"/admin/users/{provider_user_id}")

    def update_user(
        self,
        provider_user_id: str,
        *,
        password: Optional[str] = None,
        email_confirm: Optional[bool] = None,
        user_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if password is not None:
            payload["password"] = password
        if email_confirm is not None:
            payload["email_confirm"] = email_confirm
        if user_metadata is not None:
            payload["user_metadata"] = user_metadata
        return self._request("PUT", f"/admin/users/{provider_user_id}", json=payload)


def get_auth_provider() -> AuthProviderClient:
    return AuthProviderClient()
