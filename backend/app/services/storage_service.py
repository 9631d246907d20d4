"""첨부파일 오브젝트 스토리지 업로드 서비스입니다."""

from typing import Optional
from urllib.parse import quote

import httpx

from app.config import settings


class StorageError(Exception):
    pass


class StorageClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        bucket: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.auth_provider_base_url()).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.AUTH_PROVIDER_SERVICE_KEY
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.timeout = float(timeout if timeout is not None else settings.AUTH_PROVIDER_TIMEOUT_SECONDS)
        self._transport = transport

    def public_url(self, object_path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(object_path)}"

    def upload(self, object_path: str, content: bytes, content_type: str) -> str:
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(object_path)}"
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": content_type,
            "x-upsert": "false",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, headers=headers, content=content)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(str(exc)) from exc
        return self.public_url(object_path)


def get_storage() -> StorageClient:
    return StorageClient()
