"""Upload 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel


class UploadedFileOut(BaseModel):
    fileName: str
    url: str
    fileUrl: str
    fileSize: int
    mimeType: str
