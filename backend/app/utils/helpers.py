import uuid
from fastapi import UploadFile, HTTPException
from app.config import settings


async def read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise HTTPException(status_code=400, detail=f"File exceeds {limit_mb} MB limit")
    return content


def build_object_path(user_id: int, filename: str) -> str:
    # 사용자별 prefix 아래에 원본 파일명을 유지한 채 충돌 없는 이름으로 저장한다.
    original = (filename or "unnamed").replace("\\", "/").rsplit("/", 1)[-1] or "unnamed"
    return f"{user_id}/{uuid.uuid4()}-{original}"
