"""Uploads 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from app.middleware.auth_middleware import get_current_user
from app.models.user import User
from app.schemas.upload import UploadedFileOut
from app.services.storage_service import StorageClient, StorageError, get_storage
from app.utils.helpers import build_object_path, read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uploads", tags=["uploads"])

DEFAULT_MIME_TYPE = "application/octet-stream"


@router.post("", response_model=UploadedFileOut)
async def upload_file(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    storage: StorageClient = Depends(get_storage),
):
    content = await read_upload(file)
    original_name = file.filename or "unnamed"
    mime_type = file.content_type or DEFAULT_MIME_TYPE
    object_path = build_object_path(current_user.user_id, original_name)
    try:
        public_url = await run_in_threadpool(storage.upload, object_path, content, mime_type)
    except StorageError as exc:
        logger.warning("[uploads] storage upload failed for user_id=%s: %s", current_user.user_id, exc)
        raise HTTPException(status_code=500, detail="Upload failed")
    return UploadedFileOut(
        fileName=original_name,
        url=public_url,
        fileUrl=public_url,
        fileSize=len(content),
        mimeType=mime_type,
    )
