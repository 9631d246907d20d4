"""FastAPI 애플리케이션 진입점. 미들웨어와 API 라우터를 등록합니다."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Base, engine
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.routers import auth, tasks, comments, users, uploads, emails

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Task Management Tool",
    description="태스크 배정, 칸반 상태 관리, 댓글/멘션, 첨부파일을 제공하는 업무 관리 시스템",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(comments.router)
app.include_router(users.router)
app.include_router(uploads.router)
app.include_router(emails.router)


@app.on_event("startup")
def ensure_schema():
    # 누락된 테이블을 자동 생성합니다.
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Task Management Tool"}
