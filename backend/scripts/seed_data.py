"""Seed the database with test data."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime
from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import User
from app.models.task import Task
from app.services.auth_service import hash_password


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        admin_password = os.environ.get("ADMIN_PASSWORD", "Admin1234!")
        user_password = os.environ.get("USER_PASSWORD", "User1234!")

        # Users
        admin = User(email="admin@company.com", name="관리자 김철수", role="ADMIN",
                     password=hash_password(admin_password))
        db.add(admin)
        db.flush()
        user = User(email="user1@company.com", name="사용자 정수연", role="USER",
                    password=hash_password(user_password), invited_by_id=admin.user_id)
        db.add(user)
        db.flush()

        # Tasks
        tasks = [
            Task(title="프로젝트 구조 구성", description="필요한 의존성과 기본 구조를 초기화합니다.",
                 priority="HIGH", status="DONE",
                 assigned_to_id=admin.user_id, created_by_id=admin.user_id),
            Task(title="인증 구현", description="외부 인증 서비스 연동과 로그인 흐름을 구성합니다.",
                 priority="HIGH", status="IN_PROGRESS", tags=["auth"],
                 assigned_to_id=user.user_id, created_by_id=admin.user_id,
                 deadline=datetime(2026, 6, 15)),
            Task(title="태스크 관리 화면 구현", description="태스크 생성/관리 화면을 만듭니다.",
                 priority="MEDIUM", status="OPEN", tags=["ui"],
                 assigned_to_id=user.user_id, created_by_id=admin.user_id,
                 deadline=datetime(2026, 6, 20)),
        ]
        db.add_all(tasks)

        db.commit()
        print("Seed data inserted successfully.")
        print("  Users: 2")
        print(f"  Tasks: {len(tasks)}")
        print()
        print("Test login credentials:")
        for u in (admin, user):
            print(f"  email={u.email}  role={u.role}  name={u.name}")

    except Exception as e:
        db.rollback()
        raise e
    finally:
        db.close()


if __name__ == "__main__":
    seed()
