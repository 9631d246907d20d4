"""Comment Service 도메인 서비스 레이어입니다. 댓글/멘션/댓글 첨부 저장을 담당합니다."""

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload, selectinload

from app.models.comment import Comment, CommentAttachment, Mention
from app.models.task import Task
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentUpdate
from app.services import mention_service


def _comment_query(db: Session):
    return db.query(Comment).options(
        joinedload(Comment.author),
        selectinload(Comment.mentions).joinedload(Mention.user),
        selectinload(Comment.attachments),
    )


def get_comment(db: Session, comment_id: int) -> Comment:
    comment = _comment_query(db).filter(Comment.comment_id == comment_id).first()
    if not comment:
        raise HTTPException(status_code=404, detail="댓글을 찾을 수 없습니다.")
    return comment


def _get_own_comment(db: Session, comment_id: int, current_user: User) -> Comment:
    comment = (
        db.query(Comment)
        .filter(Comment.comment_id == comment_id, Comment.author_id == current_user.user_id)
        .first()
    )
    if comment:
        return comment
    # id+작성자 조건에 맞는 행이 없으면 존재 여부로 404/403을 구분한다.
    if db.query(Comment.comment_id).filter(Comment.comment_id == comment_id).first() is None:
        raise HTTPException(status_code=404, detail="댓글을 찾을 수 없습니다.")
    raise HTTPException(status_code=403, detail="본인이 작성한 댓글만 수정/삭제할 수 있습니다.")


def create_comment(db: Session, data: CommentCreate, current_user: User) -> Comment:
    task = db.query(Task).filter(Task.task_id == data.task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="태스크를 찾을 수 없습니다.")
    if not data.content.strip():
        raise HTTPException(status_code=400, detail="댓글 내용을 입력해 주세요.")

    # 댓글을 먼저 저장해 id를 확보한 뒤 멘션, 첨부 순으로 저장한다.
    comment = Comment(task_id=task.task_id, author_id=current_user.user_id, content=data.content)
    db.add(comment)
    db.flush()

    mentioned_users = mention_service.resolve_mentioned_users(db, data.mentions, data.content)
    if mentioned_users:
        db.add_all([Mention(comment_id=comment.comment_id, user_id=user.user_id) for user in mentioned_users])
        db.flush()

    if data.attachments:
        db.add_all([
            CommentAttachment(
                comment_id=comment.comment_id,
                file_name=item.file_name,
                file_url=item.file_url,
                file_size=item.file_size,
                mime_type=item.mime_type,
            )
            for item in data.attachments
        ])
    db.commit()
    return get_comment(db, comment.comment_id)


def update_comment(db: Session, comment_id: int, data: CommentUpdate, current_user: User) -> Comment:
    comment = _get_own_comment(db, comment_id, current_user)
    if not data.content.strip():
        raise HTTPException(status_code=400, detail="댓글 내용을 입력해 주세요.")
    comment.content = data.content
    db.commit()
    return get_comment(db, comment_id)


def delete_comment(db: Session, comment_id: int, current_user: User) -> None:
    comment = _get_own_comment(db, comment_id, current_user)
    db.delete(comment)
    db.commit()
