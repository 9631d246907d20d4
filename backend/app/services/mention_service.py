"""멘션(@) 파싱과 멘션 대상 사용자 해석을 담당하는 도메인 서비스입니다."""

import re
from typing import Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from app.models.user import User


MENTION_PATTERN = re.compile(r"(?<![\w@])@([\w.-]{2,50})")


def extract_mentions(text: Optional[str]) -> Set[str]:
    if not text:
        return set()
    tokens = set()
    for raw in MENTION_PATTERN.findall(text):
        # 문장 끝 구두점("@Bob.")은 토큰에서 뺀다. 가운데 점(john.doe)은 유지한다.
        token = raw.strip().rstrip(".-")
        if token:
            tokens.add(token)
    return tokens


def _normalized_key(value: Optional[str]) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", "", str(value)).strip().lower()


def _mention_keys_for_user(user: User) -> Set[str]:
    keys: Set[str] = set()

    def add(raw: Optional[str]):
        normalized = _normalized_key(raw)
        if normalized:
            keys.add(normalized)

    add(user.name)
    email = user.email or ""
    if "@" in email:
        add(email.split("@", 1)[0])
    parts = [part for part in re.split(r"\s+", (user.name or "").strip()) if part]
    if parts:
        add(parts[0])  # e.g. "Ann Lee" -> "ann"
    return keys


def resolve_mentioned_users(db: Session, explicit_ids: Iterable[int], content: Optional[str]) -> List[User]:
    """명시적으로 전달된 사용자 id 와 본문의 @이름 토큰을 합쳐 실제 존재하는 사용자만 반환합니다."""
    ids = {int(user_id) for user_id in explicit_ids or []}
    found: dict = {}
    if ids:
        for user in db.query(User).filter(User.user_id.in_(ids)).all():
            found[user.user_id] = user

    token_keys = {_normalized_key(token) for token in extract_mentions(content)}
    token_keys.discard("")
    if token_keys:
        for user in db.query(User).all():
            if user.user_id in found:
                continue
            if token_keys & _mention_keys_for_user(user):
                found[user.user_id] = user

    return [found[user_id] for user_id in sorted(found)]
