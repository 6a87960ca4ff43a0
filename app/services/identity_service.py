"""Identity Service. Clerk 신원 → 로컬 User 동기화(reconcile).

- 최초 로그인: 비어 있지 않은 값만 기록, display_name 기본값 "User", username 미설정.
- 재로그인: Clerk 소유 필드(email, display_name, avatar_url)는 새 값으로 갱신하되 빈 값으로 지우지 않음.
  유저 관리 필드(country, phone, religion)는 저장값이 비어 있을 때만 채움(fill-once).
- username은 어떤 경우에도 여기서 쓰지 않는다.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import is_unique_violation
from app.models.user import User
from app.repositories import user_repository

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "User"
PROVIDER_OWNED_FIELDS = ("email", "display_name", "avatar_url")
FILL_ONCE_FIELDS = ("country", "phone", "religion")


@dataclass(frozen=True)
class ProfileClaims:
    """Clerk에서 얻은 프로필 + 로그인 요청의 opt-in 민감 정보. 모두 선택."""

    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    phone: str | None = None
    religion: str | None = None
    country: str | None = None


def clean(value: Any) -> str | None:
    """문자열 trim, 빈 문자열은 None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def initial_values(clerk_id: str, claims: ProfileClaims) -> dict[str, Any]:
    """신규 유저 INSERT 값. None인 필드는 아예 넣지 않는다."""
    values: dict[str, Any] = {
        "clerk_id": clerk_id,
        "display_name": clean(claims.display_name) or DEFAULT_DISPLAY_NAME,
    }
    for field in ("email", "avatar_url", *FILL_ONCE_FIELDS):
        cleaned = clean(getattr(claims, field))
        if cleaned is not None:
            values[field] = cleaned
    return values


def merge_values(user: User, claims: ProfileClaims) -> dict[str, Any]:
    """기존 유저에 적용할 변경분. 바뀌는 필드만 담는다."""
    changes: dict[str, Any] = {}
    for field in PROVIDER_OWNED_FIELDS:
        incoming = clean(getattr(claims, field))
        if incoming is not None and incoming != getattr(user, field):
            changes[field] = incoming
    for field in FILL_ONCE_FIELDS:
        incoming = clean(getattr(claims, field))
        if incoming is not None and clean(getattr(user, field)) is None:
            changes[field] = incoming
    return changes


async def reconcile_user(session: AsyncSession, clerk_id: str, claims: ProfileClaims) -> User:
    """
    clerk_id로 조회 후 생성 또는 갱신. 호출자가 트랜잭션을 연다.
    같은 clerk_id의 동시 첫 로그인은 unique 위반 후 재조회로 같은 행에 수렴한다.
    """
    user = await user_repository.get_by_clerk_id(session, clerk_id)
    if user is None:
        try:
            async with session.begin_nested():
                return await user_repository.create(session, initial_values(clerk_id, claims))
        except IntegrityError as e:
            if not is_unique_violation(e):
                raise
            logger.info("Concurrent first login for clerk_id=%s, re-reading user", clerk_id)
        user = await user_repository.get_by_clerk_id(session, clerk_id)
        if user is None:
            raise RuntimeError("User not found after concurrent insert")

    for field, value in merge_values(user, claims).items():
        setattr(user, field, value)
    await session.flush()
    return user
