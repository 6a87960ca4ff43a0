"""인증·인가 의존성. 세션 쿠키 → SessionClaims(요청 단위 신원)."""

from typing import Any

from fastapi import Depends, Request

from app.core.config import settings
from app.core.database import Database
from app.core.deps import get_database, get_redis_blocklist
from app.core.errors import Forbidden, Unauthenticated
from app.core.session import SessionClaims, verify_session_token
from app.models.enums import Role
from app.repositories import user_repository


async def get_current_identity(
    request: Request,
    redis_blocklist: Any = Depends(get_redis_blocklist),
) -> SessionClaims | None:
    """쿠키가 유효하면 SessionClaims, 아니면 None. 예외를 던지지 않는다."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return await verify_session_token(
        token,
        redis_blocklist,
        fail_closed=settings.redis_blocklist_fail_closed,
    )


async def require_session(
    identity: SessionClaims | None = Depends(get_current_identity),
) -> SessionClaims:
    if identity is None:
        raise Unauthenticated()
    return identity


async def require_admin(
    identity: SessionClaims | None = Depends(get_current_identity),
    db: Database = Depends(get_database),
) -> SessionClaims:
    """쿠키의 role은 믿지 않고 DB에서 다시 확인(토큰 발급 후 강등·승격 반영)."""
    if identity is None:
        raise Unauthenticated()
    async with db.session() as session:
        role = await user_repository.get_role(session, identity.uid)
    if role is None:
        raise Unauthenticated()
    if role != Role.ADMIN:
        raise Forbidden()
    return identity
