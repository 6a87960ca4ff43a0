"""세션 코덱. 최소 신원 클레임을 HS256 JWT로 서명하고 HttpOnly 쿠키로 전달한다.

verify는 예외 대신 None을 돌려준다. 호출부는 None을 '미인증'으로만 해석한다.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import Response
from pydantic import BaseModel, ValidationError

from app.core.config import settings
from app.core.redis import is_session_blocked

logger = logging.getLogger(__name__)

SESSION_ALGORITHM = "HS256"
# Domain 속성을 절대 붙이지 않는 호스트. 브라우저가 쿠키를 버리는 문제 방지.
LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "[::1]"})


class SessionClaims(BaseModel):
    """쿠키에 담기는 신원. role은 참고용이며 관리자 권한은 매번 DB에서 재확인."""

    uid: int
    cid: str
    username: str | None = None
    email: str | None = None
    display_name: str = "User"
    avatar_url: str | None = None
    phone: str | None = None
    religion: str | None = None
    country: str | None = None
    role: str = "USER"
    jti: str | None = None
    exp: int | None = None


def issue_session_token(claims: SessionClaims, *, now: datetime | None = None) -> str:
    """고정 클레임 집합 + iss/aud/iat/exp/jti로 서명된 토큰 발급. 유효기간 session_expire_seconds."""
    now = now or datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(claims.uid),
        "cid": claims.cid,
        "username": claims.username,
        "email": claims.email,
        "display_name": claims.display_name,
        "avatar_url": claims.avatar_url,
        "phone": claims.phone,
        "religion": claims.religion,
        "country": claims.country,
        "role": claims.role,
        "jti": str(uuid.uuid4()),
        "iss": settings.session_issuer,
        "aud": settings.session_audience,
        "iat": now,
        "exp": now + timedelta(seconds=settings.session_expire_seconds),
    }
    return jwt.encode(
        payload,
        settings.session_secret.get_secret_value(),
        algorithm=SESSION_ALGORITHM,
    )


def decode_session_token(encoded: str) -> SessionClaims | None:
    """서명·만료·iss·aud 검증. 실패(위조, 만료, 형식 오류) 시 None."""
    try:
        payload = jwt.decode(
            encoded,
            settings.session_secret.get_secret_value(),
            algorithms=[SESSION_ALGORITHM],
            issuer=settings.session_issuer,
            audience=settings.session_audience,
            options={"require": ["exp", "iat", "sub", "cid"]},
        )
    except jwt.InvalidTokenError as e:
        logger.debug("Invalid session token: %s", e)
        return None
    try:
        return SessionClaims.model_validate({**payload, "uid": payload["sub"]})
    except ValidationError as e:
        logger.warning("Session token has unexpected claims: %s", e)
        return None


async def verify_session_token(
    encoded: str,
    redis_blocklist_client: Any = None,
    *,
    fail_closed: bool = True,
) -> SessionClaims | None:
    """decode_session_token + Blocklist(로그아웃된 jti) 조회."""
    claims = decode_session_token(encoded)
    if claims is None:
        return None
    if claims.jti and await is_session_blocked(
        redis_blocklist_client, claims.jti, fail_closed=fail_closed
    ):
        return None
    return claims


def remaining_ttl_seconds(claims: SessionClaims) -> int:
    """Blocklist TTL. 이미 만료됐으면 0."""
    if claims.exp is None:
        return 0
    return max(0, claims.exp - int(datetime.now(UTC).timestamp()))


def cookie_domain_for_host(host_header: str | None, configured: str | None) -> str | None:
    """
    설정 도메인이 요청 Host와 같거나 그 상위 도메인일 때만 반환.
    loopback 이름은 설정돼 있어도 None(host-only 쿠키).
    """
    domain = (configured or "").strip().lstrip(".").lower()
    if not domain or domain in LOOPBACK_HOSTS:
        return None
    host = (host_header or "").strip().lower()
    if host.startswith("["):
        host = host.split("]")[0] + "]"
    else:
        host = host.split(":")[0]
    if host == domain or host.endswith(f".{domain}"):
        return domain
    return None


def session_cookie_options(host_header: str | None) -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
        "path": "/",
        "domain": cookie_domain_for_host(host_header, settings.cookie_domain),
    }


def set_session_cookie(response: Response, host_header: str | None, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_expire_seconds,
        **session_cookie_options(host_header),
    )


def clear_session_cookie(response: Response, host_header: str | None) -> None:
    """발급과 같은 범위로 삭제(Max-Age=0). 범위가 다르면 브라우저가 지우지 않는다."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        **session_cookie_options(host_header),
    )
