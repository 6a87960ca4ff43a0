"""Redis 비동기 클라이언트. 세션 Blocklist(로그아웃한 세션 토큰 무효화)용."""

import logging
from typing import Any

from app.core.config import settings

logger = logging.getLogger(__name__)

BLOCKLIST_KEY_PREFIX = "streakling:blocklist:session:"


def create_blocklist_client() -> Any:
    """
    Blocklist용 비동기 Redis 클라이언트. max_connections·타임아웃 명시.
    redis_url 없으면 None. lifespan에서 한 번 생성해 app.state에 보관.
    """
    if not settings.redis_url:
        return None
    import redis.asyncio as redis

    pool = redis.ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_blocklist_max_connections,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_connect_timeout,
    )
    return redis.Redis(connection_pool=pool)


async def add_session_to_blocklist(client: Any, jti: str, ttl_seconds: int) -> None:
    """세션 jti를 Blocklist에 추가. 남은 유효시간만큼 TTL. 실패는 로그만(로그아웃은 항상 성공)."""
    if client is None or ttl_seconds <= 0:
        return
    key = f"{BLOCKLIST_KEY_PREFIX}{jti}"
    try:
        await client.set(key, "1", ex=ttl_seconds)
    except Exception as e:
        logger.warning("Blocklist add failed (jti=%s): %s", jti, e, exc_info=True)


async def is_session_blocked(client: Any, jti: str, *, fail_closed: bool = True) -> bool:
    """
    jti가 Blocklist에 있으면 True.
    Redis 장애 시 fail_closed=True면 True(거부), False면 False(통과).
    """
    if client is None:
        return False
    key = f"{BLOCKLIST_KEY_PREFIX}{jti}"
    try:
        return bool(await client.exists(key))
    except Exception as e:
        logger.warning("Blocklist check failed (jti=%s): %s", jti, e)
        return fail_closed
