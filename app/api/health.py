"""Health check 엔드포인트. DB·Redis 모두 app.state의 비동기 핸들 재사용."""

import asyncio

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])

HEALTH_REDIS_PING_TIMEOUT = 2.0


async def _check_db(request: Request) -> str:
    """SELECT 1. DATABASE_URL 미설정이면 'error'."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        return "error"
    return "ok" if await database.ping() else "error"


async def _check_redis(request: Request) -> str:
    """Blocklist용 Redis PING. 미설정이면 'ok'(선택 구성요소)."""
    client = getattr(request.app.state, "redis_blocklist_client", None)
    if client is None:
        return "ok"
    try:
        await asyncio.wait_for(client.ping(), timeout=HEALTH_REDIS_PING_TIMEOUT)
        return "ok"
    except Exception:
        return "error"


@router.get("/health")
async def get_health(request: Request) -> dict[str, str]:
    """status: ok | degraded."""
    db_status = await _check_db(request)
    redis_status = await _check_redis(request)
    status = "ok" if db_status == "ok" and redis_status == "ok" else "degraded"
    return {
        "status": status,
        "db": db_status,
        "redis": redis_status,
    }
