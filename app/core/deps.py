"""FastAPI 의존성. DB 핸들·HTTP 클라이언트·Clerk Key Fetcher·Redis Blocklist·Stripe 게이트웨이 등 앱 생명주기 객체 주입."""

from typing import Any

from fastapi import Request

import httpx
from pyjwt_key_fetcher import AsyncKeyFetcher

from app.core.database import Database
from app.core.errors import BillingError
from app.services.billing_gateway import StripeGateway


def get_database(request: Request) -> Database:
    """lifespan에서 만든 Database. DATABASE_URL 미설정이면 부팅은 되지만 DB 경로는 500."""
    db = getattr(request.app.state, "database", None)
    if db is None:
        raise RuntimeError("Database is not configured")
    return db


def get_httpx_client(request: Request) -> httpx.AsyncClient:
    """
    앱 lifespan에서 생성한 싱글톤 AsyncClient 반환.
    매 요청마다 새 클라이언트를 만들지 않아 소켓 고갈(TIME_WAIT) 방지.
    """
    return request.app.state.httpx_client


def get_clerk_key_fetcher(request: Request) -> AsyncKeyFetcher:
    """앱 lifespan에서 생성한 Clerk JWKS AsyncKeyFetcher 싱글톤."""
    return request.app.state.clerk_key_fetcher


def get_redis_blocklist(request: Request) -> Any:
    """앱 lifespan에서 생성한 Blocklist용 Redis 비동기 클라이언트. 미설정 시 None."""
    return getattr(request.app.state, "redis_blocklist_client", None)


def get_billing_gateway(request: Request) -> StripeGateway:
    """STRIPE_SECRET_KEY가 없으면 결제 경로는 BillingError(500)."""
    gateway = getattr(request.app.state, "billing_gateway", None)
    if gateway is None:
        raise BillingError("Billing is not configured")
    return gateway
