"""Pytest fixtures. 테스트 시 DB·Clerk·Stripe 없이 실행 가능하도록 환경 조정."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# CI에서 DATABASE_URL이 주입되면 그대로 사용. 로컬에서 비어 있으면 DB 없이 부팅 가능하도록 빈 문자열.
if not os.environ.get("DATABASE_URL"):
    os.environ["DATABASE_URL"] = ""
# Settings Fail-fast 대비: 테스트 시 필수 시크릿 설정
os.environ.setdefault("SESSION_SECRET", "test-session-secret-for-pytest-0123456789")
os.environ.setdefault("CLERK_SECRET_KEY", "sk_test_pytest")
os.environ.setdefault("ENVIRONMENT", "test")


class FakeDatabase:
    """Database 대역. session()/transaction() 모두 같은 mock 세션을 내준다."""

    def __init__(self, session: MagicMock | None = None, *, healthy: bool = True) -> None:
        self.db_session = session if session is not None else make_session()
        self.healthy = healthy
        self.transactions = 0

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[MagicMock, None]:
        yield self.db_session

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[MagicMock, None]:
        self.transactions += 1
        yield self.db_session

    async def ping(self) -> bool:
        return self.healthy


def make_session() -> MagicMock:
    """AsyncSession 흉내. flush/delete/execute는 await 가능, begin_nested는 async with 가능."""
    session = MagicMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def client(fake_db: FakeDatabase):
    """
    FastAPI TestClient. lifespan을 돌리지 않고 app.state에 대역을 직접 심는다.
    테스트가 끝나면 원래 상태로 되돌린다.
    """
    from app.main import app

    app.state.database = fake_db
    app.state.httpx_client = MagicMock()
    app.state.clerk_key_fetcher = MagicMock()
    app.state.redis_blocklist_client = None
    app.state.billing_gateway = None
    yield TestClient(app, raise_server_exceptions=False)
    for name in (
        "database",
        "httpx_client",
        "clerk_key_fetcher",
        "redis_blocklist_client",
        "billing_gateway",
    ):
        if hasattr(app.state, name):
            delattr(app.state, name)
