"""비동기 DB 핸들. SQLAlchemy 2.0 + asyncpg.

전역 엔진 대신 lifespan에서 Database를 한 번 생성해 app.state에 보관하고,
라우터는 get_database 의존성으로 주입받는다. 테스트는 dependency_overrides로 대체.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import Settings

logger = logging.getLogger(__name__)


def _async_database_url(url: str) -> str:
    """스킴만 asyncpg로 안전하게 변환. SQLAlchemy make_url 사용."""
    return str(make_url(url.strip()).set(drivername="postgresql+asyncpg"))


class Database:
    """엔진·세션 팩토리 묶음. 프로세스 수명 동안 하나."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        # 동일 컨텍스트 내 세션 전파. transaction() 진입 시 set, finally에서 reset(token).
        self._current: ContextVar[AsyncSession | None] = ContextVar(
            f"db_session_{id(self)}", default=None
        )

    @classmethod
    def from_url(cls, url: str, *, echo: bool = False) -> "Database":
        engine = create_async_engine(
            _async_database_url(url),
            echo=echo,
            pool_pre_ping=True,
        )
        return cls(engine)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """읽기 전용/단일 쿼리용 세션. 진행 중인 transaction()이 있으면 그 세션을 재사용."""
        existing = self._current.get()
        if existing is not None:
            yield existing
            return
        async with self.session_maker() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        서비스 레이어용 트랜잭션. 성공 시 commit, 예외 시 rollback.
        중첩 호출은 바깥 세션을 공유하고 commit/rollback은 최외곽에서만 수행한다.
        """
        existing = self._current.get()
        if existing is not None:
            yield existing
            return

        session: AsyncSession | None = None
        token: Any = None
        try:
            session = self.session_maker()
            token = self._current.set(session)
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        finally:
            if token is not None:
                self._current.reset(token)
            if session is not None:
                await session.close()

    async def ping(self) -> bool:
        try:
            async with self.session_maker() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning("Database ping failed: %s", exc)
            return False

    async def verify_connection(self, retries: int, interval: float) -> None:
        """
        부팅 시 연결 검증. 실패하면 재시도, 끝내 실패하면 Sentry 보고 후 예외 전파(부팅 중단).
        컨테이너 환경에서 DB가 늦게 뜨는 경우 대비.
        """
        last_exc: Exception | None = None
        retries = max(1, retries)
        interval = max(0.5, interval)

        for attempt in range(1, retries + 1):
            try:
                async with self.session_maker() as session:
                    await session.execute(text("SELECT 1"))
                return
            except Exception as exc:
                last_exc = exc
                if attempt < retries:
                    logger.warning(
                        "Database connection attempt %d/%d failed: %s. Retrying in %.1fs...",
                        attempt,
                        retries,
                        exc,
                        interval,
                    )
                    await asyncio.sleep(interval)

        import sentry_sdk

        with sentry_sdk.push_scope() as scope:
            scope.set_tag("context", "database_connection_check")
            scope.set_context("database", {"retries": retries})
            sentry_sdk.capture_exception(last_exc)

        logger.critical(
            "Database connection failed after %d attempts: %s. Aborting startup.",
            retries,
            last_exc,
            exc_info=True,
        )
        raise RuntimeError(
            "Database connection failed after %d attempts: %s" % (retries, last_exc)
        ) from last_exc

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_database(settings: Settings) -> Database | None:
    """DATABASE_URL이 있으면 Database 생성. 없으면 경고 후 None(DB 기능 비활성)."""
    if not settings.database_url:
        logger.warning("DATABASE_URL not set. DB features disabled.")
        return None
    return Database.from_url(settings.database_url)
