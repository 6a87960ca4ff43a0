"""FastAPI 앱 진입점. app.main:app"""

import asyncio
import logging
from contextlib import asynccontextmanager

from app.core.config import settings

# 환경 변수 로드 직후 Sentry 초기화. 임포트/라우터 등록 단계 예외도 수집.
def _init_sentry() -> None:
    """SENTRY_DSN이 있으면 Sentry 초기화. environment는 설정에서 로드(스테이징/로컬 구분)."""
    if settings.sentry_dsn:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=settings.sentry_dsn.get_secret_value(),
            integrations=[
                FastApiIntegration(),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            ],
            traces_sample_rate=0.1,
            environment=settings.environment,
        )


_init_sentry()

from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pyjwt_key_fetcher import AsyncKeyFetcher
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import health
from app.api.v1 import admin, billing, challenges, name_cards, portfolios, profile, session
from app.core.database import create_database
from app.core.errors import AppError
from app.core.redis import create_blocklist_client
from app.services.billing_gateway import StripeGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 수명 주기: DB, HTTP 클라이언트·Clerk Key Fetcher(싱글톤), Redis(Blocklist), Stripe."""
    database = create_database(settings)
    if database is not None:
        await database.verify_connection(
            settings.db_connect_retries, settings.db_connect_retry_interval_sec
        )
    app.state.database = database
    app.state.httpx_client = httpx.AsyncClient(timeout=settings.clerk_timeout_seconds)
    app.state.clerk_key_fetcher = AsyncKeyFetcher(
        valid_issuers=[settings.clerk_issuer] if settings.clerk_issuer else None,
    )
    app.state.redis_blocklist_client = create_blocklist_client()
    app.state.billing_gateway = (
        StripeGateway(settings.stripe_secret_key.get_secret_value())
        if settings.stripe_secret_key
        else None
    )
    if app.state.billing_gateway is None:
        logger.warning("STRIPE_SECRET_KEY not set. Billing endpoints disabled.")
    yield
    await app.state.httpx_client.aclose()
    if getattr(app.state, "redis_blocklist_client", None) is not None:
        await app.state.redis_blocklist_client.aclose()
    if database is not None:
        await database.dispose()


app = FastAPI(
    title="Streakling API",
    description="명함·포트폴리오·챌린지 백엔드",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(session.router, prefix="/v1")
app.include_router(name_cards.router, prefix="/v1")
app.include_router(portfolios.router, prefix="/v1")
app.include_router(challenges.router, prefix="/v1")
app.include_router(challenges.submissions_router, prefix="/v1")
app.include_router(profile.router, prefix="/v1")
app.include_router(billing.router, prefix="/v1")
app.include_router(admin.router, prefix="/v1")

allowed_origins = [
    o.strip() for o in settings.allowed_origins.split(",") if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def envelope_response(status_code: int, message: str, errors: Any = None) -> JSONResponse:
    """4xx → fail, 5xx → error."""
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "fail" if status_code < 500 else "error",
            "message": message,
            "data": None,
            "errors": jsonable_encoder(errors),
        },
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return envelope_response(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """요청 검증 실패는 422 대신 400 + 필드별 오류."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return envelope_response(400, "Validation error", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """라우팅 404·405 등 프레임워크 예외도 같은 봉투로."""
    return envelope_response(exc.status_code, str(exc.detail))


@app.exception_handler(httpx.HTTPError)
async def httpx_error_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    """외부 HTTP 클라이언트(Clerk 등) 지연/타임아웃 시 503. 500 전파 방지."""
    logger.warning("External HTTP error: %s", exc, exc_info=True)
    return envelope_response(503, "Service temporarily unavailable")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """처리되지 않은 예외 → 500 + 로그. 내부 사유는 응답에 싣지 않는다."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc  # 정상 연결 종료, 500 로그 방지
    logger.exception("Unhandled exception: %s", exc, exc_info=True)
    return envelope_response(500, "Internal server error")
