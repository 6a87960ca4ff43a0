"""Session API. Clerk 토큰 → 서버 세션 쿠키."""

from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request, Response
from pyjwt_key_fetcher import AsyncKeyFetcher

from app.api.deps import get_current_identity, require_session
from app.core.database import Database
from app.core.deps import get_clerk_key_fetcher, get_database, get_httpx_client, get_redis_blocklist
from app.core.session import SessionClaims, clear_session_cookie, set_session_cookie
from app.schemas.common import Envelope
from app.schemas.session import LoginRequest, SessionUser
from app.services import auth_service

router = APIRouter(prefix="/session", tags=["session"])


@router.post("/login", response_model=Envelope[SessionUser])
async def post_login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    db: Database = Depends(get_database),
    http_client: httpx.AsyncClient = Depends(get_httpx_client),
    key_fetcher: AsyncKeyFetcher = Depends(get_clerk_key_fetcher),
) -> Envelope[SessionUser]:
    """
    Clerk 세션 토큰으로 로그인.
    유저를 생성/갱신하고 httpOnly 세션 쿠키를 심는다.
    """
    token, user = await auth_service.clerk_login(
        db,
        payload.token,
        payload.sensitive,
        http_client=http_client,
        key_fetcher=key_fetcher,
    )
    set_session_cookie(response, request.headers.get("host"), token)
    return Envelope(data=SessionUser.model_validate(user), message="Logged in")


@router.post("/logout", response_model=Envelope[None])
async def post_logout(
    request: Request,
    response: Response,
    identity: SessionClaims | None = Depends(get_current_identity),
    redis_blocklist: Any = Depends(get_redis_blocklist),
) -> Envelope[None]:
    """세션 유무와 관계없이 200. 쿠키 삭제 + jti Blocklist 등록."""
    await auth_service.logout(identity, redis_blocklist)
    clear_session_cookie(response, request.headers.get("host"))
    return Envelope(message="Logged out")


@router.get("/me", response_model=Envelope[SessionUser])
async def get_me(
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[SessionUser]:
    return Envelope(data=await auth_service.get_session_user(db, identity.uid))
