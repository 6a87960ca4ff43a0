"""Auth Service. Clerk 세션 JWT 검증, Clerk 유저 조회, User reconcile, 세션 토큰 발급."""

import logging
from dataclasses import replace
from typing import Any

import httpx
import jwt
from pyjwt_key_fetcher import AsyncKeyFetcher
from pyjwt_key_fetcher.errors import JWTHTTPFetchError, JWTKeyFetcherError

from app.core.config import settings
from app.core.database import Database
from app.core.errors import NotFound, Unauthenticated, UpstreamUnavailable
from app.core.redis import add_session_to_blocklist
from app.core.session import (
    SessionClaims,
    issue_session_token,
    remaining_ttl_seconds,
)
from app.models.user import User
from app.repositories import user_repository
from app.schemas.session import SensitiveFields, SessionUser
from app.services.identity_service import ProfileClaims, clean, reconcile_user

logger = logging.getLogger(__name__)


async def verify_clerk_token(token: str, key_fetcher: AsyncKeyFetcher) -> dict[str, Any]:
    """
    Clerk 세션 JWT 서명(JWKS)·만료·iss 검증. key_fetcher는 lifespan 싱글톤(Depends).
    azp/aud는 Clerk 세션 토큰에 고정되지 않으므로 검증하지 않는다.
    """
    try:
        key_entry = await key_fetcher.get_key(token)
        return jwt.decode(
            jwt=token,
            issuer=settings.clerk_issuer or None,
            options={"verify_exp": True, "verify_aud": False, "require": ["exp", "sub"]},
            **key_entry,
        )
    except JWTHTTPFetchError as e:
        logger.warning("Clerk JWKS fetch failed: %s", e, exc_info=True)
        raise UpstreamUnavailable() from e
    except (jwt.InvalidTokenError, JWTKeyFetcherError) as e:
        logger.warning("Invalid Clerk token: %s", e)
        raise Unauthenticated("Invalid or expired token") from e


def profile_from_clerk_user(data: dict[str, Any]) -> ProfileClaims:
    """Clerk Backend API 유저 → ProfileClaims. 기본 이메일, 'first last' 이름, image_url."""
    primary_id = data.get("primary_email_address_id")
    addresses = data.get("email_addresses") or []
    email = None
    for address in addresses:
        if address.get("id") == primary_id:
            email = address.get("email_address")
            break
    if email is None and addresses:
        email = addresses[0].get("email_address")

    full_name = " ".join(
        part for part in (clean(data.get("first_name")), clean(data.get("last_name"))) if part
    )
    return ProfileClaims(
        email=clean(email),
        display_name=full_name or clean(data.get("username")),
        avatar_url=clean(data.get("image_url")),
    )


async def fetch_clerk_profile(clerk_id: str, client: httpx.AsyncClient) -> ProfileClaims:
    """
    Clerk Backend API로 유저 조회. 네트워크 예외(Timeout, Connect)와 5xx는 503,
    유저를 찾을 수 없으면 401.
    """
    try:
        resp = await client.get(
            f"{settings.clerk_api_url.rstrip('/')}/users/{clerk_id}",
            headers={
                "Authorization": f"Bearer {settings.clerk_secret_key.get_secret_value()}",
            },
            timeout=settings.clerk_timeout_seconds,
        )
    except (
        httpx.TimeoutException,
        httpx.ConnectError,
        httpx.RemoteProtocolError,
    ) as e:
        logger.warning("Clerk user fetch network error: %s", e, exc_info=True)
        raise UpstreamUnavailable() from e
    if resp.status_code >= 500:
        logger.warning("Clerk user fetch failed: %s %s", resp.status_code, resp.text)
        raise UpstreamUnavailable()
    if resp.status_code != 200:
        logger.warning("Clerk user fetch rejected: %s", resp.status_code)
        raise Unauthenticated("Unable to load user")
    return profile_from_clerk_user(resp.json())


def session_claims_for(user: User) -> SessionClaims:
    return SessionClaims(
        uid=user.id,
        cid=user.clerk_id,
        username=user.username,
        email=user.email,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        phone=user.phone,
        religion=user.religion,
        country=user.country,
        role=user.role,
    )


async def clerk_login(
    db: Database,
    token: str,
    sensitive: SensitiveFields | None = None,
    *,
    http_client: httpx.AsyncClient,
    key_fetcher: AsyncKeyFetcher,
) -> tuple[str, User]:
    """
    1. Clerk 토큰 검증(sub 필수)
    2. Clerk 유저 조회
    3. 한 트랜잭션 안에서 User reconcile
    4. 세션 토큰 발급
    """
    claims = await verify_clerk_token(token, key_fetcher)
    clerk_id = str(claims.get("sub") or "").strip()
    if not clerk_id:
        raise Unauthenticated("Invalid token: missing sub")

    profile = await fetch_clerk_profile(clerk_id, http_client)
    if sensitive is not None:
        profile = replace(
            profile,
            phone=sensitive.phone,
            religion=sensitive.religion,
            country=sensitive.country,
        )

    async with db.transaction() as session:
        user = await reconcile_user(session, clerk_id, profile)
    logger.info("Session login user_id=%s", user.id)
    return issue_session_token(session_claims_for(user)), user


async def logout(claims: SessionClaims | None, redis_blocklist_client: Any = None) -> None:
    """현재 세션 jti를 남은 유효시간만큼 Blocklist에 등록. 세션이 없으면 아무것도 안 함."""
    if claims is None or not claims.jti:
        return
    await add_session_to_blocklist(
        redis_blocklist_client, claims.jti, remaining_ttl_seconds(claims)
    )


async def get_session_user(db: Database, user_id: int) -> SessionUser:
    async with db.session() as session:
        user = await user_repository.get_by_id(session, user_id)
    if user is None:
        raise NotFound("User not found")
    return SessionUser.model_validate(user)
