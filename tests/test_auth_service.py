"""Auth Service 단위 테스트. DB/Clerk 호출 없이 검증."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import jwt
import pytest
from pyjwt_key_fetcher.errors import JWTHTTPFetchError

from app.core.errors import Unauthenticated, UpstreamUnavailable
from app.core.session import decode_session_token
from app.schemas.session import SensitiveFields
from app.services.auth_service import (
    clerk_login,
    fetch_clerk_profile,
    profile_from_clerk_user,
    verify_clerk_token,
)
from app.services.identity_service import ProfileClaims
from tests.conftest import FakeDatabase


def test_profile_from_clerk_user_prefers_primary_email() -> None:
    profile = profile_from_clerk_user(
        {
            "primary_email_address_id": "idn_2",
            "email_addresses": [
                {"id": "idn_1", "email_address": "old@example.com"},
                {"id": "idn_2", "email_address": "primary@example.com"},
            ],
            "first_name": "Ada",
            "last_name": " ",
            "image_url": "https://img.clerk.com/a.png",
        }
    )
    assert profile.email == "primary@example.com"
    assert profile.display_name == "Ada"
    assert profile.avatar_url == "https://img.clerk.com/a.png"


def test_profile_from_clerk_user_handles_missing_fields() -> None:
    profile = profile_from_clerk_user({"username": "ada_l"})
    assert profile.email is None
    assert profile.display_name == "ada_l"


@pytest.mark.asyncio
async def test_verify_clerk_token_valid() -> None:
    """key_fetcher.get_key + jwt.decode mock 시 claims 반환."""
    mock_fetcher = AsyncMock()
    mock_fetcher.get_key = AsyncMock(return_value={"key": "dummy-key-for-test", "algorithms": ["RS256"]})
    with patch(
        "app.services.auth_service.jwt.decode",
        return_value={"sub": "user_123", "exp": 9999999999},
    ):
        claims = await verify_clerk_token("fake-token", mock_fetcher)
    assert claims["sub"] == "user_123"


@pytest.mark.asyncio
async def test_verify_clerk_token_invalid_is_unauthenticated() -> None:
    mock_fetcher = AsyncMock()
    mock_fetcher.get_key = AsyncMock(return_value={"key": "k", "algorithms": ["RS256"]})
    with patch(
        "app.services.auth_service.jwt.decode",
        side_effect=jwt.ExpiredSignatureError("expired"),
    ):
        with pytest.raises(Unauthenticated):
            await verify_clerk_token("fake-token", mock_fetcher)


@pytest.mark.asyncio
async def test_verify_clerk_token_jwks_outage_is_503() -> None:
    mock_fetcher = AsyncMock()
    mock_fetcher.get_key = AsyncMock(side_effect=JWTHTTPFetchError("jwks down"))
    with pytest.raises(UpstreamUnavailable):
        await verify_clerk_token("fake-token", mock_fetcher)


@pytest.mark.asyncio
async def test_fetch_clerk_profile_timeout_is_503() -> None:
    client = AsyncMock()
    client.get = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
    with pytest.raises(UpstreamUnavailable):
        await fetch_clerk_profile("user_1", client)


@pytest.mark.asyncio
async def test_fetch_clerk_profile_404_is_unauthenticated() -> None:
    response = MagicMock(status_code=404, text="not found")
    client = AsyncMock()
    client.get = AsyncMock(return_value=response)
    with pytest.raises(Unauthenticated):
        await fetch_clerk_profile("user_1", client)


@pytest.mark.asyncio
async def test_clerk_login_issues_session_for_reconciled_user() -> None:
    user = SimpleNamespace(
        id=10,
        clerk_id="user_123",
        username=None,
        email="a@b.com",
        display_name="Ada",
        avatar_url=None,
        phone="010",
        religion=None,
        country="KR",
        role="USER",
    )
    with patch(
        "app.services.auth_service.verify_clerk_token",
        new_callable=AsyncMock,
        return_value={"sub": "user_123"},
    ), patch(
        "app.services.auth_service.fetch_clerk_profile",
        new_callable=AsyncMock,
        return_value=ProfileClaims(email="a@b.com", display_name="Ada"),
    ), patch(
        "app.services.auth_service.reconcile_user",
        new_callable=AsyncMock,
        return_value=user,
    ) as reconcile:
        db = FakeDatabase()
        token, returned = await clerk_login(
            db,
            "clerk-token",
            SensitiveFields(phone="010", country="KR"),
            http_client=MagicMock(),
            key_fetcher=MagicMock(),
        )
    assert returned is user
    assert db.transactions == 1
    profile = reconcile.await_args.args[2]
    assert profile.phone == "010"
    assert profile.country == "KR"
    claims = decode_session_token(token)
    assert claims is not None
    assert claims.uid == 10
    assert claims.cid == "user_123"


@pytest.mark.asyncio
async def test_clerk_login_requires_sub() -> None:
    with patch(
        "app.services.auth_service.verify_clerk_token",
        new_callable=AsyncMock,
        return_value={"sub": ""},
    ):
        with pytest.raises(Unauthenticated):
            await clerk_login(
                FakeDatabase(),
                "clerk-token",
                http_client=MagicMock(),
                key_fetcher=MagicMock(),
            )
