"""Identity Service 단위 테스트. Clerk 프로필 → 로컬 User 병합 규칙."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from app.services.identity_service import (
    ProfileClaims,
    initial_values,
    merge_values,
    reconcile_user,
)
from tests.conftest import make_session


def _user(**fields) -> SimpleNamespace:
    base = {
        "id": 1,
        "clerk_id": "user_1",
        "username": "ada",
        "email": "old@example.com",
        "display_name": "Old Name",
        "avatar_url": None,
        "country": None,
        "phone": "010-0000",
        "religion": None,
    }
    return SimpleNamespace(**{**base, **fields})


def test_initial_values_defaults_display_name_and_skips_blanks() -> None:
    values = initial_values("user_1", ProfileClaims(email="  ", display_name=None, country="KR"))
    assert values == {"clerk_id": "user_1", "display_name": "User", "country": "KR"}
    assert "username" not in values


def test_merge_refreshes_provider_fields_but_never_clears() -> None:
    user = _user()
    changes = merge_values(user, ProfileClaims(email="new@example.com", display_name="", avatar_url="https://x/a.png"))
    assert changes == {"email": "new@example.com", "avatar_url": "https://x/a.png"}


def test_merge_fill_once_fields_only_when_empty() -> None:
    user = _user()
    changes = merge_values(user, ProfileClaims(phone="999", country="SG", religion=" "))
    # phone은 이미 있으므로 유지, country만 채움
    assert changes == {"country": "SG"}


def test_merge_never_touches_username() -> None:
    user = _user()
    changes = merge_values(user, ProfileClaims(display_name="Ada L"))
    assert "username" not in changes


@pytest.mark.asyncio
async def test_reconcile_creates_new_user() -> None:
    session = make_session()
    created = _user(username=None)
    with patch(
        "app.services.identity_service.user_repository.get_by_clerk_id",
        new_callable=AsyncMock,
        return_value=None,
    ), patch(
        "app.services.identity_service.user_repository.create",
        new_callable=AsyncMock,
        return_value=created,
    ) as create:
        result = await reconcile_user(session, "user_1", ProfileClaims(email="a@b.com"))
    assert result is created
    values = create.await_args.args[1]
    assert values["clerk_id"] == "user_1"
    assert values["email"] == "a@b.com"


@pytest.mark.asyncio
async def test_reconcile_concurrent_first_login_converges_on_existing_row() -> None:
    session = make_session()
    winner = _user(display_name="User", email=None)
    duplicate = IntegrityError(
        "INSERT INTO users", {}, Exception("duplicate key value violates unique constraint")
    )
    with patch(
        "app.services.identity_service.user_repository.get_by_clerk_id",
        new_callable=AsyncMock,
        side_effect=[None, winner],
    ), patch(
        "app.services.identity_service.user_repository.create",
        new_callable=AsyncMock,
        side_effect=duplicate,
    ):
        result = await reconcile_user(session, "user_1", ProfileClaims(email="a@b.com"))
    assert result is winner
    assert winner.email == "a@b.com"
    session.flush.assert_awaited()
