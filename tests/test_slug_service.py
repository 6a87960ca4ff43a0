"""Slug 생성·배정 테스트."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from app.services.slug_service import allocate_slug, slugify
from tests.conftest import make_session


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Ada Lovelace", "ada-lovelace"),
        ("  --Hello,   World!--  ", "hello-world"),
        ("Crème Brûlée", "creme-brulee"),
        ("한글만", ""),
        (None, ""),
    ],
)
def test_slugify(text: str | None, expected: str) -> None:
    assert slugify(text) == expected


@pytest.mark.asyncio
async def test_allocate_slug_appends_numeric_suffix() -> None:
    taken = SimpleNamespace(id=99)
    with patch(
        "app.repositories.resource_repository.get_by_slug",
        new_callable=AsyncMock,
        side_effect=[taken, taken, None],
    ):
        slug = await allocate_slug(make_session(), object, "Ada Lovelace", fallback="card")
    assert slug == "ada-lovelace-2"


@pytest.mark.asyncio
async def test_allocate_slug_uses_fallback_for_empty_candidate() -> None:
    with patch(
        "app.repositories.resource_repository.get_by_slug",
        new_callable=AsyncMock,
        return_value=None,
    ):
        slug = await allocate_slug(make_session(), object, "???", fallback="portfolio")
    assert slug == "portfolio"


@pytest.mark.asyncio
async def test_allocate_slug_ignores_own_row() -> None:
    with patch(
        "app.repositories.resource_repository.get_by_slug",
        new_callable=AsyncMock,
        return_value=SimpleNamespace(id=5),
    ):
        slug = await allocate_slug(make_session(), object, "my-card", fallback="card", exclude_id=5)
    assert slug == "my-card"


@pytest.mark.asyncio
async def test_allocate_slug_suffix_fits_column_for_long_titles() -> None:
    """200자 제목이 이미 쓰이고 있어도 접미사 포함 slug가 컬럼 길이를 넘지 않는다."""
    from app.models.challenge import Challenge

    column_length = Challenge.__table__.c.slug.type.length
    taken = SimpleNamespace(id=99)
    with patch(
        "app.repositories.resource_repository.get_by_slug",
        new_callable=AsyncMock,
        side_effect=[taken] * 10 + [None],
    ):
        slug = await allocate_slug(make_session(), Challenge, "a" * 200, fallback="challenge")
    assert len(slug) <= column_length
    assert slug.endswith("a-10")


@pytest.mark.asyncio
async def test_allocate_slug_does_not_leave_double_hyphen_when_cutting() -> None:
    # 자르는 위치가 하이픈 바로 뒤여도 "--"가 생기지 않아야 한다
    base = "x" * 117 + "-yyyyyy"
    with patch(
        "app.repositories.resource_repository.get_by_slug",
        new_callable=AsyncMock,
        side_effect=[SimpleNamespace(id=1), None],
    ):
        slug = await allocate_slug(make_session(), object, base, fallback="card")
    assert len(slug) <= 120
    assert "--" not in slug
    assert slug == "x" * 117 + "-1"
