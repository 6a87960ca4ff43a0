"""공개 목록 keyset 커서 테스트. 세션은 mock."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.models.portfolio import Portfolio
from app.repositories import resource_repository
from tests.conftest import make_session


def _anchor_result(published_at):
    result = MagicMock()
    result.scalar_one_or_none.return_value = published_at
    return result


def _rows_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


@pytest.mark.asyncio
async def test_stale_cursor_ends_listing_instead_of_restarting() -> None:
    """커서 행이 삭제·게시 해제되면 첫 페이지로 돌아가지 않고 빈 목록."""
    session = make_session()
    session.execute = AsyncMock(return_value=_anchor_result(None))
    rows = await resource_repository.list_published(session, Portfolio, after_id=42, limit=24)
    assert rows == []
    assert session.execute.await_count == 1


@pytest.mark.asyncio
async def test_cursor_continues_after_anchor() -> None:
    session = make_session()
    page = [object(), object()]
    session.execute = AsyncMock(
        side_effect=[_anchor_result(datetime(2026, 5, 1, tzinfo=UTC)), _rows_result(page)]
    )
    rows = await resource_repository.list_published(session, Portfolio, after_id=42, limit=24)
    assert rows == page
    assert session.execute.await_count == 2
    compiled = str(session.execute.await_args.args[0])
    assert "portfolios.published_at >" in compiled


@pytest.mark.asyncio
async def test_first_page_skips_anchor_lookup() -> None:
    session = make_session()
    session.execute = AsyncMock(return_value=_rows_result([]))
    rows = await resource_repository.list_published(session, Portfolio, after_id=None, limit=24)
    assert rows == []
    assert session.execute.await_count == 1
