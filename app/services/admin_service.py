"""Admin Service. 대시보드 집계와 최신순 목록(id 내림차순 커서)."""

from typing import Any

from app.core.database import Database
from app.models.challenge import Challenge
from app.models.name_card import DigitalNameCard
from app.models.portfolio import Portfolio
from app.models.user import User
from app.repositories import resource_repository, submission_repository
from app.schemas.admin import (
    AdminCardRow,
    AdminChallengeRow,
    AdminPortfolioRow,
    AdminStats,
    AdminUserRow,
)
from app.schemas.common import ApiModel, Page, clamp_limit, paginate

ADMIN_PAGE_DEFAULT = 10
ADMIN_PAGE_MAX = 200


async def get_stats(db: Database) -> AdminStats:
    async with db.session() as session:
        return AdminStats(
            users=await resource_repository.count(session, User),
            digital_cards=await resource_repository.count(session, DigitalNameCard),
            portfolios=await resource_repository.count(session, Portfolio),
            challenges=await resource_repository.count(session, Challenge),
            submissions=await submission_repository.count_all(session),
        )


async def _list_latest(
    db: Database, model: type[Any], row_schema: type[ApiModel], cursor: int | None, limit: int | None
) -> Page[Any]:
    limit = clamp_limit(limit, ADMIN_PAGE_DEFAULT, ADMIN_PAGE_MAX)
    async with db.session() as session:
        rows = await resource_repository.list_latest(session, model, after_id=cursor, limit=limit)
    items, next_cursor = paginate(rows, limit)
    return Page(items=[row_schema.model_validate(r) for r in items], next_cursor=next_cursor)


async def list_users(db: Database, *, cursor: int | None = None, limit: int | None = None) -> Page[Any]:
    return await _list_latest(db, User, AdminUserRow, cursor, limit)


async def list_cards(db: Database, *, cursor: int | None = None, limit: int | None = None) -> Page[Any]:
    return await _list_latest(db, DigitalNameCard, AdminCardRow, cursor, limit)


async def list_portfolios(
    db: Database, *, cursor: int | None = None, limit: int | None = None
) -> Page[Any]:
    return await _list_latest(db, Portfolio, AdminPortfolioRow, cursor, limit)


async def list_challenges(
    db: Database, *, cursor: int | None = None, limit: int | None = None
) -> Page[Any]:
    """챌린지 목록 + 제출 수."""
    limit = clamp_limit(limit, ADMIN_PAGE_DEFAULT, ADMIN_PAGE_MAX)
    async with db.session() as session:
        rows = await resource_repository.list_latest(
            session, Challenge, after_id=cursor, limit=limit
        )
        items, next_cursor = paginate(rows, limit)
        counts = await submission_repository.count_by_challenge(session, [c.id for c in items])
    return Page(
        items=[
            AdminChallengeRow.model_validate(c).model_copy(
                update={"submission_count": counts.get(c.id, 0)}
            )
            for c in items
        ],
        next_cursor=next_cursor,
    )
