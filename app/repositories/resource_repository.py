"""
소유·게시 리소스(명함, 포트폴리오, 챌린지) 공통 Repository. DB 쿼리만 수행.

model은 OwnedPublishableMixin을 쓰는 ORM 클래스. options는 selectinload 등 로딩 옵션.
하위 컬렉션 교체 전에는 반드시 전체 트리를 selectinload로 읽어 둔다(async lazy load 불가).
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.models.enums import PublishStatus


async def get_by_id(
    session: AsyncSession,
    model: type[Any],
    resource_id: int,
    *,
    options: Sequence[Any] = (),
    populate_existing: bool = False,
) -> Any | None:
    stmt = select(model).where(model.id == resource_id).options(*options)
    if populate_existing:
        stmt = stmt.execution_options(populate_existing=True)
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def get_owned(
    session: AsyncSession,
    model: type[Any],
    resource_id: int,
    user_id: int,
    *,
    options: Sequence[Any] = (),
) -> Any | None:
    """id + 소유자 일치 시에만 반환. 타인 소유면 None(없음과 구분하지 않음)."""
    result = await session.execute(
        select(model)
        .where(model.id == resource_id, model.user_id == user_id)
        .options(*options)
    )
    return result.scalars().one_or_none()


async def get_by_slug(
    session: AsyncSession,
    model: type[Any],
    slug: str,
    *,
    options: Sequence[Any] = (),
) -> Any | None:
    result = await session.execute(
        select(model).where(model.slug == slug).options(*options)
    )
    return result.scalars().one_or_none()


async def list_by_owner(
    session: AsyncSession,
    model: type[Any],
    user_id: int,
    *,
    order_by: Sequence[Any],
    options: Sequence[Any] = (),
) -> list[Any]:
    result = await session.execute(
        select(model)
        .where(model.user_id == user_id)
        .order_by(*order_by)
        .options(*options)
    )
    return list(result.scalars().all())


async def list_published(
    session: AsyncSession,
    model: type[Any],
    *,
    after_id: int | None,
    limit: int,
    q: str | None = None,
    search_columns: Sequence[InstrumentedAttribute] = (),
    options: Sequence[Any] = (),
) -> list[Any]:
    """
    PUBLISHED만 (published_at, id) 오름차순 keyset. limit+1개 반환(다음 페이지 판별용).
    after_id는 직전 페이지 마지막 행 id. 그 행이 삭제됐거나 게시 해제돼 기준점이 없으면
    처음부터 다시 돌지 않고 빈 목록(마지막 페이지)으로 끝낸다.
    """
    stmt = select(model).where(model.publish_status == PublishStatus.PUBLISHED)
    if q and search_columns:
        pattern = f"%{q}%"
        stmt = stmt.where(or_(*(col.ilike(pattern) for col in search_columns)))
    if after_id is not None:
        anchor = await session.execute(
            select(model.published_at).where(model.id == after_id)
        )
        anchor_published_at = anchor.scalar_one_or_none()
        if anchor_published_at is None:
            return []
        stmt = stmt.where(
            or_(
                model.published_at > anchor_published_at,
                and_(model.published_at == anchor_published_at, model.id > after_id),
            )
        )
    stmt = (
        stmt.order_by(model.published_at.asc(), model.id.asc())
        .limit(limit + 1)
        .options(*options)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_latest(
    session: AsyncSession,
    model: type[Any],
    *,
    after_id: int | None,
    limit: int,
) -> list[Any]:
    """관리자 목록. id 내림차순 keyset, limit+1개."""
    stmt = select(model)
    if after_id is not None:
        stmt = stmt.where(model.id < after_id)
    result = await session.execute(stmt.order_by(model.id.desc()).limit(limit + 1))
    return list(result.scalars().all())


async def count(session: AsyncSession, model: type[Any]) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return int(result.scalar_one())
