"""User Repository. DB 쿼리만 수행."""

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import Role
from app.models.user import User


async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
    """id로 유저 조회."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalars().one_or_none()


async def get_by_clerk_id(session: AsyncSession, clerk_id: str) -> User | None:
    """Clerk user id로 유저 조회."""
    result = await session.execute(select(User).where(User.clerk_id == clerk_id))
    return result.scalars().one_or_none()


async def get_by_email(session: AsyncSession, email: str) -> User | None:
    """이메일(대소문자 무시)로 가장 먼저 가입한 유저 조회."""
    result = await session.execute(
        select(User)
        .where(func.lower(User.email) == email.strip().lower())
        .order_by(User.id.asc())
        .limit(1)
    )
    return result.scalars().one_or_none()


async def get_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalars().one_or_none()


async def get_by_stripe_customer_id(session: AsyncSession, customer_id: str) -> User | None:
    result = await session.execute(
        select(User).where(User.stripe_customer_id == customer_id)
    )
    return result.scalars().one_or_none()


async def get_role(session: AsyncSession, user_id: int) -> str | None:
    """관리자 검사용 최신 role. 유저가 없으면 None."""
    result = await session.execute(select(User.role).where(User.id == user_id))
    return result.scalars().one_or_none()


async def create(session: AsyncSession, values: dict[str, Any]) -> User:
    """INSERT 후 flush로 id 확정. clerk_id 중복이면 IntegrityError."""
    user = User(**values)
    session.add(user)
    await session.flush()
    return user


async def link_stripe_customer(
    session: AsyncSession, user_id: int, customer_id: str
) -> str | None:
    """
    stripe_customer_id가 비어 있을 때만 기록(조건부 UPDATE).
    기록했으면 customer_id, 이미 다른 값이 있었으면 None.
    """
    result = await session.execute(
        update(User)
        .where(User.id == user_id, User.stripe_customer_id.is_(None))
        .values(stripe_customer_id=customer_id)
        .returning(User.stripe_customer_id)
    )
    return result.scalars().one_or_none()


async def update_billing(
    session: AsyncSession,
    user_id: int,
    *,
    plan: str | None,
    subscription_status: str | None,
    current_period_end: Any,
    stripe_customer_id: str | None = None,
) -> None:
    """결제 확정 결과를 유저에 반영. customer id는 비어 있을 때만 채운다."""
    values: dict[str, Any] = {
        "plan": plan,
        "subscription_status": subscription_status,
        "current_period_end": current_period_end,
    }
    if stripe_customer_id:
        values["stripe_customer_id"] = func.coalesce(User.stripe_customer_id, stripe_customer_id)
    await session.execute(update(User).where(User.id == user_id).values(**values))


async def promote_to_admin(session: AsyncSession, email: str) -> int | None:
    """이메일로 유저를 ADMIN으로 승격. 대상 id 또는 None."""
    result = await session.execute(
        update(User)
        .where(func.lower(User.email) == email.strip().lower())
        .values(role=Role.ADMIN)
        .returning(User.id)
    )
    return result.scalars().first()


async def list_public(
    session: AsyncSession, *, after_id: int | None, limit: int
) -> list[User]:
    """username이 있는 유저만 공개 목록에 노출. id 오름차순 keyset, limit+1개."""
    stmt = select(User).where(User.username.is_not(None))
    if after_id is not None:
        stmt = stmt.where(User.id > after_id)
    stmt = stmt.order_by(User.id.asc()).limit(limit + 1)
    result = await session.execute(stmt)
    return list(result.scalars().all())
