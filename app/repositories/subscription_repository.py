"""Subscription Repository. DB 쿼리만 수행."""

from datetime import UTC, datetime

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.subscription import Subscription


async def upsert_by_stripe_sub_id(
    session: AsyncSession,
    *,
    stripe_sub_id: str,
    user_id: int,
    stripe_price_id: str,
    status: str,
    current_period_end: datetime | None,
) -> int:
    """
    INSERT ... ON CONFLICT (stripe_sub_id) DO UPDATE.
    같은 결제 세션을 여러 번 확정해도 행은 하나. 반환값은 Subscription.id.
    """
    now = datetime.now(UTC)
    base = pg_insert(Subscription).values(
        stripe_sub_id=stripe_sub_id,
        user_id=user_id,
        stripe_price_id=stripe_price_id,
        status=status,
        current_period_end=current_period_end,
        created_at=now,
        updated_at=now,
    )
    stmt = base.on_conflict_do_update(
        constraint="uq_subscription_stripe_sub",
        set_={
            Subscription.user_id: base.excluded.user_id,
            Subscription.stripe_price_id: base.excluded.stripe_price_id,
            Subscription.status: base.excluded.status,
            Subscription.current_period_end: base.excluded.current_period_end,
            Subscription.updated_at: now,
        },
    ).returning(Subscription.id)
    result = await session.execute(stmt)
    return result.scalars().one()
