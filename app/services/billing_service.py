"""Billing Service. Stripe 가격 해석, 고객 연결, 결제 세션, 결제 확정(idempotent) 반영.

finalize_checkout은 브라우저 리다이렉트에서 호출되며 웹훅 보장이 없으므로
같은 session_id로 여러 번 불려도 결과가 같아야 한다(stripe_sub_id 기준 upsert).
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import Database
from app.core.errors import BillingError, NotFound
from app.core.session import SessionClaims
from app.models.enums import Plan
from app.repositories import subscription_repository, user_repository
from app.schemas.billing import FinalizeResult, InvoiceOut
from app.services.billing_gateway import StripeGateway

logger = logging.getLogger(__name__)

PLAN_AMOUNTS_CENTS: dict[str, int] = {
    Plan.BASIC: 799,
    Plan.PRO: 1199,
    Plan.ULTIMATE: 1499,
}
PLAN_PRODUCT_NAMES: dict[str, str] = {
    Plan.BASIC: "Streakling Basic",
    Plan.PRO: "Streakling Pro",
    Plan.ULTIMATE: "Streakling Ultimate",
}
INVOICE_LIMIT = 20


def lookup_key_for(plan: str) -> str:
    return f"{plan}_monthly"


def configured_price_ids() -> dict[str, str | None]:
    return {
        Plan.BASIC: settings.stripe_price_basic,
        Plan.PRO: settings.stripe_price_pro,
        Plan.ULTIMATE: settings.stripe_price_ultimate,
    }


def _from_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=UTC)


async def resolve_price_id(gateway: StripeGateway, plan: str) -> str:
    """(1) 설정된 price id가 현재 계정에 있으면 사용 (2) lookup_key (3) 새 월간 price 생성."""
    configured = configured_price_ids().get(plan)
    if configured and configured.startswith("price_"):
        if await gateway.price_exists(configured):
            return configured
        logger.warning(
            "Configured price %s for plan %s not found in this Stripe account, falling back",
            configured,
            plan,
        )
    lookup_key = lookup_key_for(plan)
    found = await gateway.find_price_by_lookup_key(lookup_key)
    if found:
        return found
    logger.info("Creating Stripe price for plan %s (lookup_key=%s)", plan, lookup_key)
    return await gateway.create_monthly_price(
        plan=plan,
        amount_cents=PLAN_AMOUNTS_CENTS[plan],
        lookup_key=lookup_key,
        product_name=PLAN_PRODUCT_NAMES[plan],
    )


async def get_or_create_customer(
    db: Database, gateway: StripeGateway, identity: SessionClaims
) -> str:
    """
    유저를 id → clerk_id → email 순으로 찾는다. 이미 연결된 customer가 있으면 그대로.
    새로 만든 customer는 비어 있을 때만 기록하는 조건부 UPDATE로 연결하고,
    그 사이 다른 요청이 먼저 연결했다면 그 값으로 수렴한다.
    """
    async with db.session() as session:
        user = await user_repository.get_by_id(session, identity.uid)
        if user is None and identity.cid:
            user = await user_repository.get_by_clerk_id(session, identity.cid)
        if user is None and identity.email:
            user = await user_repository.get_by_email(session, identity.email)
    if user is None:
        raise NotFound("User not found for billing")
    if user.stripe_customer_id:
        return user.stripe_customer_id

    customer_id = await gateway.create_customer(
        email=user.email or identity.email,
        name=user.display_name or identity.display_name,
        metadata={"appUserId": str(user.id), "clerkId": user.clerk_id or ""},
    )
    async with db.transaction() as session:
        linked = await user_repository.link_stripe_customer(session, user.id, customer_id)
        if linked is not None:
            return linked
        current = await user_repository.get_by_id(session, user.id)
    if current is None or not current.stripe_customer_id:
        raise NotFound("User not found for billing")
    logger.warning(
        "Stripe customer race for user_id=%s: keeping %s, orphaned %s",
        user.id,
        current.stripe_customer_id,
        customer_id,
    )
    return current.stripe_customer_id


async def create_checkout(
    db: Database, gateway: StripeGateway, identity: SessionClaims, plan: str
) -> str:
    """구독 결제 세션 URL. success_url에 {CHECKOUT_SESSION_ID}를 넣어 finalize로 이어지게 한다."""
    price_id = await resolve_price_id(gateway, plan)
    customer_id = await get_or_create_customer(db, gateway, identity)
    origin = settings.app_origin.rstrip("/")
    return await gateway.create_checkout_session(
        customer_id=customer_id,
        price_id=price_id,
        success_url=f"{origin}/settings/billing?success=1&session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{origin}/pricing?canceled=1",
        metadata={"appUserId": str(identity.uid), "plan": plan},
    )


def plan_from_price(price: dict[str, Any], *metadatas: dict[str, Any]) -> str | None:
    """(1) price lookup_key (2) metadata.plan (3) 설정된 price id 일치."""
    lookup_key = price.get("lookup_key")
    for plan in PLAN_AMOUNTS_CENTS:
        if lookup_key == lookup_key_for(plan):
            return str(plan)
    for metadata in metadatas:
        meta_plan = (metadata or {}).get("plan")
        if meta_plan in PLAN_AMOUNTS_CENTS:
            return str(meta_plan)
    price_id = price.get("id")
    if price_id:
        for plan, configured in configured_price_ids().items():
            if configured and configured == price_id:
                return str(plan)
    return None


def _parse_user_id(value: Any) -> int | None:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


async def _resolve_owner(
    session: AsyncSession,
    metadata_sources: tuple[dict[str, Any], ...],
    customer_id: str | None,
    caller_id: int,
) -> int:
    """metadata의 appUserId는 실제 유저가 있을 때만 채택. 없으면 다음 후보로 넘어간다."""
    for meta in metadata_sources:
        user_id = _parse_user_id(meta.get("appUserId"))
        if user_id is not None and await user_repository.get_by_id(session, user_id) is not None:
            return user_id
    if customer_id:
        owner = await user_repository.get_by_stripe_customer_id(session, customer_id)
        if owner is not None:
            return owner.id
    return caller_id


async def finalize_checkout(
    db: Database, gateway: StripeGateway, session_id: str, caller_id: int
) -> FinalizeResult:
    """
    결제 세션에 구독이 없으면 아무것도 하지 않는다(취소 등).
    유저: 구독 metadata → 세션 metadata → customer id → 호출자.
    구독은 stripe_sub_id로 upsert, 이후 유저 plan/status/period_end 갱신.
    """
    checkout = await gateway.retrieve_checkout_session(session_id)
    subscription = checkout.get("subscription")
    if not subscription:
        logger.info("Checkout session %s has no subscription, nothing to finalize", session_id)
        return FinalizeResult(finalized=False)
    if not isinstance(subscription, dict):
        logger.error("Checkout session %s subscription was not expanded", session_id)
        raise BillingError()

    sub_meta = subscription.get("metadata") or {}
    session_meta = checkout.get("metadata") or {}
    items = (subscription.get("items") or {}).get("data") or []
    first_item = items[0] if items else {}
    price = first_item.get("price") or {}
    plan = plan_from_price(price, sub_meta, session_meta)
    status = subscription.get("status") or "incomplete"
    period_end = _from_timestamp(
        subscription.get("current_period_end") or first_item.get("current_period_end")
    )
    customer = subscription.get("customer") or checkout.get("customer")
    customer_id = customer.get("id") if isinstance(customer, dict) else customer

    async with db.transaction() as session:
        user_id = await _resolve_owner(session, (sub_meta, session_meta), customer_id, caller_id)

        await subscription_repository.upsert_by_stripe_sub_id(
            session,
            stripe_sub_id=subscription["id"],
            user_id=user_id,
            stripe_price_id=price.get("id") or "",
            status=status,
            current_period_end=period_end,
        )
        current = await user_repository.get_by_id(session, user_id)
        await user_repository.update_billing(
            session,
            user_id,
            plan=plan or (current.plan if current else None),
            subscription_status=status,
            current_period_end=period_end,
            stripe_customer_id=customer_id,
        )
    logger.info(
        "Checkout finalized session=%s subscription=%s user_id=%s plan=%s status=%s",
        session_id,
        subscription["id"],
        user_id,
        plan,
        status,
    )
    return FinalizeResult(
        finalized=True,
        plan=plan,
        subscription_status=status,
        current_period_end=period_end,
        subscription_id=subscription["id"],
    )


async def create_portal(db: Database, gateway: StripeGateway, identity: SessionClaims) -> str:
    customer_id = await get_or_create_customer(db, gateway, identity)
    return await gateway.create_portal_session(
        customer_id=customer_id, return_url=settings.stripe_portal_return_url
    )


async def list_invoices(
    db: Database, gateway: StripeGateway, identity: SessionClaims
) -> list[InvoiceOut]:
    """최근 인보이스 20건."""
    customer_id = await get_or_create_customer(db, gateway, identity)
    invoices = await gateway.list_invoices(customer_id=customer_id, limit=INVOICE_LIMIT)
    return [
        InvoiceOut(
            id=inv["id"],
            number=inv.get("number"),
            status=inv.get("status"),
            currency=inv.get("currency"),
            total=inv.get("total") or 0,
            created=_from_timestamp(inv.get("created")),
            hosted_invoice_url=inv.get("hosted_invoice_url"),
            invoice_pdf=inv.get("invoice_pdf"),
        )
        for inv in invoices
    ]
