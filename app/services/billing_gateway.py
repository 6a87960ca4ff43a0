"""Stripe 게이트웨이. 동기 stripe SDK 호출을 asyncio.to_thread로 감싸고 결과는 dict로 돌려준다.

서비스 레이어는 이 클래스의 인터페이스에만 의존한다(테스트는 가짜 게이트웨이로 대체).
Stripe 예외는 BillingError로 변환, 상세 사유는 로그에만 남긴다.
"""

import asyncio
import logging
from typing import Any

import stripe

from app.core.errors import BillingError

logger = logging.getLogger(__name__)


def _as_dict(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict) and not isinstance(obj, stripe.StripeObject):
        return obj
    return obj.to_dict()


class StripeGateway:
    """프로세스당 하나. lifespan에서 생성해 app.state.billing_gateway에 보관."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    async def _call(self, operation: str, func: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args, api_key=self._api_key, **kwargs)
        except stripe.StripeError as e:
            logger.warning("Stripe %s failed: %s", operation, e, exc_info=True)
            raise BillingError() from e

    async def price_exists(self, price_id: str) -> bool:
        """현재 계정/모드에 price가 있으면 True. 조회 실패(없음)는 False."""
        try:
            price = await asyncio.to_thread(stripe.Price.retrieve, price_id, api_key=self._api_key)
        except stripe.InvalidRequestError:
            return False
        except stripe.StripeError as e:
            logger.warning("Stripe price lookup failed (price=%s): %s", price_id, e)
            return False
        return bool(price and price.get("id"))

    async def find_price_by_lookup_key(self, lookup_key: str) -> str | None:
        listed = await self._call(
            "price list", stripe.Price.list, lookup_keys=[lookup_key], active=True, limit=1
        )
        data = _as_dict(listed).get("data") or []
        return data[0]["id"] if data else None

    async def create_monthly_price(
        self, *, plan: str, amount_cents: int, lookup_key: str, product_name: str
    ) -> str:
        price = await self._call(
            "price create",
            stripe.Price.create,
            currency="usd",
            unit_amount=amount_cents,
            recurring={"interval": "month"},
            lookup_key=lookup_key,
            product_data={"name": product_name, "metadata": {"plan": plan}},
            metadata={"plan": plan},
        )
        return price["id"]

    async def create_customer(
        self, *, email: str | None, name: str | None, metadata: dict[str, str]
    ) -> str:
        customer = await self._call(
            "customer create",
            stripe.Customer.create,
            email=email,
            name=name,
            metadata=metadata,
        )
        return customer["id"]

    async def create_checkout_session(
        self,
        *,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> str:
        session = await self._call(
            "checkout create",
            stripe.checkout.Session.create,
            mode="subscription",
            customer=customer_id,
            line_items=[{"price": price_id, "quantity": 1}],
            allow_promotion_codes=True,
            success_url=success_url,
            cancel_url=cancel_url,
            subscription_data={"metadata": metadata},
            metadata=metadata,
        )
        url = session.get("url")
        if not url:
            logger.error("Stripe checkout session %s returned no URL", session.get("id"))
            raise BillingError()
        return url

    async def retrieve_checkout_session(self, session_id: str) -> dict[str, Any]:
        """구독과 구독 항목 price까지 expand해서 dict로."""
        session = await self._call(
            "checkout retrieve",
            stripe.checkout.Session.retrieve,
            session_id,
            expand=["subscription", "subscription.items.data.price"],
        )
        return _as_dict(session)

    async def create_portal_session(self, *, customer_id: str, return_url: str) -> str:
        portal = await self._call(
            "portal create",
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )
        return portal["url"]

    async def list_invoices(self, *, customer_id: str, limit: int) -> list[dict[str, Any]]:
        invoices = await self._call(
            "invoice list", stripe.Invoice.list, customer=customer_id, limit=limit
        )
        return list(_as_dict(invoices).get("data") or [])
