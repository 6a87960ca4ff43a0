"""Billing Service 테스트. Stripe 호출은 게이트웨이 mock으로 대체."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.session import SessionClaims
from app.services import billing_service
from tests.conftest import FakeDatabase

SETTINGS = "app.services.billing_service.settings"


def _gateway(**methods) -> MagicMock:
    gateway = MagicMock()
    for name in (
        "price_exists",
        "find_price_by_lookup_key",
        "create_monthly_price",
        "create_customer",
        "create_checkout_session",
        "retrieve_checkout_session",
        "create_portal_session",
        "list_invoices",
    ):
        setattr(gateway, name, AsyncMock(return_value=methods.get(name)))
    return gateway


@pytest.mark.asyncio
async def test_resolve_price_uses_configured_id_when_present(monkeypatch) -> None:
    monkeypatch.setattr(f"{SETTINGS}.stripe_price_pro", "price_pro_live")
    gateway = _gateway(price_exists=True)
    assert await billing_service.resolve_price_id(gateway, "pro") == "price_pro_live"
    gateway.find_price_by_lookup_key.assert_not_awaited()


@pytest.mark.asyncio
async def test_resolve_price_falls_back_to_lookup_key(monkeypatch) -> None:
    monkeypatch.setattr(f"{SETTINGS}.stripe_price_basic", "price_from_other_account")
    gateway = _gateway(price_exists=False, find_price_by_lookup_key="price_lookup")
    assert await billing_service.resolve_price_id(gateway, "basic") == "price_lookup"
    gateway.find_price_by_lookup_key.assert_awaited_once_with("basic_monthly")
    gateway.create_monthly_price.assert_not_awaited()


@pytest.mark.asyncio
async def test_resolve_price_creates_monthly_price_as_last_resort(monkeypatch) -> None:
    monkeypatch.setattr(f"{SETTINGS}.stripe_price_ultimate", None)
    gateway = _gateway(find_price_by_lookup_key=None, create_monthly_price="price_new")
    assert await billing_service.resolve_price_id(gateway, "ultimate") == "price_new"
    kwargs = gateway.create_monthly_price.await_args.kwargs
    assert kwargs["amount_cents"] == 1499
    assert kwargs["lookup_key"] == "ultimate_monthly"


def test_plan_from_price_priority(monkeypatch) -> None:
    monkeypatch.setattr(f"{SETTINGS}.stripe_price_basic", "price_b")
    assert billing_service.plan_from_price({"lookup_key": "pro_monthly"}, {"plan": "basic"}) == "pro"
    assert billing_service.plan_from_price({"id": "price_x"}, {}, {"plan": "ultimate"}) == "ultimate"
    assert billing_service.plan_from_price({"id": "price_b"}) == "basic"
    assert billing_service.plan_from_price({"id": "price_unknown"}, {"plan": "gold"}) is None


def _checkout() -> dict:
    return {
        "id": "cs_1",
        "customer": "cus_1",
        "metadata": {"appUserId": "5", "plan": "pro"},
        "subscription": {
            "id": "sub_1",
            "status": "active",
            "customer": "cus_1",
            "metadata": {},
            "items": {
                "data": [
                    {
                        "price": {"id": "price_p", "lookup_key": "pro_monthly"},
                        "current_period_end": 1767225600,
                    }
                ]
            },
        },
    }


@pytest.mark.asyncio
async def test_finalize_is_idempotent() -> None:
    gateway = _gateway(retrieve_checkout_session=_checkout())
    user = SimpleNamespace(id=5, plan=None)
    with patch(
        "app.services.billing_service.user_repository.get_by_id",
        new_callable=AsyncMock,
        return_value=user,
    ), patch(
        "app.services.billing_service.subscription_repository.upsert_by_stripe_sub_id",
        new_callable=AsyncMock,
        return_value=1,
    ) as upsert, patch(
        "app.services.billing_service.user_repository.update_billing",
        new_callable=AsyncMock,
    ) as update_billing:
        first = await billing_service.finalize_checkout(FakeDatabase(), gateway, "cs_1", caller_id=9)
        second = await billing_service.finalize_checkout(FakeDatabase(), gateway, "cs_1", caller_id=9)

    assert first == second
    assert first.finalized is True
    assert first.plan == "pro"
    assert first.subscription_status == "active"
    assert first.current_period_end is not None
    assert upsert.await_count == 2
    assert upsert.await_args_list[0] == upsert.await_args_list[1]
    kwargs = upsert.await_args.kwargs
    assert kwargs["stripe_sub_id"] == "sub_1"
    assert kwargs["user_id"] == 5
    billing_kwargs = update_billing.await_args.kwargs
    assert billing_kwargs["plan"] == "pro"
    assert billing_kwargs["stripe_customer_id"] == "cus_1"


@pytest.mark.asyncio
async def test_finalize_without_subscription_is_noop() -> None:
    gateway = _gateway(retrieve_checkout_session={"id": "cs_2", "subscription": None})
    with patch(
        "app.services.billing_service.subscription_repository.upsert_by_stripe_sub_id",
        new_callable=AsyncMock,
    ) as upsert:
        result = await billing_service.finalize_checkout(FakeDatabase(), gateway, "cs_2", caller_id=9)
    assert result.finalized is False
    upsert.assert_not_awaited()


@pytest.mark.asyncio
async def test_existing_customer_is_reused() -> None:
    gateway = _gateway()
    identity = SessionClaims(uid=5, cid="user_5", email="a@b.com")
    with patch(
        "app.services.billing_service.user_repository.get_by_id",
        new_callable=AsyncMock,
        return_value=SimpleNamespace(id=5, stripe_customer_id="cus_existing"),
    ):
        customer = await billing_service.get_or_create_customer(FakeDatabase(), gateway, identity)
    assert customer == "cus_existing"
    gateway.create_customer.assert_not_awaited()


@pytest.mark.asyncio
async def test_customer_link_race_converges_on_winner() -> None:
    gateway = _gateway(create_customer="cus_loser")
    identity = SessionClaims(uid=5, cid="user_5", email="a@b.com")
    fresh = SimpleNamespace(id=5, stripe_customer_id=None, email="a@b.com", display_name="A", clerk_id="user_5")
    linked_by_other = SimpleNamespace(id=5, stripe_customer_id="cus_winner")
    with patch(
        "app.services.billing_service.user_repository.get_by_id",
        new_callable=AsyncMock,
        side_effect=[fresh, linked_by_other],
    ), patch(
        "app.services.billing_service.user_repository.link_stripe_customer",
        new_callable=AsyncMock,
        return_value=None,
    ):
        customer = await billing_service.get_or_create_customer(FakeDatabase(), gateway, identity)
    assert customer == "cus_winner"


def _checkout_with(sub_meta: dict, session_meta: dict) -> dict:
    checkout = _checkout()
    checkout["metadata"] = session_meta
    checkout["subscription"]["metadata"] = sub_meta
    return checkout


@pytest.mark.asyncio
async def test_finalize_skips_metadata_user_that_does_not_exist() -> None:
    """구독 metadata의 유저가 없으면 세션 metadata로 넘어간다."""
    gateway = _gateway(retrieve_checkout_session=_checkout_with({"appUserId": "404"}, {"appUserId": "5"}))
    users = {5: SimpleNamespace(id=5, plan=None)}

    async def _get_by_id(session, user_id):
        return users.get(user_id)

    with patch(
        "app.services.billing_service.user_repository.get_by_id", side_effect=_get_by_id
    ), patch(
        "app.services.billing_service.subscription_repository.upsert_by_stripe_sub_id",
        new_callable=AsyncMock,
        return_value=1,
    ) as upsert, patch(
        "app.services.billing_service.user_repository.update_billing",
        new_callable=AsyncMock,
    ):
        await billing_service.finalize_checkout(FakeDatabase(), gateway, "cs_1", caller_id=9)
    assert upsert.await_args.kwargs["user_id"] == 5


@pytest.mark.asyncio
async def test_finalize_falls_back_to_customer_owner_before_caller() -> None:
    gateway = _gateway(retrieve_checkout_session=_checkout_with({"appUserId": "404"}, {}))
    users = {12: SimpleNamespace(id=12, plan="basic")}

    async def _get_by_id(session, user_id):
        return users.get(user_id)

    with patch(
        "app.services.billing_service.user_repository.get_by_id", side_effect=_get_by_id
    ), patch(
        "app.services.billing_service.user_repository.get_by_stripe_customer_id",
        new_callable=AsyncMock,
        return_value=users[12],
    ) as by_customer, patch(
        "app.services.billing_service.subscription_repository.upsert_by_stripe_sub_id",
        new_callable=AsyncMock,
        return_value=1,
    ) as upsert, patch(
        "app.services.billing_service.user_repository.update_billing",
        new_callable=AsyncMock,
    ):
        await billing_service.finalize_checkout(FakeDatabase(), gateway, "cs_1", caller_id=9)
    by_customer.assert_awaited_once()
    assert by_customer.await_args.args[1] == "cus_1"
    assert upsert.await_args.kwargs["user_id"] == 12


@pytest.mark.asyncio
async def test_finalize_uses_caller_when_no_source_matches() -> None:
    gateway = _gateway(retrieve_checkout_session=_checkout_with({}, {"appUserId": "not-a-number"}))
    with patch(
        "app.services.billing_service.user_repository.get_by_id",
        new_callable=AsyncMock,
        return_value=None,
    ), patch(
        "app.services.billing_service.user_repository.get_by_stripe_customer_id",
        new_callable=AsyncMock,
        return_value=None,
    ), patch(
        "app.services.billing_service.subscription_repository.upsert_by_stripe_sub_id",
        new_callable=AsyncMock,
        return_value=1,
    ) as upsert, patch(
        "app.services.billing_service.user_repository.update_billing",
        new_callable=AsyncMock,
    ):
        await billing_service.finalize_checkout(FakeDatabase(), gateway, "cs_1", caller_id=9)
    assert upsert.await_args.kwargs["user_id"] == 9
