"""Billing API (Stripe 구독)."""

from fastapi import APIRouter, Depends, Query

from app.api.deps import require_session
from app.core.database import Database
from app.core.deps import get_billing_gateway, get_database
from app.core.session import SessionClaims
from app.schemas.billing import CheckoutRequest, FinalizeResult, InvoiceOut, RedirectUrl
from app.schemas.common import Envelope
from app.services import billing_service
from app.services.billing_gateway import StripeGateway

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/checkout", response_model=Envelope[RedirectUrl])
async def post_checkout(
    payload: CheckoutRequest,
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
    gateway: StripeGateway = Depends(get_billing_gateway),
) -> Envelope[RedirectUrl]:
    url = await billing_service.create_checkout(db, gateway, identity, payload.plan)
    return Envelope(data=RedirectUrl(url=url))


@router.get("/finalize", response_model=Envelope[FinalizeResult])
async def get_finalize(
    session_id: str = Query(..., min_length=1, alias="session_id"),
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
    gateway: StripeGateway = Depends(get_billing_gateway),
) -> Envelope[FinalizeResult]:
    """결제 완료 후 리다이렉트에서 호출. 같은 세션으로 여러 번 호출해도 결과는 같다."""
    result = await billing_service.finalize_checkout(db, gateway, session_id, identity.uid)
    return Envelope(data=result)


@router.post("/portal", response_model=Envelope[RedirectUrl])
async def post_portal(
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
    gateway: StripeGateway = Depends(get_billing_gateway),
) -> Envelope[RedirectUrl]:
    url = await billing_service.create_portal(db, gateway, identity)
    return Envelope(data=RedirectUrl(url=url))


@router.get("/invoices", response_model=Envelope[list[InvoiceOut]])
async def get_invoices(
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
    gateway: StripeGateway = Depends(get_billing_gateway),
) -> Envelope[list[InvoiceOut]]:
    return Envelope(data=await billing_service.list_invoices(db, gateway, identity))
