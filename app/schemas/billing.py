"""결제 스키마."""

from datetime import datetime
from typing import Literal

from app.schemas.common import ApiModel, RequestModel

PaidPlan = Literal["basic", "pro", "ultimate"]


class CheckoutRequest(RequestModel):
    plan: PaidPlan


class RedirectUrl(ApiModel):
    url: str


class FinalizeResult(ApiModel):
    """구독이 없는 세션(취소 등)은 finalized=False로 끝난다."""

    finalized: bool
    plan: str | None = None
    subscription_status: str | None = None
    current_period_end: datetime | None = None
    subscription_id: str | None = None


class InvoiceOut(ApiModel):
    id: str
    number: str | None = None
    status: str | None = None
    currency: str | None = None
    total: int = 0
    created: datetime | None = None
    hosted_invoice_url: str | None = None
    invoice_pdf: str | None = None
