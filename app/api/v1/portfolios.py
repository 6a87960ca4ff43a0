"""Portfolio API."""

from fastapi import APIRouter, Depends

from app.api.deps import require_session
from app.api.v1.resources import register_resource_routes
from app.core.database import Database
from app.core.deps import get_database
from app.core.session import SessionClaims
from app.schemas.common import Envelope
from app.schemas.portfolio import AboutOut, PortfolioCreate, PortfolioOut, PortfolioUpdate
from app.services.portfolio_service import portfolio_service

router = APIRouter(prefix="/portfolios", tags=["portfolios"])


@router.get("/prefill-from-card/{card_id}", response_model=Envelope[AboutOut])
async def get_prefill_from_card(
    card_id: int,
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[AboutOut]:
    """본인 명함으로 about 섹션 초안 생성(저장하지 않음)."""
    about = await portfolio_service.prefill_from_card(db, identity.uid, card_id)
    return Envelope(data=about)


register_resource_routes(
    router,
    portfolio_service,
    create_schema=PortfolioCreate,
    update_schema=PortfolioUpdate,
    out_schema=PortfolioOut,
    label="Portfolio",
)
