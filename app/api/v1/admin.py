"""Admin API. 모든 경로가 DB 기준 ADMIN 역할 필요."""

from fastapi import APIRouter, Depends, Query

from app.api.deps import require_admin
from app.core.database import Database
from app.core.deps import get_database
from app.schemas.admin import (
    AdminCardRow,
    AdminChallengeRow,
    AdminPortfolioRow,
    AdminStats,
    AdminUserRow,
)
from app.schemas.common import Envelope, Page
from app.services import admin_service

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=Envelope[AdminStats])
async def get_stats(db: Database = Depends(get_database)) -> Envelope[AdminStats]:
    return Envelope(data=await admin_service.get_stats(db))


@router.get("/users", response_model=Envelope[Page[AdminUserRow]])
async def list_users(
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None),
    db: Database = Depends(get_database),
) -> Envelope[Page[AdminUserRow]]:
    return Envelope(data=await admin_service.list_users(db, cursor=cursor, limit=limit))


@router.get("/challenges", response_model=Envelope[Page[AdminChallengeRow]])
async def list_challenges(
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None),
    db: Database = Depends(get_database),
) -> Envelope[Page[AdminChallengeRow]]:
    return Envelope(data=await admin_service.list_challenges(db, cursor=cursor, limit=limit))


@router.get("/cards", response_model=Envelope[Page[AdminCardRow]])
async def list_cards(
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None),
    db: Database = Depends(get_database),
) -> Envelope[Page[AdminCardRow]]:
    return Envelope(data=await admin_service.list_cards(db, cursor=cursor, limit=limit))


@router.get("/portfolios", response_model=Envelope[Page[AdminPortfolioRow]])
async def list_portfolios(
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None),
    db: Database = Depends(get_database),
) -> Envelope[Page[AdminPortfolioRow]]:
    return Envelope(data=await admin_service.list_portfolios(db, cursor=cursor, limit=limit))
