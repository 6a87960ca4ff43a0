"""관리자 대시보드 스키마."""

from datetime import datetime

from app.schemas.common import ApiModel


class AdminStats(ApiModel):
    users: int
    digital_cards: int
    portfolios: int
    challenges: int
    submissions: int


class AdminUserRow(ApiModel):
    id: int
    email: str | None = None
    username: str | None = None
    display_name: str
    role: str
    plan: str | None = None
    created_at: datetime


class AdminChallengeRow(ApiModel):
    id: int
    user_id: int
    slug: str
    title: str
    status: str
    publish_status: str
    submission_count: int = 0
    created_at: datetime


class AdminCardRow(ApiModel):
    id: int
    user_id: int
    slug: str
    first_name: str
    last_name: str
    publish_status: str
    created_at: datetime


class AdminPortfolioRow(ApiModel):
    id: int
    user_id: int
    slug: str
    title: str
    publish_status: str
    created_at: datetime
