"""User 모델. Clerk 계정 1:1, 비밀번호 없음."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.subscription import Subscription

from sqlalchemy import Boolean, Date, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, utcnow
from app.models.enums import Role


class User(Base):
    """
    유저. Clerk 소유 필드(email, display_name, avatar_url)는 로그인마다 갱신.
    username은 프로필 수정 경로에서만 기록(로그인 시 절대 쓰지 않음).
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    clerk_id: Mapped[str] = mapped_column(String(191), unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(30), unique=True, nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    display_name: Mapped[str] = mapped_column(String(191), nullable=False, default="User")
    avatar_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    avatar_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    banner_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=Role.USER)

    # 민감 정보(opt-in). 로그인 시에는 비어 있을 때만 채움(fill-once).
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    religion: Mapped[str | None] = mapped_column(String(64), nullable=True)
    country: Mapped[str | None] = mapped_column(String(64), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    # 공개 프로필 노출 여부
    show_email: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_phone: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_religion: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_country: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_date_of_birth: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # 결제
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    plan: Mapped[str | None] = mapped_column(String(16), nullable=True)  # basic | pro | ultimate
    subscription_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    current_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    subscriptions: Mapped[list["Subscription"]] = relationship(
        "Subscription", back_populates="user", passive_deletes=True
    )
