"""디지털 명함 모델. 게시 상태는 DRAFT/PUBLISHED 두 가지만 사용."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, OwnedPublishableMixin
from app.models.enums import CardStatus


class DigitalNameCard(OwnedPublishableMixin, Base):
    """명함. 민감 필드는 (값, show_값) 쌍으로 저장하고 공개 조회 시 플래그로 가린다."""

    __tablename__ = "digital_name_cards"

    first_name: Mapped[str] = mapped_column(String(80), nullable=False)
    last_name: Mapped[str] = mapped_column(String(80), nullable=False)
    app_name: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=CardStatus.STUDENT)
    role: Mapped[str] = mapped_column(String(80), nullable=False)
    short_bio: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    company: Mapped[str | None] = mapped_column(String(160), nullable=True)
    university: Mapped[str | None] = mapped_column(String(160), nullable=True)
    country: Mapped[str | None] = mapped_column(String(64), nullable=True)
    religion: Mapped[str | None] = mapped_column(String(64), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    avatar_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    banner_key: Mapped[str | None] = mapped_column(String(512), nullable=True)

    show_phone: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_religion: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_company: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_university: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_country: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    social_accounts: Mapped[list["SocialAccount"]] = relationship(
        "SocialAccount",
        back_populates="card",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SocialAccount.sort_order",
    )


class SocialAccount(Base):
    """명함에 달린 SNS 링크. is_public인 항목만 챌린지 제출 스냅샷에 복사된다."""

    __tablename__ = "social_accounts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    card_id: Mapped[int] = mapped_column(
        ForeignKey("digital_name_cards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform: Mapped[str] = mapped_column(String(16), nullable=False)
    handle: Mapped[str | None] = mapped_column(String(120), nullable=True)
    url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    label: Mapped[str | None] = mapped_column(String(120), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    card: Mapped["DigitalNameCard"] = relationship("DigitalNameCard", back_populates="social_accounts")
