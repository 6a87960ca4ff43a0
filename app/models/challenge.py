"""챌린지·제출 모델."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.models.user import User

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, OwnedPublishableMixin, utcnow
from app.models.enums import ChallengeStatus, SubmissionStatus


class Challenge(OwnedPublishableMixin, Base):
    """
    브랜드 챌린지. 제출 순번은 next_submission_order를 원자적으로 증가시켜 배정한다.
    행 개수로 세지 않으므로 철회된 순번은 재사용되지 않는다.
    """

    __tablename__ = "challenges"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    brand_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    brand_logo_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    posting_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    target_platforms: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    goal_views: Mapped[int | None] = mapped_column(Integer, nullable=True)
    goal_likes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ChallengeStatus.OPEN, index=True
    )
    next_submission_order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    images: Mapped[list["ChallengeImage"]] = relationship(
        "ChallengeImage",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChallengeImage.sort_order",
    )
    prizes: Mapped[list["ChallengePrize"]] = relationship(
        "ChallengePrize",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChallengePrize.rank",
    )
    submissions: Mapped[list["ChallengeSubmission"]] = relationship(
        "ChallengeSubmission",
        back_populates="challenge",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ChallengeImage(Base):
    __tablename__ = "challenge_images"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ChallengePrize(Base):
    __tablename__ = "challenge_prizes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[str | None] = mapped_column(String(120), nullable=True)
    amount_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)


class ChallengeSubmission(Base):
    """
    챌린지 참가 제출. 유저당 챌린지 1건, 순번 중복 불가(둘 다 DB 제약으로 보장).
    submitter_* 는 제출 시점 스냅샷이며 이후 프로필 변경을 따라가지 않는다.
    """

    __tablename__ = "challenge_submissions"
    __table_args__ = (
        UniqueConstraint("challenge_id", "submitter_id", name="uq_submission_challenge_submitter"),
        UniqueConstraint("challenge_id", "submission_order", name="uq_submission_challenge_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    submitter_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform: Mapped[str] = mapped_column(String(32), nullable=False)
    link_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    image_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    submission_order: Mapped[int] = mapped_column(Integer, nullable=False)

    submitter_name: Mapped[str | None] = mapped_column(String(191), nullable=True)
    submitter_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # [{"platform": "TIKTOK", "handle": "@x", "url": "...", "label": null}]
    submitter_socials: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False, default=list)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SubmissionStatus.PENDING
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    challenge: Mapped["Challenge"] = relationship("Challenge", back_populates="submissions")
    submitter: Mapped["User"] = relationship("User")
