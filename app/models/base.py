"""SQLAlchemy Declarative Base 및 소유·게시 리소스 공통 컬럼."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

from app.models.enums import PublishStatus


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """공통 베이스 클래스."""

    pass


class OwnedPublishableMixin:
    """명함·포트폴리오·챌린지 공통. slug는 리소스 타입 전체에서 유일."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    publish_status: Mapped[str] = mapped_column(
        String(16), default=PublishStatus.DRAFT, nullable=False, index=True
    )
    # PUBLISHED 진입 시 1회 기록, PUBLISHED 이탈 시에만 해제.
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    @declared_attr
    def user_id(cls) -> Mapped[int]:
        return mapped_column(
            ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
        )
