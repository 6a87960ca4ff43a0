"""포트폴리오 모델. 하위 컬렉션(이미지, 영상 링크, 프로젝트, 경력, 학력)은 수정 시 통째로 교체."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, OwnedPublishableMixin


class Portfolio(OwnedPublishableMixin, Base):
    __tablename__ = "portfolios"

    title: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_image_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    # 자기소개 섹션: {"firstName": ..., "role": ..., "company": ...}
    about: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    sub_images: Mapped[list["PortfolioImage"]] = relationship(
        "PortfolioImage",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PortfolioImage.sort_order",
    )
    video_links: Mapped[list["PortfolioVideoLink"]] = relationship(
        "PortfolioVideoLink",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PortfolioVideoLink.id",
    )
    projects: Mapped[list["PortfolioProject"]] = relationship(
        "PortfolioProject",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PortfolioProject.sort_order",
    )
    experiences: Mapped[list["PortfolioExperience"]] = relationship(
        "PortfolioExperience",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PortfolioExperience.sort_order",
    )
    educations: Mapped[list["PortfolioEducation"]] = relationship(
        "PortfolioEducation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PortfolioEducation.sort_order",
    )


class PortfolioImage(Base):
    __tablename__ = "portfolio_images"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    portfolio_id: Mapped[int] = mapped_column(
        ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class PortfolioVideoLink(Base):
    __tablename__ = "portfolio_video_links"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    portfolio_id: Mapped[int] = mapped_column(
        ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform: Mapped[str] = mapped_column(String(16), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    description: Mapped[str | None] = mapped_column(String(300), nullable=True)


class PortfolioProject(Base):
    """포트폴리오 안의 개별 프로젝트. 자체 이미지·영상 링크를 가진다."""

    __tablename__ = "portfolio_projects"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    portfolio_id: Mapped[int] = mapped_column(
        ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_image_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    sub_images: Mapped[list["ProjectImage"]] = relationship(
        "ProjectImage",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectImage.sort_order",
    )
    video_links: Mapped[list["ProjectVideoLink"]] = relationship(
        "ProjectVideoLink",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProjectVideoLink.id",
    )


class ProjectImage(Base):
    __tablename__ = "project_images"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("portfolio_projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    key: Mapped[str] = mapped_column(String(512), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ProjectVideoLink(Base):
    __tablename__ = "project_video_links"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("portfolio_projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    platform: Mapped[str] = mapped_column(String(16), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    description: Mapped[str | None] = mapped_column(String(300), nullable=True)


class PortfolioExperience(Base):
    __tablename__ = "portfolio_experiences"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    portfolio_id: Mapped[int] = mapped_column(
        ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company: Mapped[str] = mapped_column(String(160), nullable=False)
    role: Mapped[str] = mapped_column(String(120), nullable=False)
    location: Mapped[str | None] = mapped_column(String(160), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class PortfolioEducation(Base):
    __tablename__ = "portfolio_educations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    portfolio_id: Mapped[int] = mapped_column(
        ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    school: Mapped[str] = mapped_column(String(160), nullable=False)
    degree: Mapped[str | None] = mapped_column(String(120), nullable=True)
    field: Mapped[str | None] = mapped_column(String(120), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
