"""Portfolio Service. 프로젝트(중첩 이미지·영상)·경력·학력까지 한 트랜잭션으로 교체."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import Database
from app.core.errors import NotFound
from app.models.name_card import DigitalNameCard
from app.models.portfolio import (
    Portfolio,
    PortfolioEducation,
    PortfolioExperience,
    PortfolioImage,
    PortfolioProject,
    PortfolioVideoLink,
    ProjectImage,
    ProjectVideoLink,
)
from app.repositories import resource_repository
from app.schemas.portfolio import AboutOut, PortfolioOut
from app.services.owned_resource import OwnedResourceService

ABOUT_FIELDS = (
    "first_name",
    "last_name",
    "role",
    "short_bio",
    "company",
    "university",
    "country",
    "avatar_key",
    "banner_key",
)


def about_from_card(card: DigitalNameCard) -> dict[str, Any]:
    """명함에서 about 섹션 추출. 빈 값은 제외."""
    about: dict[str, Any] = {}
    for field in ABOUT_FIELDS:
        value = getattr(card, field, None)
        if value:
            about[field] = value
    return about


class PortfolioService(OwnedResourceService):
    model = Portfolio
    out_schema = PortfolioOut
    slug_fallback = "portfolio"
    not_found_message = "Portfolio not found"
    child_fields = ("sub_images", "video_links", "projects", "experiences", "educations")

    def load_options(self) -> list[Any]:
        return [
            selectinload(Portfolio.sub_images),
            selectinload(Portfolio.video_links),
            selectinload(Portfolio.projects).selectinload(PortfolioProject.sub_images),
            selectinload(Portfolio.projects).selectinload(PortfolioProject.video_links),
            selectinload(Portfolio.experiences),
            selectinload(Portfolio.educations),
        ]

    def build_children(self, field: str, items: list[dict[str, Any]]) -> list[Any]:
        if field == "sub_images":
            return [PortfolioImage(**item) for item in items]
        if field == "video_links":
            return [PortfolioVideoLink(**item) for item in items]
        if field == "projects":
            return [self._build_project(index, item) for index, item in enumerate(items)]
        if field == "experiences":
            return [PortfolioExperience(**item, sort_order=i) for i, item in enumerate(items)]
        if field == "educations":
            return [PortfolioEducation(**item, sort_order=i) for i, item in enumerate(items)]
        raise ValueError(f"Unknown child collection: {field}")

    @staticmethod
    def _build_project(index: int, item: dict[str, Any]) -> PortfolioProject:
        item = dict(item)
        sub_images = item.pop("sub_images", None) or []
        video_links = item.pop("video_links", None) or []
        return PortfolioProject(
            **item,
            sort_order=index,
            sub_images=[ProjectImage(**img) for img in sub_images],
            video_links=[ProjectVideoLink(**link) for link in video_links],
        )

    async def prepare(
        self, session: AsyncSession, user_id: int, data: dict[str, Any]
    ) -> dict[str, Any]:
        card_id = data.pop("prefill_from_card_id", None)
        if "about" in data and data["about"] is not None:
            data["about"] = {k: v for k, v in data["about"].items() if v is not None} or None
        elif card_id is not None and data.get("about") is None:
            card = await resource_repository.get_owned(session, DigitalNameCard, card_id, user_id)
            if card is None:
                raise NotFound("Card not found")
            data["about"] = about_from_card(card) or None
        return data

    async def prefill_from_card(self, db: Database, user_id: int, card_id: int) -> AboutOut:
        """본인 명함에서 포트폴리오 about 섹션 초안을 만든다. 저장하지 않음."""
        async with db.session() as session:
            card = await resource_repository.get_owned(session, DigitalNameCard, card_id, user_id)
        if card is None:
            raise NotFound("Card not found")
        return AboutOut.model_validate(about_from_card(card))


portfolio_service = PortfolioService()
