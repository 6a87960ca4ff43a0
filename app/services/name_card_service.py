"""Name Card Service. 디지털 명함. slug는 사용자가 고르며 중복이면 409."""

from typing import Any

from sqlalchemy import case
from sqlalchemy.orm import selectinload

from app.models.enums import PublishStatus
from app.models.name_card import DigitalNameCard, SocialAccount
from app.schemas.name_card import NameCardOut
from app.services.owned_resource import OwnedResourceService


class NameCardService(OwnedResourceService):
    model = DigitalNameCard
    out_schema = NameCardOut
    slug_fallback = "card"
    not_found_message = "Card not found"
    allowed_statuses = frozenset({PublishStatus.DRAFT, PublishStatus.PUBLISHED})
    visibility_fields = ("phone", "religion", "company", "university", "country")
    child_fields = ("social_accounts",)
    explicit_slug_conflicts = True

    def load_options(self) -> list[Any]:
        return [selectinload(DigitalNameCard.social_accounts)]

    def list_order(self) -> list[Any]:
        # 게시된 명함 먼저, 그 안에서는 최근 수정순
        published_first = case(
            (DigitalNameCard.publish_status == PublishStatus.PUBLISHED, 0), else_=1
        )
        return [published_first, DigitalNameCard.updated_at.desc(), DigitalNameCard.id.desc()]

    def search_columns(self) -> list[Any]:
        return [DigitalNameCard.first_name, DigitalNameCard.last_name, DigitalNameCard.app_name]

    def slug_candidate(self, data: dict[str, Any]) -> str | None:
        first = data.get("first_name") or ""
        last = data.get("last_name") or ""
        return f"{first} {last}".strip() or None

    def build_children(self, field: str, items: list[dict[str, Any]]) -> list[Any]:
        return [SocialAccount(**item) for item in items]

    def public_view(self, out: NameCardOut) -> NameCardOut:
        return out.model_copy(
            update={"social_accounts": [s for s in out.social_accounts if s.is_public]}
        )


name_card_service = NameCardService()
