"""Challenge Service. 이미지(최대 6)·상금(최대 10) 교체는 owned_resource 공통 규칙을 따른다."""

from typing import Any

from sqlalchemy.orm import selectinload

from app.models.challenge import Challenge, ChallengeImage, ChallengePrize
from app.schemas.challenge import ChallengeOut
from app.services.owned_resource import OwnedResourceService


class ChallengeService(OwnedResourceService):
    model = Challenge
    out_schema = ChallengeOut
    slug_fallback = "challenge"
    not_found_message = "Challenge not found"
    child_fields = ("images", "prizes")

    def load_options(self) -> list[Any]:
        return [selectinload(Challenge.images), selectinload(Challenge.prizes)]

    def search_columns(self) -> list[Any]:
        return [Challenge.title, Challenge.brand_name]

    def build_children(self, field: str, items: list[dict[str, Any]]) -> list[Any]:
        if field == "images":
            return [ChallengeImage(**item) for item in items]
        if field == "prizes":
            return [ChallengePrize(**item) for item in sorted(items, key=lambda p: p["rank"])]
        raise ValueError(f"Unknown child collection: {field}")


challenge_service = ChallengeService()
