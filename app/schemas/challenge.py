"""챌린지·제출 스키마."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, field_validator

from app.models.enums import ChallengeStatus, SubmissionStatus
from app.schemas.common import ApiModel, FlexibleDatetime, PatchModel, RequestModel
from app.schemas.portfolio import HTTP_URL_PATTERN

ChallengePublishStatus = Literal["DRAFT", "PRIVATE", "PUBLISHED"]

MAX_CHALLENGE_IMAGES = 6
MAX_CHALLENGE_PRIZES = 10


class ChallengeImageIn(RequestModel):
    key: str = Field(..., min_length=1, max_length=512)
    url: str = Field(..., max_length=2048, pattern=HTTP_URL_PATTERN)
    sort_order: int = Field(0, ge=0, le=999)


class PrizeIn(RequestModel):
    rank: int = Field(..., ge=1)
    label: str | None = Field(None, min_length=1, max_length=120)
    amount_cents: int | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=500)


class ChallengeCreate(RequestModel):
    slug: str | None = Field(None, min_length=1, max_length=120)
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    brand_name: str | None = Field(None, max_length=200)
    brand_logo_key: str | None = Field(None, max_length=255)
    posting_url: str | None = Field(None, max_length=2048, pattern=HTTP_URL_PATTERN)
    target_platforms: list[str] = Field(default_factory=list, max_length=10)
    goal_views: int | None = Field(None, ge=0)
    goal_likes: int | None = Field(None, ge=0)
    deadline: FlexibleDatetime | None = None

    publish_status: ChallengePublishStatus = "DRAFT"
    status: ChallengeStatus = ChallengeStatus.OPEN

    images: list[ChallengeImageIn] = Field(default_factory=list, max_length=MAX_CHALLENGE_IMAGES)
    prizes: list[PrizeIn] = Field(default_factory=list, max_length=MAX_CHALLENGE_PRIZES)

    @field_validator("title", "slug")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ChallengeUpdate(PatchModel):
    non_nullable = frozenset({"slug", "title", "publish_status", "status", "images", "prizes"})

    slug: str | None = Field(None, min_length=1, max_length=120)
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    brand_name: str | None = Field(None, max_length=200)
    brand_logo_key: str | None = Field(None, max_length=255)
    posting_url: str | None = Field(None, max_length=2048, pattern=HTTP_URL_PATTERN)
    target_platforms: list[str] | None = Field(None, max_length=10)
    goal_views: int | None = Field(None, ge=0)
    goal_likes: int | None = Field(None, ge=0)
    deadline: FlexibleDatetime | None = None

    publish_status: ChallengePublishStatus | None = None
    status: ChallengeStatus | None = None

    images: list[ChallengeImageIn] | None = Field(None, max_length=MAX_CHALLENGE_IMAGES)
    prizes: list[PrizeIn] | None = Field(None, max_length=MAX_CHALLENGE_PRIZES)

    @field_validator("title", "slug")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("target_platforms")
    @classmethod
    def _null_platforms_to_empty(cls, value: list[str] | None) -> list[str]:
        # 컬럼이 NOT NULL이므로 명시적 null은 빈 목록으로 비운다.
        return value or []


class ChallengeImageOut(ApiModel):
    id: int
    key: str
    url: str
    sort_order: int


class PrizeOut(ApiModel):
    id: int
    rank: int
    label: str | None = None
    amount_cents: int | None = None
    notes: str | None = None


class ChallengeOut(ApiModel):
    id: int
    user_id: int
    slug: str
    title: str
    description: str | None = None
    brand_name: str | None = None
    brand_logo_key: str | None = None
    posting_url: str | None = None
    target_platforms: list[str] = Field(default_factory=list)
    goal_views: int | None = None
    goal_likes: int | None = None
    deadline: datetime | None = None
    status: str

    publish_status: str
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    images: list[ChallengeImageOut] = Field(default_factory=list)
    prizes: list[PrizeOut] = Field(default_factory=list)
    is_owner: bool = False


class SubmissionCreate(RequestModel):
    platform: str = Field(..., min_length=1, max_length=32)
    link_url: str | None = Field(None, max_length=2048, pattern=HTTP_URL_PATTERN)
    image_key: str | None = Field(None, min_length=1, max_length=512)
    notes: str | None = Field(None, max_length=1000)


class SubmissionStatusUpdate(RequestModel):
    status: SubmissionStatus


class SocialSnapshot(ApiModel):
    platform: str
    handle: str | None = None
    url: str | None = None
    label: str | None = None


class SubmissionOut(ApiModel):
    """제출 응답. submitter_phone은 챌린지 소유자와 제출자 본인에게만 노출."""

    id: int
    challenge_id: int
    submitter_id: int
    platform: str
    link_url: str | None = None
    image_key: str | None = None
    notes: str | None = None
    submission_order: int
    submitter_name: str | None = None
    submitter_phone: str | None = None
    submitter_socials: list[SocialSnapshot] = Field(default_factory=list)
    status: str
    created_at: datetime
    updated_at: datetime

    @field_validator("submitter_socials", mode="before")
    @classmethod
    def _socials_default(cls, value: Any) -> Any:
        return value or []


class ChallengeBrief(ApiModel):
    id: int
    slug: str
    title: str
    brand_name: str | None = None
    status: str
    publish_status: str
    deadline: datetime | None = None
    cover_image_url: str | None = None


class MySubmissionOut(SubmissionOut):
    challenge: ChallengeBrief
