"""디지털 명함 스키마."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.models.enums import CardStatus, SocialPlatform
from app.schemas.common import ApiModel, PatchModel, RequestModel

CardPublishStatus = Literal["DRAFT", "PUBLISHED"]
# 명함 slug는 사용자가 직접 고른다. 소문자·숫자·하이픈만.
CARD_SLUG_PATTERN = r"^[a-z0-9-]+$"


class SocialAccountIn(RequestModel):
    platform: SocialPlatform
    handle: str | None = Field(None, max_length=120)
    url: str | None = Field(None, max_length=2048)
    label: str | None = Field(None, max_length=120)
    is_public: bool = True
    sort_order: int = Field(0, ge=0)


class SocialAccountOut(ApiModel):
    id: int
    platform: str
    handle: str | None = None
    url: str | None = None
    label: str | None = None
    is_public: bool
    sort_order: int


class NameCardCreate(RequestModel):
    """slug 생략 시 이름(first-last)에서 자동 배정, 명시한 slug가 이미 있으면 409."""

    slug: str | None = Field(None, min_length=1, max_length=60, pattern=CARD_SLUG_PATTERN)
    first_name: str = Field(..., min_length=1, max_length=80)
    last_name: str = Field(..., min_length=1, max_length=80)
    app_name: str = Field(..., min_length=1, max_length=50)
    status: CardStatus
    role: str = Field(..., min_length=1, max_length=80)
    short_bio: str = Field("", max_length=200)

    company: str | None = Field(None, max_length=160)
    university: str | None = Field(None, max_length=160)
    country: str | None = Field(None, max_length=64)
    religion: str | None = Field(None, max_length=64)
    phone: str | None = Field(None, max_length=64)

    avatar_key: str | None = Field(None, max_length=512)
    banner_key: str | None = Field(None, max_length=512)

    show_phone: bool = False
    show_religion: bool = False
    show_company: bool = True
    show_university: bool = True
    show_country: bool = True

    publish_status: CardPublishStatus = "DRAFT"
    social_accounts: list[SocialAccountIn] = Field(default_factory=list, max_length=20)


class NameCardUpdate(PatchModel):
    non_nullable = frozenset(
        {
            "slug",
            "first_name",
            "last_name",
            "app_name",
            "status",
            "role",
            "short_bio",
            "show_phone",
            "show_religion",
            "show_company",
            "show_university",
            "show_country",
            "publish_status",
            "social_accounts",
        }
    )

    slug: str | None = Field(None, min_length=1, max_length=60, pattern=CARD_SLUG_PATTERN)
    first_name: str | None = Field(None, min_length=1, max_length=80)
    last_name: str | None = Field(None, min_length=1, max_length=80)
    app_name: str | None = Field(None, min_length=1, max_length=50)
    status: CardStatus | None = None
    role: str | None = Field(None, min_length=1, max_length=80)
    short_bio: str | None = Field(None, max_length=200)

    company: str | None = Field(None, max_length=160)
    university: str | None = Field(None, max_length=160)
    country: str | None = Field(None, max_length=64)
    religion: str | None = Field(None, max_length=64)
    phone: str | None = Field(None, max_length=64)

    avatar_key: str | None = Field(None, max_length=512)
    banner_key: str | None = Field(None, max_length=512)

    show_phone: bool | None = None
    show_religion: bool | None = None
    show_company: bool | None = None
    show_university: bool | None = None
    show_country: bool | None = None

    publish_status: CardPublishStatus | None = None
    social_accounts: list[SocialAccountIn] | None = Field(None, max_length=20)


class NameCardOut(ApiModel):
    """명함 응답. 비소유자 조회 시 show_* 가 꺼진 값은 null로 가려진다(플래그 자체는 항상 노출)."""

    id: int
    user_id: int
    slug: str
    first_name: str
    last_name: str
    app_name: str
    status: str
    role: str
    short_bio: str

    company: str | None = None
    university: str | None = None
    country: str | None = None
    religion: str | None = None
    phone: str | None = None

    avatar_key: str | None = None
    banner_key: str | None = None

    show_phone: bool
    show_religion: bool
    show_company: bool
    show_university: bool
    show_country: bool

    publish_status: str
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    social_accounts: list[SocialAccountOut] = Field(default_factory=list)
    is_owner: bool = False
