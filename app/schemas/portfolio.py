"""포트폴리오 스키마. 하위 컬렉션은 요청에 포함되면 통째로 교체된다."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.models.enums import SocialPlatform
from app.schemas.common import ApiModel, FlexibleDatetime, PatchModel, RequestModel

PortfolioPublishStatus = Literal["DRAFT", "PRIVATE", "PUBLISHED"]
HTTP_URL_PATTERN = r"^https?://\S+$"


class SubImageIn(RequestModel):
    key: str = Field(..., min_length=1, max_length=512)
    url: str = Field(..., max_length=2048, pattern=HTTP_URL_PATTERN)
    sort_order: int = Field(0, ge=0)


class VideoLinkIn(RequestModel):
    platform: SocialPlatform
    url: str = Field(..., max_length=2048, pattern=HTTP_URL_PATTERN)
    description: str | None = Field(None, max_length=300)


class ProjectIn(RequestModel):
    title: str = Field(..., min_length=1, max_length=160)
    description: str | None = Field(None, max_length=4000)
    main_image_key: str | None = Field(None, max_length=512)
    tags: list[str] = Field(default_factory=list)
    sub_images: list[SubImageIn] = Field(default_factory=list)
    video_links: list[VideoLinkIn] = Field(default_factory=list)


class AboutSection(RequestModel):
    """자기소개 섹션. 명함에서 미리 채울 수 있다(prefill-from-card)."""

    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None
    short_bio: str | None = None
    company: str | None = None
    university: str | None = None
    country: str | None = None
    avatar_key: str | None = None
    banner_key: str | None = None


class ExperienceIn(RequestModel):
    company: str = Field(..., min_length=1, max_length=160)
    role: str = Field(..., min_length=1, max_length=120)
    location: str | None = Field(None, max_length=160)
    start_date: FlexibleDatetime | None = None
    end_date: FlexibleDatetime | None = None
    current: bool = False
    summary: str | None = None


class EducationIn(RequestModel):
    school: str = Field(..., min_length=1, max_length=160)
    degree: str | None = Field(None, max_length=120)
    field: str | None = Field(None, max_length=120)
    start_date: FlexibleDatetime | None = None
    end_date: FlexibleDatetime | None = None
    summary: str | None = None


class PortfolioCreate(RequestModel):
    slug: str | None = Field(None, min_length=1, max_length=120)
    title: str = Field(..., min_length=1, max_length=120)
    description: str | None = Field(None, max_length=2000)
    main_image_key: str | None = Field(None, max_length=512)
    tags: list[str] = Field(default_factory=list)
    sub_images: list[SubImageIn] = Field(default_factory=list)
    video_links: list[VideoLinkIn] = Field(default_factory=list)
    projects: list[ProjectIn] = Field(default_factory=list)
    publish_status: PortfolioPublishStatus = "DRAFT"

    about: AboutSection | None = None
    experiences: list[ExperienceIn] = Field(default_factory=list)
    educations: list[EducationIn] = Field(default_factory=list)

    # about이 없을 때 본인 명함에서 about 섹션을 채운다.
    prefill_from_card_id: int | None = None


class PortfolioUpdate(PatchModel):
    non_nullable = frozenset(
        {
            "slug",
            "title",
            "tags",
            "sub_images",
            "video_links",
            "projects",
            "publish_status",
            "experiences",
            "educations",
        }
    )

    slug: str | None = Field(None, min_length=1, max_length=120)
    title: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = Field(None, max_length=2000)
    main_image_key: str | None = Field(None, max_length=512)
    tags: list[str] | None = None
    sub_images: list[SubImageIn] | None = None
    video_links: list[VideoLinkIn] | None = None
    projects: list[ProjectIn] | None = None
    publish_status: PortfolioPublishStatus | None = None

    about: AboutSection | None = None
    experiences: list[ExperienceIn] | None = None
    educations: list[EducationIn] | None = None


class SubImageOut(ApiModel):
    id: int
    key: str
    url: str
    sort_order: int


class VideoLinkOut(ApiModel):
    id: int
    platform: str
    url: str
    description: str | None = None


class ProjectOut(ApiModel):
    id: int
    title: str
    description: str | None = None
    main_image_key: str | None = None
    tags: list[str] = Field(default_factory=list)
    sort_order: int
    sub_images: list[SubImageOut] = Field(default_factory=list)
    video_links: list[VideoLinkOut] = Field(default_factory=list)


class AboutOut(ApiModel):
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None
    short_bio: str | None = None
    company: str | None = None
    university: str | None = None
    country: str | None = None
    avatar_key: str | None = None
    banner_key: str | None = None


class ExperienceOut(ApiModel):
    id: int
    company: str
    role: str
    location: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    current: bool
    summary: str | None = None
    sort_order: int


class EducationOut(ApiModel):
    id: int
    school: str
    degree: str | None = None
    field: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    summary: str | None = None
    sort_order: int


class PortfolioOut(ApiModel):
    id: int
    user_id: int
    slug: str
    title: str
    description: str | None = None
    main_image_key: str | None = None
    tags: list[str] = Field(default_factory=list)
    about: AboutOut | None = None

    publish_status: str
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    sub_images: list[SubImageOut] = Field(default_factory=list)
    video_links: list[VideoLinkOut] = Field(default_factory=list)
    projects: list[ProjectOut] = Field(default_factory=list)
    experiences: list[ExperienceOut] = Field(default_factory=list)
    educations: list[EducationOut] = Field(default_factory=list)
    is_owner: bool = False
