"""프로필 스키마. username은 이 경로에서만 기록된다."""

from datetime import date, datetime
from typing import Any

from pydantic import Field, model_validator

from app.schemas.common import ApiModel, PatchModel

USERNAME_PATTERN = r"^[A-Za-z0-9_-]{3,30}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
# 빈 문자열 대신 null을 보내야 지워지는 필드
_CLEARABLE_KEYS = frozenset({"avatar_key", "banner_key", "avatarKey", "bannerKey"})


class ProfileUpdate(PatchModel):
    """
    빈 문자열은 '미변경'으로 취급한다(폼 입력 그대로 보내는 클라이언트 대응).
    avatar_key/banner_key만 null로 비울 수 있다.
    """

    non_nullable = frozenset(
        {
            "username",
            "display_name",
            "email",
            "show_email",
            "show_phone",
            "show_religion",
            "show_country",
            "show_date_of_birth",
        }
    )

    username: str | None = Field(None, pattern=USERNAME_PATTERN)
    display_name: str | None = Field(None, min_length=1, max_length=191)
    email: str | None = Field(None, max_length=320, pattern=EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=64)
    country: str | None = Field(None, max_length=64)
    religion: str | None = Field(None, max_length=64)
    date_of_birth: date | None = None

    avatar_key: str | None = Field(None, min_length=1, max_length=512)
    banner_key: str | None = Field(None, min_length=1, max_length=512)

    show_email: bool | None = None
    show_phone: bool | None = None
    show_religion: bool | None = None
    show_country: bool | None = None
    show_date_of_birth: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_strings(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if not value and key not in _CLEARABLE_KEYS:
                    continue
            cleaned[key] = value
        return cleaned


class ProfileOut(ApiModel):
    """프로필 응답. 비소유자에게는 show_* 가 꺼진 값이 null."""

    id: int
    username: str | None = None
    display_name: str
    avatar_url: str | None = None
    avatar_key: str | None = None
    banner_key: str | None = None

    email: str | None = None
    phone: str | None = None
    religion: str | None = None
    country: str | None = None
    date_of_birth: date | None = None

    show_email: bool
    show_phone: bool
    show_religion: bool
    show_country: bool
    show_date_of_birth: bool

    created_at: datetime
    is_owner: bool = False
