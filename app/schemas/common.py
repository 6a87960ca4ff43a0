"""공통 Pydantic 베이스·응답 봉투·페이지네이션."""

import re
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Annotated, Any, ClassVar, Generic, Literal, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ApiModel(BaseModel):
    """응답 모델. JSON 키는 camelCase, ORM 객체에서 바로 검증."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(BaseModel):
    """요청 모델. camelCase·snake_case 모두 허용, 알 수 없는 필드 거부."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


def reject_explicit_nulls(data: Any, fields: Iterable[str]) -> Any:
    """필수 컬럼에 명시적 null이 들어오면 ValueError. 키 누락(미변경)은 허용."""
    if not isinstance(data, dict):
        return data
    for name in fields:
        for key in (name, to_camel(name)):
            if key in data and data[key] is None:
                raise ValueError(f"{key} cannot be null")
    return data


class PatchModel(RequestModel):
    """
    부분 수정 요청. model_dump(exclude_unset=True)로 '누락'과 'null'을 구분한다.
    non_nullable에 든 필드는 null로 지울 수 없다.
    """

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _reject_nulls(cls, data: Any) -> Any:
        return reject_explicit_nulls(data, cls.non_nullable)


def _date_only_to_midnight(value: Any) -> Any:
    """'YYYY-MM-DD'는 UTC 자정으로 해석."""
    if isinstance(value, str) and _DATE_ONLY.match(value.strip()):
        return f"{value.strip()}T00:00:00+00:00"
    return value


def _assume_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


# 날짜만 또는 ISO datetime 허용. 항상 timezone-aware로 정규화.
FlexibleDatetime = Annotated[
    datetime,
    BeforeValidator(_date_only_to_midnight),
    AfterValidator(_assume_utc),
]


class Envelope(BaseModel, Generic[T]):
    """모든 응답의 공통 봉투. status: success(2xx) | fail(4xx) | error(5xx)."""

    status: Literal["success", "fail", "error"] = "success"
    message: str = "OK"
    data: T | None = None
    errors: Any | None = None


class Page(ApiModel, Generic[T]):
    """커서 페이지. next_cursor는 마지막 항목 id, 더 없으면 None."""

    items: list[T]
    next_cursor: int | None = None


def paginate(rows: list[Any], limit: int) -> tuple[list[Any], int | None]:
    """limit+1개 조회 결과를 (items, next_cursor)로 자른다."""
    has_more = len(rows) > limit
    items = rows[:limit]
    next_cursor = items[-1].id if has_more and items else None
    return items, next_cursor


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    """1 이상 maximum 이하로 보정. 비정상 값은 default."""
    if limit is None or limit < 1:
        return default
    return min(limit, maximum)
