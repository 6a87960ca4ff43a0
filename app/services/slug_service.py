"""Slug Service. 리소스 타입 전체에서 유일한 slug 배정.

조회 후 배정(check-then-act)이므로 최종 보증은 DB unique 제약이다.
쓰기 시점 충돌은 호출부에서 Conflict로 변환한다.
"""

import re
import unicodedata
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories import resource_repository

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
MAX_SLUG_LENGTH = 120


def slugify(text: str | None) -> str:
    """소문자 ASCII 단어를 하이픈 하나로 연결. 앞뒤 하이픈 제거."""
    if not text:
        return ""
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", ascii_text.lower()).strip("-")[:MAX_SLUG_LENGTH].strip("-")


async def allocate_slug(
    session: AsyncSession,
    model: type[Any],
    candidate: str | None,
    *,
    fallback: str,
    exclude_id: int | None = None,
) -> str:
    """
    candidate를 slugify, 비면 fallback. 이미 있으면 -1, -2 ... 를 붙여 빈 값을 찾는다.
    exclude_id는 수정 중인 자기 자신(자기 slug와의 충돌은 무시).
    접미사를 붙인 결과도 MAX_SLUG_LENGTH(컬럼 길이) 안에 들도록 base를 자른다.
    """
    base = slugify(candidate) or fallback
    slug = base
    suffix = 0
    while True:
        existing = await resource_repository.get_by_slug(session, model, slug)
        if existing is None or (exclude_id is not None and existing.id == exclude_id):
            return slug
        suffix += 1
        tail = f"-{suffix}"
        slug = base[: MAX_SLUG_LENGTH - len(tail)].rstrip("-") + tail
