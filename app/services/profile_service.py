"""Profile Service. 내 프로필 조회·수정(username을 쓰는 유일한 경로)과 공개 프로필."""

import logging

from sqlalchemy.exc import IntegrityError

from app.core.database import Database
from app.core.errors import Conflict, NotFound, is_unique_violation
from app.models.base import utcnow
from app.models.user import User
from app.repositories import user_repository
from app.schemas.common import Page, clamp_limit, paginate
from app.schemas.profile import ProfileOut, ProfileUpdate
from app.services.owned_resource import project_visibility

logger = logging.getLogger(__name__)

PROFILE_VISIBILITY_FIELDS = ("email", "phone", "religion", "country", "date_of_birth")
PUBLIC_PROFILE_PAGE_DEFAULT = 24
PUBLIC_PROFILE_PAGE_MAX = 60


def to_profile_out(user: User, *, is_owner: bool) -> ProfileOut:
    out = ProfileOut.model_validate(user)
    return project_visibility(out, PROFILE_VISIBILITY_FIELDS, is_owner=is_owner)


async def get_my_profile(db: Database, user_id: int) -> ProfileOut:
    async with db.session() as session:
        user = await user_repository.get_by_id(session, user_id)
    if user is None:
        raise NotFound("User not found")
    return to_profile_out(user, is_owner=True)


async def update_my_profile(db: Database, user_id: int, patch: ProfileUpdate) -> ProfileOut:
    """username 중복은 409. avatar/banner key는 null로 비울 수 있다."""
    changes = patch.model_dump(exclude_unset=True)
    try:
        async with db.transaction() as session:
            user = await user_repository.get_by_id(session, user_id)
            if user is None:
                raise NotFound("User not found")
            username = changes.get("username")
            if username is not None and username != user.username:
                taken = await user_repository.get_by_username(session, username)
                if taken is not None and taken.id != user_id:
                    raise Conflict("Username is already taken")
            for field, value in changes.items():
                setattr(user, field, value)
            user.updated_at = utcnow()
            await session.flush()
    except IntegrityError as e:
        if is_unique_violation(e):
            raise Conflict("Username is already taken") from e
        raise
    return to_profile_out(user, is_owner=True)


async def get_public_by_username(db: Database, username: str, viewer_id: int | None) -> ProfileOut:
    async with db.session() as session:
        user = await user_repository.get_by_username(session, username)
    if user is None:
        raise NotFound("Profile not found")
    return to_profile_out(user, is_owner=viewer_id == user.id)


async def get_public_by_id(db: Database, user_id: int, viewer_id: int | None) -> ProfileOut:
    async with db.session() as session:
        user = await user_repository.get_by_id(session, user_id)
    if user is None:
        raise NotFound("Profile not found")
    return to_profile_out(user, is_owner=viewer_id == user.id)


async def list_public(
    db: Database, *, cursor: int | None = None, limit: int | None = None
) -> Page[ProfileOut]:
    limit = clamp_limit(limit, PUBLIC_PROFILE_PAGE_DEFAULT, PUBLIC_PROFILE_PAGE_MAX)
    async with db.session() as session:
        rows = await user_repository.list_public(session, after_id=cursor, limit=limit)
    items, next_cursor = paginate(rows, limit)
    return Page(
        items=[to_profile_out(u, is_owner=False) for u in items],
        next_cursor=next_cursor,
    )
