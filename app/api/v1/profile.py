"""Profile API. 내 프로필 + 공개 프로필."""

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_identity, require_session
from app.core.database import Database
from app.core.deps import get_database
from app.core.session import SessionClaims
from app.schemas.common import Envelope, Page
from app.schemas.profile import ProfileOut, ProfileUpdate
from app.services import profile_service

router = APIRouter(tags=["profile"])


@router.get("/profile", response_model=Envelope[ProfileOut])
async def get_my_profile(
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[ProfileOut]:
    return Envelope(data=await profile_service.get_my_profile(db, identity.uid))


@router.patch("/profile", response_model=Envelope[ProfileOut])
async def patch_my_profile(
    payload: ProfileUpdate,
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[ProfileOut]:
    updated = await profile_service.update_my_profile(db, identity.uid, payload)
    return Envelope(data=updated, message="Profile updated")


@router.get("/profiles/public", response_model=Envelope[Page[ProfileOut]])
async def list_public_profiles(
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None),
    db: Database = Depends(get_database),
) -> Envelope[Page[ProfileOut]]:
    return Envelope(data=await profile_service.list_public(db, cursor=cursor, limit=limit))


@router.get("/u/id/{user_id}", response_model=Envelope[ProfileOut])
async def get_profile_by_id(
    user_id: int,
    identity: SessionClaims | None = Depends(get_current_identity),
    db: Database = Depends(get_database),
) -> Envelope[ProfileOut]:
    viewer_id = identity.uid if identity else None
    return Envelope(data=await profile_service.get_public_by_id(db, user_id, viewer_id))


@router.get("/u/{username}", response_model=Envelope[ProfileOut])
async def get_profile_by_username(
    username: str,
    identity: SessionClaims | None = Depends(get_current_identity),
    db: Database = Depends(get_database),
) -> Envelope[ProfileOut]:
    """본인이 보면 민감 필드 원본 + isOwner=true. 타인은 공개 설정된 필드만."""
    viewer_id = identity.uid if identity else None
    return Envelope(data=await profile_service.get_public_by_username(db, username, viewer_id))
