"""Challenge API + 제출(submissions)."""

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_current_identity, require_session
from app.api.v1.resources import register_resource_routes
from app.core.database import Database
from app.core.deps import get_database
from app.core.errors import Unauthenticated
from app.core.session import SessionClaims
from app.schemas.challenge import (
    ChallengeCreate,
    ChallengeOut,
    ChallengeUpdate,
    MySubmissionOut,
    SubmissionCreate,
    SubmissionOut,
    SubmissionStatusUpdate,
)
from app.schemas.common import Envelope
from app.services import submission_service
from app.services.challenge_service import challenge_service

router = APIRouter(prefix="/challenges", tags=["challenges"])
submissions_router = APIRouter(prefix="/submissions", tags=["submissions"])

MINE_TRUE_VALUES = frozenset({"1", "true"})


@router.post(
    "/{challenge_id}/submissions",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[SubmissionOut],
)
async def post_submission(
    challenge_id: int,
    payload: SubmissionCreate,
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[SubmissionOut]:
    created = await submission_service.submit(db, challenge_id, identity.uid, payload)
    return Envelope(data=created, message="Submission created")


@router.get("/{challenge_id}/submissions", response_model=None)
async def get_submissions(
    challenge_id: int,
    mine: str | None = Query(None),
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None),
    identity: SessionClaims | None = Depends(get_current_identity),
    db: Database = Depends(get_database),
) -> Envelope:
    """
    기본: 순번 오름차순 공개 목록.
    ?mine=1: 로그인 필수, 내 제출 1건 또는 null(페이지네이션 무시).
    """
    if mine is not None and mine.strip().lower() in MINE_TRUE_VALUES:
        if identity is None:
            raise Unauthenticated()
        return Envelope(data=await submission_service.get_mine(db, challenge_id, identity.uid))
    page = await submission_service.list_for_challenge(
        db,
        challenge_id,
        viewer_id=identity.uid if identity else None,
        cursor=cursor,
        limit=limit,
    )
    return Envelope(data=page)


@router.delete("/{challenge_id}/submissions", response_model=Envelope[dict[str, bool]])
async def delete_my_submission(
    challenge_id: int,
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[dict[str, bool]]:
    await submission_service.withdraw(db, challenge_id, identity.uid)
    return Envelope(data={"deleted": True}, message="Submission withdrawn")


@router.patch(
    "/{challenge_id}/submissions/{submission_id}/status",
    response_model=Envelope[SubmissionOut],
)
async def patch_submission_status(
    challenge_id: int,
    submission_id: int,
    payload: SubmissionStatusUpdate,
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[SubmissionOut]:
    """챌린지 소유자만. 타인 챌린지는 404."""
    updated = await submission_service.set_status(
        db, challenge_id, submission_id, payload.status, identity.uid
    )
    return Envelope(data=updated, message="Submission status updated")


@submissions_router.get("", response_model=Envelope[list[MySubmissionOut]])
async def list_my_submissions(
    identity: SessionClaims = Depends(require_session),
    db: Database = Depends(get_database),
) -> Envelope[list[MySubmissionOut]]:
    return Envelope(data=await submission_service.list_mine(db, identity.uid))


register_resource_routes(
    router,
    challenge_service,
    create_schema=ChallengeCreate,
    update_schema=ChallengeUpdate,
    out_schema=ChallengeOut,
    label="Challenge",
)
