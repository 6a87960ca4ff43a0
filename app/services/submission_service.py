"""Submission Service. 챌린지 참가 제출·철회·목록·심사.

순번은 챌린지 행의 카운터를 UPDATE ... RETURNING으로 증가시켜 얻고, 같은 트랜잭션에서 INSERT한다.
유저당 1건·순번 중복 금지는 DB unique 제약이 최종 보증한다.
"""

import logging

from sqlalchemy.exc import IntegrityError

from app.core.database import Database
from app.core.errors import Conflict, Forbidden, NotFound, is_unique_violation
from app.models.challenge import Challenge, ChallengeSubmission
from app.models.enums import ChallengeStatus, PublishStatus
from app.repositories import resource_repository, submission_repository, user_repository
from app.schemas.challenge import (
    ChallengeBrief,
    MySubmissionOut,
    SubmissionCreate,
    SubmissionOut,
)
from app.schemas.common import Page, clamp_limit, paginate

logger = logging.getLogger(__name__)

SUBMISSION_PAGE_DEFAULT = 50
SUBMISSION_PAGE_MAX = 100


def to_submission_out(
    submission: ChallengeSubmission, *, viewer_id: int | None, challenge_owner_id: int
) -> SubmissionOut:
    """전화번호 스냅샷은 챌린지 소유자와 제출자 본인에게만."""
    out = SubmissionOut.model_validate(submission)
    if viewer_id is not None and viewer_id in (challenge_owner_id, submission.submitter_id):
        return out
    return out.model_copy(update={"submitter_phone": None})


def challenge_brief(challenge: Challenge) -> ChallengeBrief:
    cover = challenge.images[0].url if challenge.images else None
    return ChallengeBrief(
        id=challenge.id,
        slug=challenge.slug,
        title=challenge.title,
        brand_name=challenge.brand_name,
        status=challenge.status,
        publish_status=challenge.publish_status,
        deadline=challenge.deadline,
        cover_image_url=cover,
    )


async def submit(
    db: Database, challenge_id: int, submitter_id: int, entry: SubmissionCreate
) -> SubmissionOut:
    """
    OPEN + PUBLISHED 챌린지에만 제출. 소유자 본인 제출 불가, 유저당 1건.
    동시 제출로 unique 제약에 걸리면 Conflict(재시도 안내).
    """
    try:
        async with db.transaction() as session:
            challenge = await resource_repository.get_by_id(session, Challenge, challenge_id)
            if (
                challenge is None
                or challenge.publish_status != PublishStatus.PUBLISHED
                or challenge.status != ChallengeStatus.OPEN
            ):
                raise NotFound("Challenge is not open")
            if challenge.user_id == submitter_id:
                raise Forbidden("You cannot submit to your own challenge.")
            existing = await submission_repository.get_for_submitter(
                session, challenge_id, submitter_id
            )
            if existing is not None:
                raise Conflict("You have already submitted to this challenge.")

            user = await user_repository.get_by_id(session, submitter_id)
            socials = await submission_repository.latest_public_socials(session, submitter_id)

            order = await submission_repository.claim_next_order(session, challenge_id)
            if order is None:
                raise NotFound("Challenge is not open")
            submission = await submission_repository.create(
                session,
                {
                    "challenge_id": challenge_id,
                    "submitter_id": submitter_id,
                    "platform": entry.platform,
                    "link_url": entry.link_url,
                    "image_key": entry.image_key,
                    "notes": entry.notes or None,
                    "submission_order": order,
                    "submitter_name": user.display_name if user else None,
                    "submitter_phone": user.phone if user else None,
                    "submitter_socials": socials,
                },
            )
            owner_id = challenge.user_id
    except IntegrityError as e:
        if is_unique_violation(e):
            logger.info(
                "Submission race on challenge_id=%s submitter_id=%s", challenge_id, submitter_id
            )
            raise Conflict("Please retry your submission.") from e
        raise
    logger.info(
        "Submission created challenge_id=%s submitter_id=%s order=%s",
        challenge_id,
        submitter_id,
        order,
    )
    return to_submission_out(submission, viewer_id=submitter_id, challenge_owner_id=owner_id)


async def withdraw(db: Database, challenge_id: int, submitter_id: int) -> None:
    """본인 제출 삭제. 비운 순번은 재사용하지 않는다."""
    async with db.transaction() as session:
        submission = await submission_repository.get_for_submitter(
            session, challenge_id, submitter_id
        )
        if submission is None:
            raise NotFound("No submission to withdraw.")
        await submission_repository.delete(session, submission)


async def list_for_challenge(
    db: Database,
    challenge_id: int,
    *,
    viewer_id: int | None,
    cursor: int | None = None,
    limit: int | None = None,
) -> Page[SubmissionOut]:
    """공개 목록(순번 오름차순). 게시되지 않은 챌린지는 소유자만 볼 수 있다."""
    limit = clamp_limit(limit, SUBMISSION_PAGE_DEFAULT, SUBMISSION_PAGE_MAX)
    async with db.session() as session:
        challenge = await resource_repository.get_by_id(session, Challenge, challenge_id)
        if challenge is None or (
            challenge.publish_status != PublishStatus.PUBLISHED
            and challenge.user_id != viewer_id
        ):
            raise NotFound("Challenge not found")
        rows = await submission_repository.list_for_challenge(
            session, challenge_id, after_id=cursor, limit=limit
        )
    items, next_cursor = paginate(rows, limit)
    return Page(
        items=[
            to_submission_out(s, viewer_id=viewer_id, challenge_owner_id=challenge.user_id)
            for s in items
        ],
        next_cursor=next_cursor,
    )


async def get_mine(db: Database, challenge_id: int, submitter_id: int) -> SubmissionOut | None:
    """?mine=1 모드. 페이지네이션 없이 내 제출 1건 또는 None."""
    async with db.session() as session:
        submission = await submission_repository.get_for_submitter(
            session, challenge_id, submitter_id
        )
    if submission is None:
        return None
    return SubmissionOut.model_validate(submission)


async def list_mine(db: Database, submitter_id: int) -> list[MySubmissionOut]:
    """모든 챌린지에 걸친 내 제출 + 챌린지 요약."""
    async with db.session() as session:
        rows = await submission_repository.list_by_submitter(session, submitter_id)
    return [
        MySubmissionOut(
            **SubmissionOut.model_validate(s).model_dump(),
            challenge=challenge_brief(s.challenge),
        )
        for s in rows
    ]


async def set_status(
    db: Database, challenge_id: int, submission_id: int, status: str, caller_id: int
) -> SubmissionOut:
    """챌린지 소유자만 심사 상태 변경. 상태 간 전이 제한은 없다."""
    async with db.transaction() as session:
        challenge = await resource_repository.get_owned(session, Challenge, challenge_id, caller_id)
        if challenge is None:
            raise NotFound("Challenge not found")
        submission = await submission_repository.get_in_challenge(
            session, challenge_id, submission_id
        )
        if submission is None:
            raise NotFound("Submission not found")
        submission.status = status
        await session.flush()
        out = to_submission_out(submission, viewer_id=caller_id, challenge_owner_id=caller_id)
    logger.info(
        "Submission status changed submission_id=%s status=%s by user_id=%s",
        submission_id,
        status,
        caller_id,
    )
    return out
