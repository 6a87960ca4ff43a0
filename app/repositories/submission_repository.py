"""Challenge Submission Repository. DB 쿼리만 수행."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.challenge import Challenge, ChallengeSubmission
from app.models.enums import PublishStatus
from app.models.name_card import DigitalNameCard, SocialAccount


async def get_for_submitter(
    session: AsyncSession, challenge_id: int, submitter_id: int
) -> ChallengeSubmission | None:
    result = await session.execute(
        select(ChallengeSubmission).where(
            ChallengeSubmission.challenge_id == challenge_id,
            ChallengeSubmission.submitter_id == submitter_id,
        )
    )
    return result.scalars().one_or_none()


async def get_in_challenge(
    session: AsyncSession, challenge_id: int, submission_id: int
) -> ChallengeSubmission | None:
    """제출이 해당 챌린지 소속일 때만 반환."""
    result = await session.execute(
        select(ChallengeSubmission).where(
            ChallengeSubmission.id == submission_id,
            ChallengeSubmission.challenge_id == challenge_id,
        )
    )
    return result.scalars().one_or_none()


async def claim_next_order(session: AsyncSession, challenge_id: int) -> int | None:
    """
    UPDATE challenges SET next_submission_order = next_submission_order + 1 RETURNING.
    증가 전 값을 이번 제출 순번으로 돌려준다. 행 잠금은 트랜잭션 종료까지 유지된다.
    """
    result = await session.execute(
        update(Challenge)
        .where(Challenge.id == challenge_id)
        .values(next_submission_order=Challenge.next_submission_order + 1)
        .returning(Challenge.next_submission_order)
    )
    incremented = result.scalar_one_or_none()
    if incremented is None:
        return None
    return incremented - 1


async def create(session: AsyncSession, values: dict[str, Any]) -> ChallengeSubmission:
    submission = ChallengeSubmission(**values)
    session.add(submission)
    await session.flush()
    return submission


async def delete(session: AsyncSession, submission: ChallengeSubmission) -> None:
    await session.delete(submission)
    await session.flush()


async def list_for_challenge(
    session: AsyncSession, challenge_id: int, *, after_id: int | None, limit: int
) -> list[ChallengeSubmission]:
    """순번 오름차순 keyset, limit+1개. after_id는 직전 페이지 마지막 제출 id."""
    stmt = select(ChallengeSubmission).where(ChallengeSubmission.challenge_id == challenge_id)
    if after_id is not None:
        anchor = await session.execute(
            select(ChallengeSubmission.submission_order).where(
                ChallengeSubmission.id == after_id,
                ChallengeSubmission.challenge_id == challenge_id,
            )
        )
        anchor_order = anchor.scalar_one_or_none()
        if anchor_order is not None:
            stmt = stmt.where(
                or_(
                    ChallengeSubmission.submission_order > anchor_order,
                    and_(
                        ChallengeSubmission.submission_order == anchor_order,
                        ChallengeSubmission.id > after_id,
                    ),
                )
            )
    stmt = stmt.order_by(
        ChallengeSubmission.submission_order.asc(), ChallengeSubmission.id.asc()
    ).limit(limit + 1)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_by_submitter(
    session: AsyncSession, submitter_id: int
) -> list[ChallengeSubmission]:
    """내 제출 전체(최신순). 챌린지 요약용으로 챌린지와 이미지까지 로드."""
    result = await session.execute(
        select(ChallengeSubmission)
        .where(ChallengeSubmission.submitter_id == submitter_id)
        .order_by(ChallengeSubmission.created_at.desc(), ChallengeSubmission.id.desc())
        .options(selectinload(ChallengeSubmission.challenge).selectinload(Challenge.images))
    )
    return list(result.scalars().all())


async def latest_public_socials(session: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """가장 최근 게시한 명함의 공개 SNS 링크. 게시 명함이 없으면 빈 목록."""
    card_id = (
        await session.execute(
            select(DigitalNameCard.id)
            .where(
                DigitalNameCard.user_id == user_id,
                DigitalNameCard.publish_status == PublishStatus.PUBLISHED,
            )
            .order_by(DigitalNameCard.published_at.desc().nulls_last(), DigitalNameCard.id.desc())
            .limit(1)
        )
    ).scalar_one_or_none()
    if card_id is None:
        return []
    rows = await session.execute(
        select(SocialAccount)
        .where(SocialAccount.card_id == card_id, SocialAccount.is_public.is_(True))
        .order_by(SocialAccount.sort_order.asc(), SocialAccount.id.asc())
    )
    return [
        {"platform": s.platform, "handle": s.handle, "url": s.url, "label": s.label}
        for s in rows.scalars().all()
    ]


async def count_by_challenge(
    session: AsyncSession, challenge_ids: Sequence[int]
) -> dict[int, int]:
    if not challenge_ids:
        return {}
    result = await session.execute(
        select(ChallengeSubmission.challenge_id, func.count())
        .where(ChallengeSubmission.challenge_id.in_(list(challenge_ids)))
        .group_by(ChallengeSubmission.challenge_id)
    )
    return {challenge_id: int(n) for challenge_id, n in result.all()}


async def count_all(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(ChallengeSubmission))
    return int(result.scalar_one())
