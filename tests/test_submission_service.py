"""Submission Service 테스트. 제출 규칙·순번·전화번호 노출 범위."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.errors import Conflict, Forbidden, NotFound
from app.models.enums import ChallengeStatus, PublishStatus
from app.schemas.challenge import SubmissionCreate
from app.services import submission_service
from tests.conftest import FakeDatabase

NOW = datetime(2026, 5, 1, tzinfo=UTC)


def _challenge(**fields) -> SimpleNamespace:
    base = {
        "id": 3,
        "user_id": 1,
        "publish_status": PublishStatus.PUBLISHED,
        "status": ChallengeStatus.OPEN,
    }
    return SimpleNamespace(**{**base, **fields})


def _submission(**fields) -> SimpleNamespace:
    base = {
        "id": 20,
        "challenge_id": 3,
        "submitter_id": 2,
        "platform": "TIKTOK",
        "link_url": "https://tiktok.com/@b/video/1",
        "image_key": None,
        "notes": None,
        "submission_order": 1,
        "submitter_name": "Bea",
        "submitter_phone": "010-2222",
        "submitter_socials": [{"platform": "TIKTOK", "handle": "@b"}],
        "status": "PENDING",
        "created_at": NOW,
        "updated_at": NOW,
    }
    return SimpleNamespace(**{**base, **fields})


ENTRY = SubmissionCreate(platform="TIKTOK", link_url="https://tiktok.com/@b/video/1")


def _patch_repos(challenge, existing=None, order=1, created=None):
    return (
        patch(
            "app.services.submission_service.resource_repository.get_by_id",
            new_callable=AsyncMock,
            return_value=challenge,
        ),
        patch(
            "app.services.submission_service.submission_repository.get_for_submitter",
            new_callable=AsyncMock,
            return_value=existing,
        ),
        patch(
            "app.services.submission_service.user_repository.get_by_id",
            new_callable=AsyncMock,
            return_value=SimpleNamespace(display_name="Bea", phone="010-2222"),
        ),
        patch(
            "app.services.submission_service.submission_repository.latest_public_socials",
            new_callable=AsyncMock,
            return_value=[{"platform": "TIKTOK", "handle": "@b"}],
        ),
        patch(
            "app.services.submission_service.submission_repository.claim_next_order",
            new_callable=AsyncMock,
            return_value=order,
        ),
        patch(
            "app.services.submission_service.submission_repository.create",
            new_callable=AsyncMock,
            return_value=created or _submission(submission_order=order),
        ),
    )


async def _submit(challenge, submitter_id=2, **kwargs):
    p1, p2, p3, p4, p5, p6 = _patch_repos(challenge, **kwargs)
    with p1, p2, p3, p4, p5, p6 as create:
        result = await submission_service.submit(FakeDatabase(), 3, submitter_id, ENTRY)
    return result, create


@pytest.mark.asyncio
async def test_first_submission_gets_order_one_with_snapshot() -> None:
    out, create = await _submit(_challenge())
    assert out.submission_order == 1
    values = create.await_args.args[1]
    assert values["submission_order"] == 1
    assert values["submitter_name"] == "Bea"
    assert values["submitter_phone"] == "010-2222"
    assert values["submitter_socials"] == [{"platform": "TIKTOK", "handle": "@b"}]
    # 제출자 본인에게는 전화번호 노출
    assert out.submitter_phone == "010-2222"


@pytest.mark.asyncio
async def test_owner_cannot_submit_to_own_challenge() -> None:
    with pytest.raises(Forbidden):
        await _submit(_challenge(user_id=2))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "challenge",
    [
        None,
        _challenge(publish_status=PublishStatus.DRAFT),
        _challenge(status=ChallengeStatus.CLOSED),
    ],
)
async def test_only_open_published_challenges_accept_submissions(challenge) -> None:
    with pytest.raises(NotFound):
        await _submit(challenge)


@pytest.mark.asyncio
async def test_second_submission_conflicts() -> None:
    with pytest.raises(Conflict) as exc_info:
        await _submit(_challenge(), existing=_submission())
    assert "already submitted" in exc_info.value.message


@pytest.mark.asyncio
async def test_unique_race_maps_to_conflict() -> None:
    race = IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))
    p1, p2, p3, p4, p5, p6 = _patch_repos(_challenge())
    with p1, p2, p3, p4, p5, p6 as create:
        create.side_effect = race
        with pytest.raises(Conflict):
            await submission_service.submit(FakeDatabase(), 3, 2, ENTRY)


def test_phone_visible_to_owner_and_submitter_only() -> None:
    submission = _submission()
    owner_view = submission_service.to_submission_out(submission, viewer_id=1, challenge_owner_id=1)
    self_view = submission_service.to_submission_out(submission, viewer_id=2, challenge_owner_id=1)
    stranger_view = submission_service.to_submission_out(submission, viewer_id=9, challenge_owner_id=1)
    anonymous_view = submission_service.to_submission_out(
        submission, viewer_id=None, challenge_owner_id=1
    )
    assert owner_view.submitter_phone == "010-2222"
    assert self_view.submitter_phone == "010-2222"
    assert stranger_view.submitter_phone is None
    assert anonymous_view.submitter_phone is None


@pytest.mark.asyncio
async def test_withdraw_without_submission_is_not_found() -> None:
    with patch(
        "app.services.submission_service.submission_repository.get_for_submitter",
        new_callable=AsyncMock,
        return_value=None,
    ):
        with pytest.raises(NotFound):
            await submission_service.withdraw(FakeDatabase(), 3, 2)


@pytest.mark.asyncio
async def test_set_status_requires_challenge_owner() -> None:
    with patch(
        "app.services.submission_service.resource_repository.get_owned",
        new_callable=AsyncMock,
        return_value=None,
    ):
        with pytest.raises(NotFound):
            await submission_service.set_status(FakeDatabase(), 3, 20, "APPROVED", caller_id=2)


@pytest.mark.asyncio
async def test_set_status_updates_submission() -> None:
    submission = _submission()
    with patch(
        "app.services.submission_service.resource_repository.get_owned",
        new_callable=AsyncMock,
        return_value=_challenge(),
    ), patch(
        "app.services.submission_service.submission_repository.get_in_challenge",
        new_callable=AsyncMock,
        return_value=submission,
    ):
        out = await submission_service.set_status(FakeDatabase(), 3, 20, "WINNER", caller_id=1)
    assert out.status == "WINNER"
    assert out.submitter_phone == "010-2222"
