"""소유·게시 리소스 공통 수명주기 테스트. 저장소 계층은 mock."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.errors import Conflict, NotFound, ValidationFailed
from app.models.challenge import ChallengePrize
from app.models.enums import PublishStatus
from app.models.name_card import SocialAccount
from app.models.portfolio import ProjectImage, ProjectVideoLink
from app.schemas.common import ApiModel, PatchModel
from app.schemas.name_card import NameCardCreate
from app.services.challenge_service import ChallengeService
from app.services.name_card_service import NameCardService, name_card_service
from app.services.owned_resource import (
    OwnedResourceService,
    apply_publish_transition,
    project_visibility,
)
from app.services.portfolio_service import PortfolioService
from tests.conftest import FakeDatabase

REPO = "app.repositories.resource_repository"


class Widget:
    __tablename__ = "widgets"

    def __init__(self, **fields) -> None:
        self.id = None
        self.published_at = None
        for key, value in fields.items():
            setattr(self, key, value)


class WidgetOut(ApiModel):
    id: int
    slug: str
    title: str
    publish_status: str
    published_at: datetime | None = None
    phone: str | None = None
    show_phone: bool = False
    is_owner: bool = False


class WidgetCreate(ApiModel):
    title: str
    slug: str | None = None
    publish_status: str | None = None


class WidgetUpdate(PatchModel):
    non_nullable = frozenset({"title"})

    title: str | None = None
    publish_status: str | None = None


class WidgetService(OwnedResourceService):
    model = Widget
    out_schema = WidgetOut
    slug_fallback = "widget"
    not_found_message = "Widget not found"
    visibility_fields = ("phone",)


service = WidgetService()


def _widget(**fields) -> SimpleNamespace:
    base = {
        "id": 1,
        "user_id": 7,
        "slug": "w",
        "title": "W",
        "publish_status": PublishStatus.PUBLISHED,
        "published_at": datetime(2026, 1, 1, tzinfo=UTC),
        "phone": "010-1234",
        "show_phone": False,
        "updated_at": None,
    }
    return SimpleNamespace(**{**base, **fields})


def test_publish_transition_sets_and_clears_timestamp() -> None:
    resource = SimpleNamespace(publish_status="DRAFT", published_at=None)
    first = datetime(2026, 3, 1, tzinfo=UTC)
    apply_publish_transition(resource, PublishStatus.PUBLISHED, now=first)
    assert resource.published_at == first

    apply_publish_transition(resource, PublishStatus.PUBLISHED, now=datetime(2026, 4, 1, tzinfo=UTC))
    assert resource.published_at == first

    apply_publish_transition(resource, PublishStatus.DRAFT)
    assert resource.published_at is None
    assert resource.publish_status == PublishStatus.DRAFT


def test_project_visibility_hides_only_unflagged_fields_for_strangers() -> None:
    out = WidgetOut(id=1, slug="w", title="W", publish_status="PUBLISHED", phone="010", show_phone=False)
    stranger = project_visibility(out, ("phone",), is_owner=False)
    assert stranger.phone is None
    assert stranger.show_phone is False
    assert stranger.is_owner is False

    owner = project_visibility(out, ("phone",), is_owner=True)
    assert owner.phone == "010"
    assert owner.is_owner is True


@pytest.mark.asyncio
async def test_get_public_owner_sees_raw_values() -> None:
    with patch(f"{REPO}.get_by_slug", new_callable=AsyncMock, return_value=_widget()):
        out = await service.get_public(FakeDatabase(), "w", viewer_id=7)
    assert out.is_owner is True
    assert out.phone == "010-1234"


@pytest.mark.asyncio
async def test_get_public_stranger_sees_masked_values() -> None:
    with patch(f"{REPO}.get_by_slug", new_callable=AsyncMock, return_value=_widget()):
        out = await service.get_public(FakeDatabase(), "w", viewer_id=None)
    assert out.is_owner is False
    assert out.phone is None


@pytest.mark.asyncio
async def test_get_public_hides_unpublished() -> None:
    draft = _widget(publish_status=PublishStatus.DRAFT, published_at=None)
    with patch(f"{REPO}.get_by_slug", new_callable=AsyncMock, return_value=draft):
        with pytest.raises(NotFound):
            await service.get_public(FakeDatabase(), "w", viewer_id=7)


@pytest.mark.asyncio
async def test_foreign_resource_is_not_found() -> None:
    with patch(f"{REPO}.get_owned", new_callable=AsyncMock, return_value=None):
        with pytest.raises(NotFound) as exc_info:
            await service.get_owned(FakeDatabase(), user_id=8, resource_id=1)
    assert exc_info.value.message == "Widget not found"


@pytest.mark.asyncio
async def test_create_allocates_slug_from_title_and_publishes() -> None:
    db = FakeDatabase()
    created: dict = {}

    def _add(resource) -> None:
        resource.id = 11
        created["resource"] = resource

    db.db_session.add.side_effect = _add

    async def _reload(session, model, resource_id, **kwargs):
        return created["resource"]

    with patch(f"{REPO}.get_by_slug", new_callable=AsyncMock, return_value=None), patch(
        f"{REPO}.get_by_id", side_effect=_reload
    ):
        out = await service.create(
            db, 7, WidgetCreate(title="My First Widget", publish_status="PUBLISHED")
        )
    assert out.slug == "my-first-widget"
    assert out.publish_status == "PUBLISHED"
    assert out.published_at is not None
    assert out.is_owner is True
    assert db.transactions == 1


@pytest.mark.asyncio
async def test_update_rejects_unsupported_status() -> None:
    resource = _widget()
    with patch(f"{REPO}.get_owned", new_callable=AsyncMock, return_value=resource):
        with pytest.raises(ValidationFailed):
            await service.update(FakeDatabase(), 7, 1, WidgetUpdate(publish_status="ARCHIVED"))


@pytest.mark.asyncio
async def test_update_unpublish_clears_published_at() -> None:
    resource = _widget()
    with patch(f"{REPO}.get_owned", new_callable=AsyncMock, return_value=resource), patch(
        f"{REPO}.get_by_id", new_callable=AsyncMock, return_value=resource
    ):
        out = await service.update(
            FakeDatabase(), 7, 1, WidgetUpdate(title="Renamed", publish_status="PRIVATE")
        )
    assert out.title == "Renamed"
    assert out.publish_status == "PRIVATE"
    assert out.published_at is None
    assert resource.updated_at is not None


def test_patch_model_rejects_null_for_required_field() -> None:
    with pytest.raises(ValueError):
        WidgetUpdate.model_validate({"title": None})
    assert WidgetUpdate.model_validate({}).model_dump(exclude_unset=True) == {}


class WidgetWithPartsUpdate(PatchModel):
    title: str | None = None
    parts: list[dict] | None = None


class WidgetWithPartsService(WidgetService):
    child_fields = ("parts",)

    def build_children(self, field, items):
        return [SimpleNamespace(**item) for item in items]


class UniqueViolation(Exception):
    sqlstate = "23505"


class ForeignKeyViolation(Exception):
    sqlstate = "23503"


@pytest.mark.asyncio
async def test_update_replaces_present_child_collection_wholesale() -> None:
    parts_service = WidgetWithPartsService()
    resource = _widget(parts=[SimpleNamespace(name="old-a"), SimpleNamespace(name="old-b")])
    with patch(f"{REPO}.get_owned", new_callable=AsyncMock, return_value=resource), patch(
        f"{REPO}.get_by_id", new_callable=AsyncMock, return_value=resource
    ):
        await parts_service.update(
            FakeDatabase(), 7, 1, WidgetWithPartsUpdate(parts=[{"name": "new"}])
        )
    assert [part.name for part in resource.parts] == ["new"]


@pytest.mark.asyncio
async def test_update_leaves_absent_child_collection_untouched() -> None:
    parts_service = WidgetWithPartsService()
    original = [SimpleNamespace(name="keep")]
    resource = _widget(parts=original)
    with patch(f"{REPO}.get_owned", new_callable=AsyncMock, return_value=resource), patch(
        f"{REPO}.get_by_id", new_callable=AsyncMock, return_value=resource
    ):
        await parts_service.update(FakeDatabase(), 7, 1, WidgetWithPartsUpdate(title="New"))
    assert resource.parts is original
    assert resource.title == "New"


@pytest.mark.asyncio
async def test_update_with_empty_child_list_clears_collection() -> None:
    parts_service = WidgetWithPartsService()
    resource = _widget(parts=[SimpleNamespace(name="gone")])
    with patch(f"{REPO}.get_owned", new_callable=AsyncMock, return_value=resource), patch(
        f"{REPO}.get_by_id", new_callable=AsyncMock, return_value=resource
    ):
        await parts_service.update(FakeDatabase(), 7, 1, WidgetWithPartsUpdate(parts=[]))
    assert resource.parts == []


@pytest.mark.asyncio
async def test_republish_gets_fresh_published_at() -> None:
    first_published = datetime(2026, 1, 1, tzinfo=UTC)
    resource = _widget(published_at=first_published)
    with patch(f"{REPO}.get_owned", new_callable=AsyncMock, return_value=resource), patch(
        f"{REPO}.get_by_id", new_callable=AsyncMock, return_value=resource
    ):
        draft = await service.update(FakeDatabase(), 7, 1, WidgetUpdate(publish_status="DRAFT"))
        assert draft.published_at is None

        again = await service.update(
            FakeDatabase(), 7, 1, WidgetUpdate(publish_status="PUBLISHED")
        )
    assert again.publish_status == "PUBLISHED"
    assert again.published_at is not None
    assert again.published_at != first_published


@pytest.mark.asyncio
async def test_unique_violation_on_write_becomes_conflict() -> None:
    db = FakeDatabase()
    db.db_session.flush.side_effect = IntegrityError("INSERT", {}, UniqueViolation("dup"))
    with patch(f"{REPO}.get_by_slug", new_callable=AsyncMock, return_value=None):
        with pytest.raises(Conflict):
            await service.create(db, 7, WidgetCreate(title="Racy"))


@pytest.mark.asyncio
async def test_other_integrity_errors_propagate() -> None:
    db = FakeDatabase()
    db.db_session.flush.side_effect = IntegrityError("INSERT", {}, ForeignKeyViolation("fk"))
    with patch(f"{REPO}.get_by_slug", new_callable=AsyncMock, return_value=None):
        with pytest.raises(IntegrityError):
            await service.create(db, 7, WidgetCreate(title="Orphan"))


def _card_payload(**fields) -> NameCardCreate:
    base = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "appName": "Streakling",
        "status": "STUDENT",
        "role": "Engineer",
    }
    return NameCardCreate.model_validate({**base, **fields})


@pytest.mark.asyncio
async def test_name_card_explicit_duplicate_slug_is_conflict() -> None:
    with patch(
        f"{REPO}.get_by_slug", new_callable=AsyncMock, return_value=SimpleNamespace(id=3)
    ) as get_by_slug:
        with pytest.raises(Conflict):
            await name_card_service.create(FakeDatabase(), 7, _card_payload(slug="ada"))
    assert get_by_slug.await_count == 1
    assert get_by_slug.await_args.args[2] == "ada"


@pytest.mark.asyncio
async def test_name_card_without_slug_gets_numeric_suffix() -> None:
    db = FakeDatabase()
    created: dict = {}

    def _add(resource) -> None:
        resource.id = 21
        created["resource"] = resource

    db.db_session.add.side_effect = _add

    async def _reload(session, model, resource_id, **kwargs):
        return created["resource"]

    with patch(
        f"{REPO}.get_by_slug",
        new_callable=AsyncMock,
        side_effect=[SimpleNamespace(id=3), None],
    ), patch(f"{REPO}.get_by_id", side_effect=_reload), patch.object(
        name_card_service, "to_out", side_effect=lambda resource, is_owner: resource
    ):
        card = await name_card_service.create(db, 7, _card_payload())
    assert card.slug == "ada-lovelace-1"
    assert card.user_id == 7
    assert card.social_accounts == []


def test_name_card_children_are_social_accounts() -> None:
    accounts = NameCardService().build_children(
        "social_accounts",
        [{"platform": "GITHUB", "handle": "ada", "is_public": False, "sort_order": 1}],
    )
    assert len(accounts) == 1
    assert isinstance(accounts[0], SocialAccount)
    assert accounts[0].handle == "ada"
    assert accounts[0].is_public is False


def test_portfolio_projects_keep_order_and_nested_media() -> None:
    projects = PortfolioService().build_children(
        "projects",
        [
            {
                "title": "First",
                "sub_images": [{"key": "k1", "url": "https://cdn/k1"}],
                "video_links": [{"platform": "YOUTUBE", "url": "https://youtu.be/x"}],
            },
            {"title": "Second"},
        ],
    )
    assert [(p.title, p.sort_order) for p in projects] == [("First", 0), ("Second", 1)]
    assert isinstance(projects[0].sub_images[0], ProjectImage)
    assert projects[0].sub_images[0].key == "k1"
    assert isinstance(projects[0].video_links[0], ProjectVideoLink)
    assert projects[1].sub_images == []
    assert projects[1].video_links == []


def test_portfolio_unknown_child_collection_is_rejected() -> None:
    with pytest.raises(ValueError):
        PortfolioService().build_children("attachments", [])


def test_challenge_prizes_are_sorted_by_rank() -> None:
    prizes = ChallengeService().build_children(
        "prizes",
        [{"rank": 3, "label": "Bronze"}, {"rank": 1, "label": "Gold"}, {"rank": 2, "label": "Silver"}],
    )
    assert all(isinstance(prize, ChallengePrize) for prize in prizes)
    assert [prize.label for prize in prizes] == ["Gold", "Silver", "Bronze"]

    images = ChallengeService().build_children("images", [{"key": "k", "url": "https://cdn/k"}])
    assert images[0].url == "https://cdn/k"
