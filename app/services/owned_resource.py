"""
소유·게시 리소스 공통 수명주기. 명함·포트폴리오·챌린지 서비스가 상속해 사용한다.

- 소유 검사는 load-owned-or-not-found 한 곳에서만 수행(타인 소유도 404, 존재 여부 비노출).
- 게시 전이: PUBLISHED 진입 시 published_at 기록(이미 게시 중이면 유지), 이탈 시 해제.
- 하위 컬렉션은 요청에 포함된 것만 통째로 교체. 누락=미변경, 명시적 null=nullable 스칼라 비움.
- 모든 다단계 변경은 Database.transaction() 하나 안에서 수행(부분 반영 없음).
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Database
from app.core.errors import Conflict, NotFound, ValidationFailed, is_unique_violation
from app.models.base import utcnow
from app.models.enums import PublishStatus
from app.repositories import resource_repository
from app.schemas.common import ApiModel, Page, clamp_limit, paginate
from app.services.slug_service import allocate_slug

logger = logging.getLogger(__name__)

PUBLIC_PAGE_DEFAULT = 24
PUBLIC_PAGE_MAX = 60


def apply_publish_transition(resource: Any, new_status: str, *, now: datetime | None = None) -> None:
    """게시 상태 변경과 published_at 규칙을 함께 적용."""
    if new_status == PublishStatus.PUBLISHED:
        if resource.published_at is None:
            resource.published_at = now or utcnow()
    else:
        resource.published_at = None
    resource.publish_status = new_status


def project_visibility(out: ApiModel, fields: Sequence[str], *, is_owner: bool) -> ApiModel:
    """
    소유자는 원본 값. 비소유자는 show_<field>가 False인 값만 null.
    show_* 플래그는 누구에게나 그대로 노출한다.
    """
    if is_owner:
        return out.model_copy(update={"is_owner": True})
    hidden = {field: None for field in fields if not getattr(out, f"show_{field}", False)}
    return out.model_copy(update={**hidden, "is_owner": False})


class OwnedResourceService:
    """리소스 타입별 서비스의 기반 클래스. 하위 클래스는 클래스 속성과 훅만 채운다."""

    model: ClassVar[type[Any]]
    out_schema: ClassVar[type[ApiModel]]
    slug_fallback: ClassVar[str]
    not_found_message: ClassVar[str] = "Resource not found"
    allowed_statuses: ClassVar[frozenset[str]] = frozenset(
        {PublishStatus.DRAFT, PublishStatus.PRIVATE, PublishStatus.PUBLISHED}
    )
    visibility_fields: ClassVar[tuple[str, ...]] = ()
    child_fields: ClassVar[tuple[str, ...]] = ()
    # True면 명시한 slug가 이미 있을 때 접미사 대신 409
    explicit_slug_conflicts: ClassVar[bool] = False

    # ---- 훅 ----

    def load_options(self) -> list[Any]:
        """하위 컬렉션 전체 트리 selectinload."""
        return []

    def list_order(self) -> list[Any]:
        return [self.model.created_at.desc(), self.model.id.desc()]

    def search_columns(self) -> list[Any]:
        return [self.model.title]

    def slug_candidate(self, data: dict[str, Any]) -> str | None:
        return data.get("title")

    def build_children(self, field: str, items: list[dict[str, Any]]) -> list[Any]:
        raise NotImplementedError(field)

    async def prepare(
        self, session: AsyncSession, user_id: int, data: dict[str, Any]
    ) -> dict[str, Any]:
        """컬럼에 쓰기 전 입력 변환. 기본은 그대로."""
        return data

    def public_view(self, out: ApiModel) -> ApiModel:
        """비소유자용 추가 가공(비공개 하위 항목 제거 등)."""
        return out

    # ---- 직렬화 ----

    def to_out(self, resource: Any, *, is_owner: bool) -> ApiModel:
        out = self.out_schema.model_validate(resource)
        if not is_owner:
            out = self.public_view(out)
        return project_visibility(out, self.visibility_fields, is_owner=is_owner)

    # ---- 내부 ----

    def _check_status(self, status: str) -> None:
        if status not in self.allowed_statuses:
            raise ValidationFailed(
                "Invalid publish status",
                errors=[{"field": "publishStatus", "message": f"Unsupported value: {status}"}],
            )

    async def _resolve_slug(
        self,
        session: AsyncSession,
        explicit: str | None,
        data: dict[str, Any],
        *,
        exclude_id: int | None = None,
    ) -> str:
        if explicit and self.explicit_slug_conflicts:
            existing = await resource_repository.get_by_slug(session, self.model, explicit)
            if existing is not None and existing.id != exclude_id:
                raise Conflict("Slug already taken")
            return explicit
        return await allocate_slug(
            session,
            self.model,
            explicit or self.slug_candidate(data),
            fallback=self.slug_fallback,
            exclude_id=exclude_id,
        )

    async def _flush(self, session: AsyncSession) -> None:
        """unique 위반(동시 slug 배정 등)은 Conflict로. 나머지 무결성 오류는 그대로 전파."""
        try:
            await session.flush()
        except IntegrityError as e:
            if is_unique_violation(e):
                logger.info("Unique violation on %s write: %s", self.model.__tablename__, e.orig)
                raise Conflict("Slug already taken") from e
            raise

    async def _load_owned(self, session: AsyncSession, user_id: int, resource_id: int) -> Any:
        resource = await resource_repository.get_owned(
            session, self.model, resource_id, user_id, options=self.load_options()
        )
        if resource is None:
            raise NotFound(self.not_found_message)
        return resource

    async def _reload(self, session: AsyncSession, resource_id: int) -> Any:
        resource = await resource_repository.get_by_id(
            session,
            self.model,
            resource_id,
            options=self.load_options(),
            populate_existing=True,
        )
        if resource is None:
            raise NotFound(self.not_found_message)
        return resource

    # ---- 공개 연산 ----

    async def create(self, db: Database, user_id: int, payload: BaseModel) -> ApiModel:
        data = payload.model_dump()
        status = data.pop("publish_status", None) or PublishStatus.DRAFT
        self._check_status(status)
        async with db.transaction() as session:
            data = await self.prepare(session, user_id, data)
            children = {field: data.pop(field, None) or [] for field in self.child_fields}
            slug = await self._resolve_slug(session, data.pop("slug", None), data)

            resource = self.model(user_id=user_id, slug=slug, **data)
            for field, items in children.items():
                setattr(resource, field, self.build_children(field, items))
            apply_publish_transition(resource, status)
            session.add(resource)
            await self._flush(session)
            resource = await self._reload(session, resource.id)
        logger.info("Created %s id=%s user_id=%s", self.model.__tablename__, resource.id, user_id)
        return self.to_out(resource, is_owner=True)

    async def list_mine(self, db: Database, user_id: int) -> list[ApiModel]:
        async with db.session() as session:
            rows = await resource_repository.list_by_owner(
                session,
                self.model,
                user_id,
                order_by=self.list_order(),
                options=self.load_options(),
            )
        return [self.to_out(row, is_owner=True) for row in rows]

    async def get_owned(self, db: Database, user_id: int, resource_id: int) -> ApiModel:
        async with db.session() as session:
            resource = await self._load_owned(session, user_id, resource_id)
        return self.to_out(resource, is_owner=True)

    async def update(
        self, db: Database, user_id: int, resource_id: int, patch: BaseModel
    ) -> ApiModel:
        changes = patch.model_dump(exclude_unset=True)
        async with db.transaction() as session:
            resource = await self._load_owned(session, user_id, resource_id)
            changes = await self.prepare(session, user_id, changes)

            if "slug" in changes:
                new_slug = changes.pop("slug")
                if new_slug != resource.slug:
                    resource.slug = await self._resolve_slug(
                        session, new_slug, changes, exclude_id=resource.id
                    )
            if "publish_status" in changes:
                status = changes.pop("publish_status")
                self._check_status(status)
                apply_publish_transition(resource, status)
            for field in self.child_fields:
                if field in changes:
                    setattr(resource, field, self.build_children(field, changes.pop(field) or []))
            for field, value in changes.items():
                setattr(resource, field, value)
            resource.updated_at = utcnow()

            await self._flush(session)
            resource = await self._reload(session, resource.id)
        return self.to_out(resource, is_owner=True)

    async def delete(self, db: Database, user_id: int, resource_id: int) -> None:
        """하위 컬렉션은 FK ON DELETE CASCADE로 함께 삭제."""
        async with db.transaction() as session:
            resource = await resource_repository.get_owned(
                session, self.model, resource_id, user_id
            )
            if resource is None:
                raise NotFound(self.not_found_message)
            await session.delete(resource)
            await session.flush()
        logger.info("Deleted %s id=%s user_id=%s", self.model.__tablename__, resource_id, user_id)

    async def get_public(self, db: Database, slug: str, viewer_id: int | None) -> ApiModel:
        """PUBLISHED만 조회. 소유자 본인이면 is_owner=True와 원본 값."""
        async with db.session() as session:
            resource = await resource_repository.get_by_slug(
                session, self.model, slug, options=self.load_options()
            )
        if resource is None or resource.publish_status != PublishStatus.PUBLISHED:
            raise NotFound(self.not_found_message)
        is_owner = viewer_id is not None and resource.user_id == viewer_id
        return self.to_out(resource, is_owner=is_owner)

    async def list_public(
        self,
        db: Database,
        *,
        cursor: int | None = None,
        limit: int | None = None,
        q: str | None = None,
    ) -> Page[Any]:
        limit = clamp_limit(limit, PUBLIC_PAGE_DEFAULT, PUBLIC_PAGE_MAX)
        q = (q or "").strip() or None
        async with db.session() as session:
            rows = await resource_repository.list_published(
                session,
                self.model,
                after_id=cursor,
                limit=limit,
                q=q,
                search_columns=self.search_columns(),
                options=self.load_options(),
            )
        items, next_cursor = paginate(rows, limit)
        return Page(
            items=[self.to_out(row, is_owner=False) for row in items],
            next_cursor=next_cursor,
        )
