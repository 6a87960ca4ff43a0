"""소유·게시 리소스 공통 라우트. 명함·포트폴리오·챌린지 라우터가 같은 모양으로 등록한다.

/public, /slug/{slug} 는 /{id} 보다 먼저 등록해야 한다(정수 경로 파라미터와 충돌).
리소스별 추가 라우트도 이 함수 호출 전에 등록한다.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_current_identity, require_session
from app.core.database import Database
from app.core.deps import get_database
from app.core.session import SessionClaims
from app.schemas.common import ApiModel, Envelope, Page, RequestModel
from app.services.owned_resource import OwnedResourceService


def register_resource_routes(
    router: APIRouter,
    service: OwnedResourceService,
    *,
    create_schema: type[RequestModel],
    update_schema: type[RequestModel],
    out_schema: type[ApiModel],
    label: str,
) -> None:
    """create / list mine / public list / by slug / get / update / delete."""

    @router.post("", status_code=status.HTTP_201_CREATED, response_model=Envelope[out_schema])
    async def create_resource(
        payload: create_schema,  # type: ignore[valid-type]
        identity: SessionClaims = Depends(require_session),
        db: Database = Depends(get_database),
    ) -> Envelope[Any]:
        created = await service.create(db, identity.uid, payload)
        return Envelope(data=created, message=f"{label} created")

    @router.get("", response_model=Envelope[list[out_schema]])
    async def list_my_resources(
        identity: SessionClaims = Depends(require_session),
        db: Database = Depends(get_database),
    ) -> Envelope[Any]:
        return Envelope(data=await service.list_mine(db, identity.uid))

    @router.get("/public", response_model=Envelope[Page[out_schema]])
    async def list_public_resources(
        cursor: int | None = Query(None, ge=1),
        limit: int | None = Query(None),
        q: str | None = Query(None, max_length=200),
        db: Database = Depends(get_database),
    ) -> Envelope[Any]:
        page = await service.list_public(db, cursor=cursor, limit=limit, q=q)
        return Envelope(data=page)

    @router.get("/slug/{slug}", response_model=Envelope[out_schema])
    async def get_public_resource(
        slug: str,
        identity: SessionClaims | None = Depends(get_current_identity),
        db: Database = Depends(get_database),
    ) -> Envelope[Any]:
        viewer_id = identity.uid if identity else None
        return Envelope(data=await service.get_public(db, slug, viewer_id))

    @router.get("/{resource_id}", response_model=Envelope[out_schema])
    async def get_my_resource(
        resource_id: int,
        identity: SessionClaims = Depends(require_session),
        db: Database = Depends(get_database),
    ) -> Envelope[Any]:
        return Envelope(data=await service.get_owned(db, identity.uid, resource_id))

    @router.patch("/{resource_id}", response_model=Envelope[out_schema])
    async def update_my_resource(
        resource_id: int,
        payload: update_schema,  # type: ignore[valid-type]
        identity: SessionClaims = Depends(require_session),
        db: Database = Depends(get_database),
    ) -> Envelope[Any]:
        updated = await service.update(db, identity.uid, resource_id, payload)
        return Envelope(data=updated, message=f"{label} updated")

    @router.delete("/{resource_id}", response_model=Envelope[dict[str, bool]])
    async def delete_my_resource(
        resource_id: int,
        identity: SessionClaims = Depends(require_session),
        db: Database = Depends(get_database),
    ) -> Envelope[Any]:
        await service.delete(db, identity.uid, resource_id)
        return Envelope(data={"deleted": True}, message=f"{label} deleted")
