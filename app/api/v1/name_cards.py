"""Digital Name Card API."""

from fastapi import APIRouter

from app.api.v1.resources import register_resource_routes
from app.schemas.name_card import NameCardCreate, NameCardOut, NameCardUpdate
from app.services.name_card_service import name_card_service

router = APIRouter(prefix="/digital-name-cards", tags=["digital-name-cards"])

register_resource_routes(
    router,
    name_card_service,
    create_schema=NameCardCreate,
    update_schema=NameCardUpdate,
    out_schema=NameCardOut,
    label="Card",
)
