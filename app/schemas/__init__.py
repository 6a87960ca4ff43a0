# Pydantic schemas
from app.schemas.common import ApiModel, Envelope, Page, PatchModel, RequestModel

__all__ = [
    "ApiModel",
    "Envelope",
    "Page",
    "PatchModel",
    "RequestModel",
]
