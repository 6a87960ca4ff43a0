"""세션 로그인·조회 스키마."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import ApiModel, RequestModel


class SensitiveFields(RequestModel):
    """로그인 시 함께 보낼 수 있는 opt-in 민감 정보. 저장값이 비어 있을 때만 기록."""

    phone: str | None = Field(None, max_length=64)
    religion: str | None = Field(None, max_length=64)
    country: str | None = Field(None, max_length=64)


class LoginRequest(RequestModel):
    token: str = Field(..., min_length=1, max_length=8192, description="Clerk 세션 JWT")
    sensitive: SensitiveFields | None = None


class SessionUser(ApiModel):
    """세션 응답의 최소 신원 + 결제 요약."""

    id: int
    clerk_id: str
    username: str | None = None
    email: str | None = None
    display_name: str
    avatar_url: str | None = None
    role: str
    plan: str | None = None
    subscription_status: str | None = None
    current_period_end: datetime | None = None
