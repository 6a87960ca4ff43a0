"""도메인 예외 분류. 전역 핸들러(app.main)에서 공통 응답 봉투로 변환."""

from typing import Any

from sqlalchemy.exc import IntegrityError


class AppError(Exception):
    """HTTP 상태와 사용자 노출 메시지를 가진 기본 예외. 4xx는 fail, 5xx는 error 봉투."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, errors: Any = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Validation error"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    """리소스 없음 또는 타인 소유. 소유 여부를 노출하지 않기 위해 둘을 구분하지 않는다."""

    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class BillingError(AppError):
    """Stripe 호출 실패·예상 밖 응답. 내부 사유는 로그로만 남긴다."""

    status_code = 500
    default_message = "Billing provider error"


class UpstreamUnavailable(AppError):
    """외부 인증 제공자(Clerk) 타임아웃·연결 실패."""

    status_code = 503
    default_message = "Service temporarily unavailable"


def is_unique_violation(error: IntegrityError) -> bool:
    """IntegrityError가 unique 제약 위반(SQLSTATE 23505)이면 True."""
    original = getattr(error, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate == "23505":
        return True
    message = str(original or error).lower()
    return "duplicate key" in message or "unique constraint" in message
