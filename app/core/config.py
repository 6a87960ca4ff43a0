"""환경 변수 기반 설정. pydantic-settings 사용."""

from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """앱 설정. 환경변수에서 로드. 시크릿은 SecretStr로 마스킹, 필수 시크릿은 기본값 없음(Fail-fast)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # 관측
    sentry_dsn: SecretStr | None = None
    environment: str = "development"  # production, staging, development 등.

    # DB
    database_url: str | None = None
    db_connect_retries: int = Field(5, ge=1, le=20)
    db_connect_retry_interval_sec: float = Field(2.0, ge=0.5, le=60.0)

    # 세션 쿠키 (필수: SESSION_SECRET 기본값 없음 → 부팅 시점 Fail-fast)
    session_secret: SecretStr
    session_cookie_name: str = "streakling_session"
    session_expire_seconds: int = Field(3600, ge=60, le=86400)  # 1시간
    session_issuer: str = "streakling"
    session_audience: str = "streakling-web"
    # 요청 Host가 이 도메인의 서브도메인일 때만 Domain 속성 부여. localhost는 무시.
    cookie_domain: str | None = None
    cookie_secure: bool = False
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"

    # Clerk (외부 인증)
    clerk_secret_key: SecretStr
    # Clerk Frontend API 주소. JWKS(.well-known) 조회와 iss 검증에 사용.
    clerk_issuer: str = ""
    clerk_api_url: str = "https://api.clerk.com/v1"
    clerk_timeout_seconds: float = Field(10.0, ge=1.0, le=60.0)

    # Redis (세션 Blocklist)
    redis_url: str | None = None
    redis_socket_timeout: float = Field(5.0, ge=1.0, le=60.0)
    redis_socket_connect_timeout: float = Field(2.0, ge=0.5, le=30.0)
    # True=Fail-Closed(Redis 장애 시 세션 거부), False=Fail-Open(서명만 검증 후 통과).
    redis_blocklist_fail_closed: bool = True
    redis_blocklist_max_connections: int = Field(20, ge=1, le=100)

    # Stripe
    stripe_secret_key: SecretStr | None = None
    # 환경별(test/live) price id. 현재 계정에 없으면 lookup_key → 생성 순으로 폴백.
    stripe_price_basic: str | None = None
    stripe_price_pro: str | None = None
    stripe_price_ultimate: str | None = None
    stripe_portal_return_url: str = "http://localhost:3000/settings/billing"

    # 프론트엔드 Origin (결제 success/cancel URL) 및 CORS
    app_origin: str = "http://localhost:3000"
    allowed_origins: str = "http://localhost:3000"

    @model_validator(mode="after")
    def fail_fast_production(self: "Settings") -> "Settings":
        """프로덕션 환경 시 필수 변수 누락이면 부팅 거부(Fail-Fast)."""
        if (self.environment or "").strip().lower() != "production":
            return self
        missing: list[str] = []
        if not (self.database_url or "").strip():
            missing.append("DATABASE_URL")
        if not (self.session_secret.get_secret_value() or "").strip():
            missing.append("SESSION_SECRET")
        if not (self.clerk_secret_key.get_secret_value() or "").strip():
            missing.append("CLERK_SECRET_KEY")
        if not (self.clerk_issuer or "").strip():
            missing.append("CLERK_ISSUER")
        if self.stripe_secret_key is None or not self.stripe_secret_key.get_secret_value().strip():
            missing.append("STRIPE_SECRET_KEY")
        if missing:
            raise ValueError(
                f"Production environment requires these variables to be set: {', '.join(missing)}. "
                "Set them in Secret Manager or environment before boot."
            )
        if not self.cookie_secure:
            raise ValueError("COOKIE_SECURE must be true in production.")
        return self


settings = Settings()
