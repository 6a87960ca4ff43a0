"""문자열 컬럼에 저장되는 열거값. DB enum 타입 대신 String + 스키마 검증."""

from enum import StrEnum


class Role(StrEnum):
    USER = "USER"
    ADMIN = "ADMIN"


class PublishStatus(StrEnum):
    DRAFT = "DRAFT"
    PRIVATE = "PRIVATE"  # 포트폴리오·챌린지만 사용
    PUBLISHED = "PUBLISHED"


class CardStatus(StrEnum):
    STUDENT = "STUDENT"
    GRADUATE = "GRADUATE"
    WORKING = "WORKING"


class ChallengeStatus(StrEnum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    ARCHIVED = "ARCHIVED"


class SubmissionStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WINNER = "WINNER"


class Plan(StrEnum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ULTIMATE = "ultimate"


class SocialPlatform(StrEnum):
    TWITTER = "TWITTER"
    INSTAGRAM = "INSTAGRAM"
    FACEBOOK = "FACEBOOK"
    LINKEDIN = "LINKEDIN"
    TIKTOK = "TIKTOK"
    YOUTUBE = "YOUTUBE"
    GITHUB = "GITHUB"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"
