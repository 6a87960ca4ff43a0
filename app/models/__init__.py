# ORM models
from app.models.base import Base
from app.models.challenge import Challenge, ChallengeImage, ChallengePrize, ChallengeSubmission
from app.models.name_card import DigitalNameCard, SocialAccount
from app.models.portfolio import (
    Portfolio,
    PortfolioEducation,
    PortfolioExperience,
    PortfolioImage,
    PortfolioProject,
    PortfolioVideoLink,
    ProjectImage,
    ProjectVideoLink,
)
from app.models.subscription import Subscription
from app.models.user import User

__all__ = [
    "Base",
    "Challenge",
    "ChallengeImage",
    "ChallengePrize",
    "ChallengeSubmission",
    "DigitalNameCard",
    "Portfolio",
    "PortfolioEducation",
    "PortfolioExperience",
    "PortfolioImage",
    "PortfolioProject",
    "PortfolioVideoLink",
    "ProjectImage",
    "ProjectVideoLink",
    "SocialAccount",
    "Subscription",
    "User",
]
