"""Repository layer: one class per aggregate, each bound to an ``AsyncSession``."""

from realty.db.repositories.agent_repository import AgentRepository
from realty.db.repositories.email_repository import EmailRepository
from realty.db.repositories.engagement_repository import (
    InquiryRepository,
    PriceAlertRepository,
    SearchHistoryRepository,
)
from realty.db.repositories.favorites_repository import FavoritesRepository
from realty.db.repositories.property_repository import PropertyRepository
from realty.db.repositories.user_repository import UserRepository

__all__ = [
    "AgentRepository",
    "EmailRepository",
    "FavoritesRepository",
    "InquiryRepository",
    "PriceAlertRepository",
    "PropertyRepository",
    "SearchHistoryRepository",
    "UserRepository",
]
