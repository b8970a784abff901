"""History repositories package."""

from modules.history.repositories.django_repository import HistoryDjangoRepository
from modules.history.repositories.interfaces import IHistoryRepository

__all__ = ["HistoryDjangoRepository", "IHistoryRepository"]
