"""Account repositories package."""

from modules.accounts.repositories.django_repository import (
    PrivilegedProfileLookup,
    ProfileDjangoRepository,
)
from modules.accounts.repositories.interfaces import IProfileLookup, IProfileRepository

__all__ = [
    "IProfileLookup",
    "IProfileRepository",
    "PrivilegedProfileLookup",
    "ProfileDjangoRepository",
]
