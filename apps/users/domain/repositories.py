"""
User Repository Interface

Implemented by apps.users.infrastructure.repositories (Django ORM).
Lookups return None when nothing matches; storage failures raise
StorageError.
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from apps.users.domain.entities import Role, User
from shared.application.context import RequestContext


class UserRepository(ABC):

    @abstractmethod
    def get_by_id(self, ctx: RequestContext, user_id: UUID) -> User | None:
        """Find a user by id"""

    @abstractmethod
    def get_by_email(self, ctx: RequestContext, email: str) -> User | None:
        """Find a user by (case-insensitive) email"""

    @abstractmethod
    def list(
        self,
        ctx: RequestContext,
        role: Role | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[User]:
        """List users ordered by creation time, optionally filtered by role"""

    @abstractmethod
    def count(self, ctx: RequestContext, role: Role | None = None) -> int:
        """Count users, optionally filtered by role"""

    @abstractmethod
    def exists(self, ctx: RequestContext, user_id: UUID) -> bool:
        """Check whether a user exists"""

    @abstractmethod
    def save(self, ctx: RequestContext, user: User):
        """Insert or update a user"""
