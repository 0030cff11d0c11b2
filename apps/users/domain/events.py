"""
User Domain Events
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class UserRegistered(DomainEvent):
    """
    Event: A new account was registered

    Triggers:
    - Send welcome email
    """
    user_id: UUID
    email: str
    role: str


@dataclass
class UserRoleChanged(DomainEvent):
    """Event: A user's role changed"""
    user_id: UUID
    old_role: str
    new_role: str
