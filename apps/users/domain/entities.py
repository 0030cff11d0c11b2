"""
User Domain Entities

- Role: guest / host / admin
- User: platform account aggregate
- ActingUser: identity of whoever invokes a use case
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from shared.domain.base import Aggregate
from shared.domain.exceptions import InvalidInputError, InvalidTransitionError


class Role(Enum):
    """
    User roles

    Role transitions:
    - GUEST -> HOST (self-service)
    - HOST -> GUEST (self-service)
    - HOST -> ADMIN (granted by an admin only)
    - ADMIN -> HOST, ADMIN -> GUEST (downgrade)
    """
    GUEST = 'guest'
    HOST = 'host'
    ADMIN = 'admin'


ROLE_TRANSITIONS = {
    Role.GUEST: frozenset({Role.HOST}),
    Role.HOST: frozenset({Role.GUEST, Role.ADMIN}),
    Role.ADMIN: frozenset({Role.HOST, Role.GUEST}),
}

SELF_SERVICE_ROLES = frozenset({Role.GUEST, Role.HOST})


@dataclass(frozen=True)
class ActingUser:
    """
    Who is performing an operation

    Supplied by the transport layer from its own authentication; the core
    treats it as an opaque, trusted input.
    """
    id: UUID
    role: Role

    SYSTEM_ID = UUID(int=0)

    @classmethod
    def system(cls) -> 'ActingUser':
        """Actor used by periodic tasks; carries admin rights"""
        return cls(id=cls.SYSTEM_ID, role=Role.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_host(self) -> bool:
        return self.role in (Role.HOST, Role.ADMIN)


@dataclass(eq=False)
class User(Aggregate):
    """
    User Aggregate Root

    Key invariants:
    - email is present and stored lower-cased
    - role changes follow ROLE_TRANSITIONS
    - a banned or deactivated user cannot book
    """
    email: str
    phone: str = ''
    role: Role = Role.GUEST
    is_banned: bool = False
    is_active: bool = True

    def __post_init__(self):
        self.email = (self.email or '').strip().lower()
        if not self.email:
            raise InvalidInputError("Email is required")

    @classmethod
    def register(cls, email: str, phone: str = '', role: Role = Role.GUEST) -> 'User':
        """Create a new account and record UserRegistered"""
        if role not in SELF_SERVICE_ROLES:
            raise InvalidInputError(f"Cannot register with role {role.value}")

        from apps.users.domain.events import UserRegistered

        user = cls(email=email, phone=phone, role=role)
        user.add_event(UserRegistered(
            aggregate_id=user.id,
            user_id=user.id,
            email=user.email,
            role=role.value,
        ))
        return user

    def change_role(self, new_role: Role):
        """Move to another role following ROLE_TRANSITIONS"""
        if new_role not in ROLE_TRANSITIONS[self.role]:
            raise InvalidTransitionError(self.role.value, new_role.value, entity='user role')

        from apps.users.domain.events import UserRoleChanged

        old_role = self.role
        self.role = new_role
        self.touch()

        self.add_event(UserRoleChanged(
            aggregate_id=self.id,
            user_id=self.id,
            old_role=old_role.value,
            new_role=new_role.value,
        ))

    def update_contacts(self, email: str | None = None, phone: str | None = None):
        if email is not None:
            email = email.strip().lower()
            if not email:
                raise InvalidInputError("Email must not be empty")
            self.email = email
        if phone is not None:
            self.phone = phone.strip()
        self.touch()

    def ban(self):
        self.is_banned = True
        self.touch()

    def unban(self):
        self.is_banned = False
        self.touch()

    def deactivate(self):
        """Logical deletion; history that references the user stays intact"""
        self.is_active = False
        self.touch()

    @property
    def can_book(self) -> bool:
        return self.is_active and not self.is_banned

    @property
    def can_host(self) -> bool:
        return self.is_active and self.role in (Role.HOST, Role.ADMIN)

    def as_actor(self) -> ActingUser:
        return ActingUser(id=self.id, role=self.role)

    def __str__(self):
        return f"User {self.email} ({self.role.value})"
