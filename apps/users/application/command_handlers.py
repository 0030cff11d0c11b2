"""
User Command Handlers

Commands:
- RegisterUserCommand: Create a guest or host account
- UpdateUserCommand: Change email / phone
- ChangeRoleCommand: Switch role following the role transition table
- SetUserBanCommand: Ban or unban an account (admin)
- DeactivateUserCommand: Logically delete an account
"""

from dataclasses import dataclass
from uuid import UUID
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email

from apps.users.domain.entities import ActingUser, Role, User
from apps.users.domain.policies import Action, Resource, authorize
from shared.application.context import RequestContext
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


def _validated_email(email: str) -> str:
    email = (email or '').strip().lower()
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidInputError(f"Invalid email address: {email!r}")
    return email


# ===== Commands =====

@dataclass
class RegisterUserCommand:
    email: str
    phone: str = ''
    role: Role = Role.GUEST


@dataclass
class UpdateUserCommand:
    actor: ActingUser
    user_id: UUID
    email: str | None = None
    phone: str | None = None


@dataclass
class ChangeRoleCommand:
    actor: ActingUser
    user_id: UUID
    new_role: Role


@dataclass
class SetUserBanCommand:
    actor: ActingUser
    user_id: UUID
    banned: bool


@dataclass
class DeactivateUserCommand:
    actor: ActingUser
    user_id: UUID


# ===== Command Handlers =====

class _UserHandler:

    def __init__(self, user_repo, *, uow_factory=DjangoUnitOfWork):
        self.user_repo = user_repo
        self.uow_factory = uow_factory

    def _load(self, ctx: RequestContext, user_id: UUID) -> User:
        user = self.user_repo.get_by_id(ctx, user_id)
        if not user:
            raise NotFoundError('User', user_id)
        return user


class RegisterUserHandler(_UserHandler):
    """Registers an account; the welcome email goes out after commit"""

    def handle(self, command: RegisterUserCommand, ctx: RequestContext | None = None) -> User:
        ctx = ctx or RequestContext.background()
        email = _validated_email(command.email)

        with self.uow_factory() as uow:
            if self.user_repo.get_by_email(ctx, email):
                raise InvalidInputError(f"Email {email} is already registered")

            user = User.register(email=email, phone=command.phone, role=command.role)
            uow.collect_events(user)
            self.user_repo.save(ctx, user)

        logger.info(f"Registered user {user.id} as {user.role.value}")
        return user


class UpdateUserHandler(_UserHandler):

    def handle(self, command: UpdateUserCommand, ctx: RequestContext | None = None) -> User:
        ctx = ctx or RequestContext.background()
        authorize(command.actor, Resource.for_user(command.user_id), Action.UPDATE_USER)

        email = _validated_email(command.email) if command.email else None

        with self.uow_factory() as uow:
            user = self._load(ctx, command.user_id)

            if email and email != user.email:
                existing = self.user_repo.get_by_email(ctx, email)
                if existing and existing.id != user.id:
                    raise InvalidInputError(f"Email {email} is already in use")

            user.update_contacts(email=email, phone=command.phone)
            uow.collect_events(user)
            self.user_repo.save(ctx, user)

        logger.info(f"User {user.id} updated by {command.actor.id}")
        return user


class ChangeRoleHandler(_UserHandler):
    """
    Role change

    Guests and hosts may switch between themselves; only an admin may
    change another user's role or grant ADMIN.
    """

    def handle(self, command: ChangeRoleCommand, ctx: RequestContext | None = None) -> User:
        ctx = ctx or RequestContext.background()
        resource = Resource.for_user(command.user_id)

        authorize(command.actor, resource, Action.CHANGE_ROLE)
        if command.new_role is Role.ADMIN:
            authorize(command.actor, resource, Action.GRANT_ADMIN)

        with self.uow_factory() as uow:
            user = self._load(ctx, command.user_id)
            user.change_role(command.new_role)
            uow.collect_events(user)
            self.user_repo.save(ctx, user)

        logger.info(f"User {user.id} role changed to {user.role.value} by {command.actor.id}")
        return user


class SetUserBanHandler(_UserHandler):

    def handle(self, command: SetUserBanCommand, ctx: RequestContext | None = None) -> User:
        ctx = ctx or RequestContext.background()
        authorize(command.actor, Resource.for_user(command.user_id), Action.BAN_USER)

        with self.uow_factory():
            user = self._load(ctx, command.user_id)
            if command.banned:
                user.ban()
            else:
                user.unban()
            self.user_repo.save(ctx, user)

        logger.warning(
            f"User {user.id} {'banned' if command.banned else 'unbanned'} by {command.actor.id}"
        )
        return user


class DeactivateUserHandler(_UserHandler):
    """
    Logical account deletion

    Refused while the user still has created or confirmed bookings, since
    those keep referencing the account.
    """

    def __init__(self, user_repo, booking_repo, *, uow_factory=DjangoUnitOfWork):
        super().__init__(user_repo, uow_factory=uow_factory)
        self.booking_repo = booking_repo

    def handle(self, command: DeactivateUserCommand, ctx: RequestContext | None = None) -> User:
        ctx = ctx or RequestContext.background()
        authorize(command.actor, Resource.for_user(command.user_id), Action.DELETE_USER)

        from apps.bookings.domain.entities import ACTIVE_STATUSES

        with self.uow_factory():
            user = self._load(ctx, command.user_id)
            if self.booking_repo.exists_for_user(ctx, user.id, ACTIVE_STATUSES):
                raise InvalidInputError(f"User {user.id} still has active bookings")

            user.deactivate()
            self.user_repo.save(ctx, user)

        logger.info(f"User {user.id} deactivated by {command.actor.id}")
        return user
