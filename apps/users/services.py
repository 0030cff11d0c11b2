"""Entry points for account workflows, wired to the Django repositories."""

from __future__ import annotations

from uuid import UUID

from apps.users.application.command_handlers import (
    ChangeRoleCommand,
    ChangeRoleHandler,
    DeactivateUserCommand,
    DeactivateUserHandler,
    RegisterUserCommand,
    RegisterUserHandler,
    SetUserBanCommand,
    SetUserBanHandler,
    UpdateUserCommand,
    UpdateUserHandler,
)
from apps.users.application.queries import UserQueries
from apps.users.domain.entities import ActingUser, Role, User
from apps.users.infrastructure.repositories import DjangoUserRepository
from shared.application.context import RequestContext
from shared.application.pagination import Page


def register_user(email: str, phone: str = "", role: Role = Role.GUEST, ctx: RequestContext | None = None) -> User:
    handler = RegisterUserHandler(DjangoUserRepository())
    return handler.handle(RegisterUserCommand(email=email, phone=phone, role=role), ctx)


def update_user(
    actor: ActingUser,
    user_id: UUID,
    *,
    email: str | None = None,
    phone: str | None = None,
    ctx: RequestContext | None = None,
) -> User:
    handler = UpdateUserHandler(DjangoUserRepository())
    return handler.handle(UpdateUserCommand(actor=actor, user_id=user_id, email=email, phone=phone), ctx)


def change_role(actor: ActingUser, user_id: UUID, new_role: Role, ctx: RequestContext | None = None) -> User:
    handler = ChangeRoleHandler(DjangoUserRepository())
    return handler.handle(ChangeRoleCommand(actor=actor, user_id=user_id, new_role=new_role), ctx)


def set_banned(actor: ActingUser, user_id: UUID, banned: bool, ctx: RequestContext | None = None) -> User:
    handler = SetUserBanHandler(DjangoUserRepository())
    return handler.handle(SetUserBanCommand(actor=actor, user_id=user_id, banned=banned), ctx)


def deactivate_user(actor: ActingUser, user_id: UUID, ctx: RequestContext | None = None) -> User:
    from apps.bookings.infrastructure.repositories import DjangoBookingRepository

    handler = DeactivateUserHandler(DjangoUserRepository(), DjangoBookingRepository())
    return handler.handle(DeactivateUserCommand(actor=actor, user_id=user_id), ctx)


def get_user(actor: ActingUser, user_id: UUID, ctx: RequestContext | None = None) -> User:
    return UserQueries(DjangoUserRepository()).get(actor, user_id, ctx)


def list_users(
    actor: ActingUser,
    role: Role | None = None,
    limit: int | None = None,
    offset: int | None = None,
    ctx: RequestContext | None = None,
) -> Page[User]:
    return UserQueries(DjangoUserRepository()).list(actor, role, limit, offset, ctx)
