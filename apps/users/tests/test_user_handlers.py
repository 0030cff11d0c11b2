"""Use-case tests for account management against in-memory repositories."""

from __future__ import annotations

from datetime import date
from uuid import uuid4

from django.test import SimpleTestCase

from apps.bookings.domain.entities import Booking
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
from apps.users.domain.entities import Role
from apps.users.domain.events import UserRegistered
from shared.application.context import RequestContext
from shared.domain.exceptions import InvalidInputError, NotFoundError, UnauthorizedError
from shared.domain.value_objects import DateRange
from shared.tests.fakes import (
    InMemoryBookingRepository,
    InMemoryUserRepository,
    UnitOfWorkFactory,
    make_user,
)


class UserTestMixin:

    def setUp(self) -> None:
        self.ctx = RequestContext.background()
        self.guest = make_user(Role.GUEST, email="guest@example.com")
        self.host = make_user(Role.HOST, email="host@example.com")
        self.admin = make_user(Role.ADMIN, email="admin@example.com")
        self.users = InMemoryUserRepository(self.guest, self.host, self.admin)
        self.uow = UnitOfWorkFactory()

    def stored(self, user):
        return self.users.get_by_id(self.ctx, user.id)


class RegisterUserTests(UserTestMixin, SimpleTestCase):

    def register(self, email, role=Role.GUEST):
        handler = RegisterUserHandler(self.users, uow_factory=self.uow)
        return handler.handle(RegisterUserCommand(email=email, role=role))

    def test_register(self) -> None:
        user = self.register("New.Host@Example.com", Role.HOST)

        self.assertEqual(self.stored(user).email, "new.host@example.com")
        self.assertIs(user.role, Role.HOST)
        self.assertIsInstance(self.uow.published[-1], UserRegistered)

    def test_duplicate_email(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.register("GUEST@example.com")
        self.assertEqual(self.uow.published, [])

    def test_invalid_email(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.register("not-an-email")


class UpdateUserTests(UserTestMixin, SimpleTestCase):

    def update(self, actor, user, **changes):
        handler = UpdateUserHandler(self.users, uow_factory=self.uow)
        return handler.handle(UpdateUserCommand(actor=actor, user_id=user.id, **changes))

    def test_update_own_contacts(self) -> None:
        self.update(self.guest.as_actor(), self.guest, email="renamed@example.com", phone=" +77001112233 ")

        stored = self.stored(self.guest)
        self.assertEqual(stored.email, "renamed@example.com")
        self.assertEqual(stored.phone, "+77001112233")

    def test_email_taken_by_someone_else(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.update(self.guest.as_actor(), self.guest, email="host@example.com")

    def test_cannot_update_someone_else(self) -> None:
        with self.assertRaises(UnauthorizedError):
            self.update(self.host.as_actor(), self.guest, phone="+77000000000")


class ChangeRoleTests(UserTestMixin, SimpleTestCase):

    def change(self, actor, user, role):
        handler = ChangeRoleHandler(self.users, uow_factory=self.uow)
        return handler.handle(ChangeRoleCommand(actor=actor, user_id=user.id, new_role=role))

    def test_guest_becomes_host_and_back(self) -> None:
        self.change(self.guest.as_actor(), self.guest, Role.HOST)
        self.assertIs(self.stored(self.guest).role, Role.HOST)

        self.change(self.stored(self.guest).as_actor(), self.guest, Role.GUEST)
        self.assertIs(self.stored(self.guest).role, Role.GUEST)

    def test_host_cannot_promote_self_to_admin(self) -> None:
        with self.assertRaises(UnauthorizedError):
            self.change(self.host.as_actor(), self.host, Role.ADMIN)
        self.assertIs(self.stored(self.host).role, Role.HOST)

    def test_admin_grants_admin_to_host(self) -> None:
        self.change(self.admin.as_actor(), self.host, Role.ADMIN)
        self.assertIs(self.stored(self.host).role, Role.ADMIN)

    def test_cannot_change_role_of_someone_else(self) -> None:
        with self.assertRaises(UnauthorizedError):
            self.change(self.host.as_actor(), self.guest, Role.HOST)

    def test_unknown_user(self) -> None:
        handler = ChangeRoleHandler(self.users, uow_factory=self.uow)
        with self.assertRaises(NotFoundError):
            handler.handle(ChangeRoleCommand(actor=self.admin.as_actor(), user_id=uuid4(), new_role=Role.HOST))


class BanAndDeactivateTests(UserTestMixin, SimpleTestCase):

    def test_only_admin_bans(self) -> None:
        handler = SetUserBanHandler(self.users, uow_factory=self.uow)
        with self.assertRaises(UnauthorizedError):
            handler.handle(SetUserBanCommand(actor=self.host.as_actor(), user_id=self.guest.id, banned=True))

        handler.handle(SetUserBanCommand(actor=self.admin.as_actor(), user_id=self.guest.id, banned=True))
        self.assertFalse(self.stored(self.guest).can_book)

        handler.handle(SetUserBanCommand(actor=self.admin.as_actor(), user_id=self.guest.id, banned=False))
        self.assertTrue(self.stored(self.guest).can_book)

    def test_deactivation_refused_with_active_bookings(self) -> None:
        booking = Booking.request(uuid4(), self.guest.id, DateRange(date(2025, 1, 10), date(2025, 1, 12)), 20000)
        bookings = InMemoryBookingRepository(booking)
        handler = DeactivateUserHandler(self.users, bookings, uow_factory=self.uow)

        with self.assertRaises(InvalidInputError):
            handler.handle(DeactivateUserCommand(actor=self.guest.as_actor(), user_id=self.guest.id))
        self.assertTrue(self.stored(self.guest).is_active)

        booking.cancel(date(2025, 1, 1))
        bookings.save(self.ctx, booking)
        handler.handle(DeactivateUserCommand(actor=self.guest.as_actor(), user_id=self.guest.id))
        self.assertFalse(self.stored(self.guest).is_active)


class UserQueriesTests(UserTestMixin, SimpleTestCase):

    def test_get_self_or_admin(self) -> None:
        queries = UserQueries(self.users)
        self.assertEqual(queries.get(self.guest.as_actor(), self.guest.id).id, self.guest.id)
        self.assertEqual(queries.get(self.admin.as_actor(), self.guest.id).id, self.guest.id)
        with self.assertRaises(UnauthorizedError):
            queries.get(self.host.as_actor(), self.guest.id)

    def test_list_is_admin_only(self) -> None:
        queries = UserQueries(self.users)
        page = queries.list(self.admin.as_actor(), role=Role.HOST)
        self.assertEqual([user.id for user in page.items], [self.host.id])
        self.assertEqual(page.total_count, 1)

        with self.assertRaises(UnauthorizedError):
            queries.list(self.host.as_actor())
