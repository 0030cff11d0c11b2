"""Account workflows against the database."""

from __future__ import annotations

from django.core import mail
from django.test import TestCase

from apps.users import services
from apps.users.domain.entities import ActingUser, Role
from apps.users.infrastructure.repositories import DjangoUserRepository
from apps.users.models import User as UserModel
from shared.application.context import RequestContext
from shared.domain.exceptions import InvalidInputError
from shared.tests.fakes import make_user


class UserServiceTests(TestCase):

    def test_register_persists_and_sends_welcome_after_commit(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            user = services.register_user("Welcome@Example.com", phone="+7 700 123-45-67", role=Role.HOST)

        row = UserModel.objects.get(pk=user.id)
        self.assertEqual(row.email, "welcome@example.com")
        self.assertEqual(row.phone, "+77001234567")
        self.assertEqual(row.role, UserModel.Role.HOST)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["welcome@example.com"])
        self.assertEqual(mail.outbox[0].subject, "Welcome to Nestly")
        self.assertIn("host account", mail.outbox[0].body)

    def test_duplicate_registration(self) -> None:
        services.register_user("twice@example.com")
        with self.assertRaises(InvalidInputError):
            services.register_user("TWICE@example.com")
        self.assertEqual(UserModel.objects.count(), 1)

    def test_admin_workflow(self) -> None:
        user = services.register_user("member@example.com")
        admin = ActingUser.system()

        services.change_role(user.as_actor(), user.id, Role.HOST)
        services.change_role(admin, user.id, Role.ADMIN)
        services.set_banned(admin, user.id, True)

        row = UserModel.objects.get(pk=user.id)
        self.assertEqual(row.role, UserModel.Role.ADMIN)
        self.assertTrue(row.is_banned)

        page = services.list_users(admin, role=Role.ADMIN)
        self.assertEqual([found.id for found in page.items], [user.id])

    def test_deactivate_without_bookings(self) -> None:
        user = services.register_user("leaving@example.com")
        services.deactivate_user(user.as_actor(), user.id)

        self.assertFalse(UserModel.objects.get(pk=user.id).is_active)
        self.assertFalse(services.get_user(user.as_actor(), user.id).is_active)


class UserRepositoryTests(TestCase):

    def setUp(self) -> None:
        self.ctx = RequestContext.background()
        self.repo = DjangoUserRepository()

    def test_round_trip_and_lookup_by_email(self) -> None:
        user = make_user(Role.HOST, email="lookup@example.com", phone="+77001234567")
        self.repo.save(self.ctx, user)

        loaded = self.repo.get_by_email(self.ctx, "  LOOKUP@example.com ")
        self.assertEqual(loaded.id, user.id)
        self.assertIs(loaded.role, Role.HOST)
        self.assertEqual(loaded.phone, "+77001234567")
        self.assertIsNone(self.repo.get_by_email(self.ctx, "missing@example.com"))

    def test_filters_and_paging(self) -> None:
        for role in (Role.GUEST, Role.GUEST, Role.HOST):
            self.repo.save(self.ctx, make_user(role))

        self.assertEqual(self.repo.count(self.ctx), 3)
        self.assertEqual(self.repo.count(self.ctx, role=Role.GUEST), 2)
        self.assertEqual(len(self.repo.list(self.ctx, limit=2, offset=1)), 2)
        self.assertEqual([user.role for user in self.repo.list(self.ctx, role=Role.HOST)], [Role.HOST])
