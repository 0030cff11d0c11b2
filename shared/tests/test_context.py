"""Tests for request deadlines and the storage call guard."""

from __future__ import annotations

import time

from django.db import DatabaseError
from django.test import SimpleTestCase

from shared.application.context import RequestContext
from shared.domain.exceptions import CancelledError, StorageError
from shared.infrastructure.storage import storage_call


class RequestContextTests(SimpleTestCase):

    def test_background_context_never_expires(self) -> None:
        ctx = RequestContext.background()
        self.assertIsNone(ctx.remaining())
        self.assertFalse(ctx.expired)
        ctx.check("anything")

    def test_expired_deadline_cancels(self) -> None:
        ctx = RequestContext(deadline=time.monotonic() - 1)
        self.assertTrue(ctx.expired)
        self.assertEqual(ctx.remaining(), 0.0)
        with self.assertRaises(CancelledError) as caught:
            ctx.check("bookings.save")
        self.assertEqual(caught.exception.operation, "bookings.save")

    def test_with_timeout_sets_future_deadline(self) -> None:
        ctx = RequestContext.with_timeout(30)
        self.assertFalse(ctx.expired)
        self.assertGreater(ctx.remaining(), 25)


class StorageCallTests(SimpleTestCase):

    def test_wraps_database_errors(self) -> None:
        driver_error = DatabaseError("connection reset")
        with self.assertRaises(StorageError) as caught:
            with storage_call(RequestContext.background(), "bookings.save", "b-1"):
                raise driver_error

        self.assertEqual(caught.exception.operation, "bookings.save")
        self.assertEqual(caught.exception.entity_id, "b-1")
        self.assertIs(caught.exception.__cause__, driver_error)
        self.assertNotIn("connection reset", str(caught.exception))

    def test_checks_deadline_before_touching_storage(self) -> None:
        touched = []
        with self.assertRaises(CancelledError):
            with storage_call(RequestContext(deadline=time.monotonic() - 1), "users.get_by_id"):
                touched.append(True)
        self.assertEqual(touched, [])

    def test_domain_errors_pass_through(self) -> None:
        with self.assertRaises(KeyError):
            with storage_call(None, "users.list"):
                raise KeyError("not a database error")
