"""Tests for the per-key lock registry."""

from __future__ import annotations

import threading
import time

from django.test import SimpleTestCase

from shared.application.context import RequestContext
from shared.application.locks import KeyedLock
from shared.domain.exceptions import CancelledError


class KeyedLockTests(SimpleTestCase):

    def test_same_key_is_mutually_exclusive(self) -> None:
        locks = KeyedLock()
        inside = []
        overlaps = []

        def worker() -> None:
            with locks.hold("listing-1"):
                inside.append(1)
                if len(inside) > 1:
                    overlaps.append(True)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(overlaps, [])
        self.assertEqual(len(locks), 0)

    def test_different_keys_do_not_block(self) -> None:
        locks = KeyedLock(default_timeout=0.1)
        with locks.hold("listing-1"):
            with locks.hold("listing-2"):
                self.assertEqual(len(locks), 2)

    def test_wait_is_bounded_by_timeout(self) -> None:
        locks = KeyedLock()
        held = threading.Event()
        release = threading.Event()

        def holder() -> None:
            with locks.hold("listing-1"):
                held.set()
                release.wait(2)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(2)
        try:
            with self.assertRaises(CancelledError):
                with locks.hold("listing-1", timeout=0.05):
                    pass
        finally:
            release.set()
            thread.join()

    def test_wait_is_bounded_by_caller_deadline(self) -> None:
        locks = KeyedLock(default_timeout=30)
        held = threading.Event()
        release = threading.Event()

        def holder() -> None:
            with locks.hold("listing-1"):
                held.set()
                release.wait(2)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(2)
        started = time.monotonic()
        try:
            with self.assertRaises(CancelledError):
                with locks.hold("listing-1", RequestContext.with_timeout(0.05)):
                    pass
        finally:
            release.set()
            thread.join()
        self.assertLess(time.monotonic() - started, 5)

    def test_expired_context_fails_fast(self) -> None:
        locks = KeyedLock()
        with self.assertRaises(CancelledError):
            with locks.hold("listing-1", RequestContext(deadline=time.monotonic() - 1)):
                pass
        self.assertEqual(len(locks), 0)
