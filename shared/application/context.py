"""
Request Context

Carries the caller's deadline through every use case and storage call.
Storage adapters call ``ctx.check()`` before touching the database, so an
expired deadline aborts the operation with CancelledError instead of
blocking.
"""

import time
from dataclasses import dataclass, field
from uuid import uuid4

from shared.domain.exceptions import CancelledError


@dataclass(frozen=True)
class RequestContext:
    """
    Cancellation scope of a single caller request

    deadline is a ``time.monotonic()`` timestamp; None means no deadline.
    """
    deadline: float | None = None
    request_id: str = field(default_factory=lambda: uuid4().hex)

    @classmethod
    def background(cls) -> 'RequestContext':
        """Context without deadline (periodic tasks, shell usage)"""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> 'RequestContext':
        return cls(deadline=time.monotonic() + seconds)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, never negative"""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self, operation: str):
        """Raise CancelledError if the deadline has passed"""
        if self.expired:
            raise CancelledError(operation)
