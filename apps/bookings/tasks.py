"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import complete_finished_bookings as complete_finished

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings(batch_size: int = 100) -> dict[str, int]:
    """
    Complete confirmed bookings whose checkout date has passed.

    Runs hourly as the system actor.

    Returns:
        dict: {"completed": number of completed bookings}
    """
    completed = complete_finished(batch_size=batch_size)

    if completed:
        logger.info(f"Completed {len(completed)} bookings")

    return {"completed": len(completed)}
