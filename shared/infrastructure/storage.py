"""
Storage call guard for Django repositories.

Every repository method runs its ORM work inside ``storage_call`` so that
an expired caller deadline aborts before the query and driver errors
leave the repository as StorageError.
"""

from contextlib import contextmanager
from typing import Any, Iterator
import logging

from django.db import DatabaseError

from shared.application.context import RequestContext
from shared.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_call(
    ctx: RequestContext | None,
    operation: str,
    entity_id: Any = None,
) -> Iterator[None]:
    (ctx or RequestContext.background()).check(operation)
    try:
        yield
    except DatabaseError as exc:
        logger.error(f"{operation} failed for {entity_id}: {exc}", exc_info=True)
        raise StorageError(operation, entity_id) from exc
