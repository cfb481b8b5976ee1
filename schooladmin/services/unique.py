"""Create records that carry a unique business key.

The pre-check only gives early, friendly feedback: two concurrent callers can
both pass it. The unique index in MongoDB is what actually keeps keys
unique, so a unique violation raised by the insert is reported exactly like
a failed pre-check.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from schooladmin.core.exceptions import DuplicateKeyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def create_unique(
    *,
    entity: str,
    field: str,
    value: Any,
    exists: Callable[[], Awaitable[bool]],
    insert: Callable[[], Awaitable[int]],
    fetch: Callable[[int], Awaitable[Optional[T]]],
) -> T:
    """Insert after a pre-check, translating storage unique violations.

    ``value`` of None means the entity has no key for this record: no
    pre-check runs and storage errors are not translated.
    """
    if value is not None and await exists():
        logger.warning("%s create rejected: %s '%s' already exists", entity, field, value)
        raise DuplicateKeyError(entity, field, value)

    try:
        new_id = await insert()
    except MongoDuplicateKeyError as e:
        if value is None:
            raise
        logger.warning("%s create lost a race on %s '%s'", entity, field, value)
        raise DuplicateKeyError(entity, field, value) from e

    created = await fetch(new_id)
    if created is None:
        raise RuntimeError(f"{entity} {new_id} was inserted but could not be read back")
    return created


async def update_unique(
    *,
    entity: str,
    field: str,
    value: Any,
    exists: Callable[[], Awaitable[bool]],
    update: Callable[[], Awaitable[bool]],
) -> bool:
    """Same contract as create_unique for an update that changes the key."""
    if value is not None and await exists():
        logger.warning("%s update rejected: %s '%s' already exists", entity, field, value)
        raise DuplicateKeyError(entity, field, value)
    try:
        return await update()
    except MongoDuplicateKeyError as e:
        if value is None:
            raise
        raise DuplicateKeyError(entity, field, value) from e
