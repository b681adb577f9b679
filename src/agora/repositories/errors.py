"""Translation of driver failures into the forum error taxonomy."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from agora.core.errors import StorageError

logger = logging.getLogger(__name__)

__all__ = ["storage_guard", "is_unique_violation"]


def is_unique_violation(err: IntegrityError) -> bool:
    """Return True when ``err`` reports a UNIQUE constraint violation."""
    message = str(err.orig if err.orig is not None else err).lower()
    return "unique" in message or "duplicate key" in message


@contextmanager
def storage_guard(action: str) -> Iterator[None]:
    """Re-raise store failures inside the block as opaque :class:`StorageError`."""
    try:
        yield
    except SQLAlchemyError as err:
        logger.error("Storage failure while trying to %s: %s", action, err)
        raise StorageError() from err
