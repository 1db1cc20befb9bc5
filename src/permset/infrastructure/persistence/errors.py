"""Translation of store failures into domain errors."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from permset.application.ports.store_adapter import (
    ConstraintViolationError,
    StoreError,
    is_duplicate_key_error,
)
from permset.domain.exceptions import Conflict, DatabaseError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation: str, *, duplicate_code: str = "DUPLICATE_ENTRY") -> Iterator[None]:
    """Re-raise store failures as Conflict or DatabaseError.

    Raw store text is logged, never carried into the domain error message.
    """
    try:
        yield
    except StoreError as e:
        if is_duplicate_key_error(e):
            logger.info("%s rejected: duplicate key (%s)", operation, e)
            raise Conflict(code=duplicate_code) from e
        if isinstance(e, ConstraintViolationError):
            logger.info("%s rejected: constraint violation (%s)", operation, e)
            raise Conflict(code="CONSTRAINT_VIOLATION") from e
        logger.error("%s failed: %s", operation, e)
        raise DatabaseError() from e
