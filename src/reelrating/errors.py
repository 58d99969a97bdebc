"""Exceptions raised by the rating and tag core."""

import logging
from contextlib import contextmanager

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class ReelRatingError(Exception):
    """Base class for ReelRating errors."""


class StoreUnavailableError(ReelRatingError):
    """The rating/tag store could not be reached or timed out."""


# Connection and pool failures. IntegrityError and friends are programming
# or data errors and propagate untouched.
_UNAVAILABLE_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.DisconnectionError,
    sa_exc.TimeoutError,
)


@contextmanager
def store_errors(db: Session, operation: str):
    """Translate store connectivity failures into StoreUnavailableError."""
    try:
        yield
    except _UNAVAILABLE_ERRORS as e:
        logger.error("Store unavailable during %s", operation, exc_info=True)
        db.rollback()
        raise StoreUnavailableError(f"Store unavailable during {operation}: {e}") from e
