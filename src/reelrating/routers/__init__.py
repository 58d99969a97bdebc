"""ReelRating API routers package."""

from . import ratings
from . import tags

__all__ = [
    "ratings",
    "tags",
]
