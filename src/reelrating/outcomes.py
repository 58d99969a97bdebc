"""Result values returned by rating and tag writes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WriteStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"


REASON_VALUE_OUT_OF_RANGE = "value_out_of_range"
REASON_INVALID_UPPERBOUND = "invalid_upperbound"
REASON_NOT_AN_INTEGER = "not_an_integer"
REASON_MOVIE_NOT_FOUND = "movie_not_found"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a write.

    Rejections are not raised: callers that only care about the legacy
    "always OK" behaviour can ignore the result entirely.
    """

    status: WriteStatus
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status != WriteStatus.REJECTED

    @classmethod
    def rejected(cls, reason: str) -> "WriteResult":
        return cls(WriteStatus.REJECTED, reason)
