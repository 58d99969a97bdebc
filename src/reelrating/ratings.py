"""Rating upserts and per-movie rating aggregation.

A rating category is the pair (category_name, upperbound). Each user holds at
most one rating per category per movie; resubmitting overwrites the value.
Aggregates are computed on every read and never cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from reelrating.database import upsert_insert
from reelrating.errors import store_errors
from reelrating.metadata import Rating
from reelrating.movies import MovieLookup
from reelrating.outcomes import (
    REASON_INVALID_UPPERBOUND,
    REASON_MOVIE_NOT_FOUND,
    REASON_NOT_AN_INTEGER,
    REASON_VALUE_OUT_OF_RANGE,
    WriteResult,
    WriteStatus,
)


logger = logging.getLogger(__name__)

RATING_KEY_COLUMNS = ["movie_id", "category_name", "upperbound", "username"]


@dataclass(frozen=True)
class AggregateRating:
    """Most popular category on a movie and the average value within it."""

    movie_id: str
    category_name: str
    upperbound: int
    average_value: float
    count: int


@dataclass(frozen=True)
class CategoryAverage:
    """Average of one rating category, plus the requester's own value if any."""

    movie_id: str
    category_name: str
    upperbound: int
    subtype: Optional[str]
    average_value: float
    count: int
    user_value: Optional[int] = None
    username: Optional[str] = None


def _coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    raw = str(value if value is not None else "").strip()
    try:
        return int(raw)
    except ValueError:
        return None


class RatingAggregator:
    """Writes ratings and builds the per-movie rating summaries."""

    def __init__(self, db: Session, movies: Optional[MovieLookup] = None):
        self.db = db
        self.movies = movies or MovieLookup(db)

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def create_or_update_rating(
        self,
        category_name: str,
        value: Any,
        upperbound: Any,
        subtype: Optional[str],
        username: str,
        movie_id: str,
        privacy: Optional[str],
    ) -> WriteResult:
        """Insert the user's rating for a category, or overwrite its value.

        Out-of-range values and unknown movies are rejected without writing
        anything and without raising.
        """
        upperbound_int = _coerce_int(upperbound)
        value_int = _coerce_int(value)
        if upperbound_int is None or value_int is None:
            return self._reject(REASON_NOT_AN_INTEGER, movie_id, category_name, username)
        if upperbound_int < 1:
            return self._reject(REASON_INVALID_UPPERBOUND, movie_id, category_name, username)
        if not 1 <= value_int <= upperbound_int:
            return self._reject(REASON_VALUE_OUT_OF_RANGE, movie_id, category_name, username)

        with store_errors(self.db, "create_or_update_rating"):
            movie = self.movies.resolve_movie(movie_id)
            if not movie.exists:
                return self._reject(REASON_MOVIE_NOT_FOUND, movie_id, category_name, username)

            existing = self.db.query(Rating.value).filter(
                Rating.movie_id == movie_id,
                Rating.category_name == category_name,
                Rating.upperbound == upperbound_int,
                Rating.username == username,
            ).first()

            stmt = upsert_insert(self.db, Rating).values(
                movie_id=movie_id,
                movie_title=movie.title,
                category_name=category_name,
                upperbound=upperbound_int,
                value=value_int,
                username=username,
                subtype=subtype,
                privacy=privacy,
            )
            # Only the value changes on resubmission.
            stmt = stmt.on_conflict_do_update(
                index_elements=RATING_KEY_COLUMNS,
                set_={"value": stmt.excluded.value},
            )
            self.db.execute(stmt)

            if existing is None:
                self.movies.register_rating_category_if_new(movie_id, category_name)
            self.db.commit()

        if existing is None:
            status = WriteStatus.CREATED
        elif existing.value == value_int:
            status = WriteStatus.UNCHANGED
        else:
            status = WriteStatus.UPDATED
        logger.debug(
            "Rating %s: movie=%s category=%r/%s user=%s value=%s",
            status.value, movie_id, category_name, upperbound_int, username, value_int,
        )
        return WriteResult(status)

    def _reject(self, reason: str, movie_id: str, category_name: str, username: str) -> WriteResult:
        logger.info(
            "Rejected rating for movie=%s category=%r user=%s: %s",
            movie_id, category_name, username, reason,
        )
        return WriteResult.rejected(reason)

    # ------------------------------------------------------------------
    # projections
    # ------------------------------------------------------------------

    def _ratings(self, *criteria) -> list[Rating]:
        with store_errors(self.db, "rating query"):
            return (
                self.db.query(Rating)
                .filter(*criteria)
                .order_by(Rating.created_at.asc(), Rating.id.asc())
                .all()
            )

    def get_ratings_with_same_name_and_upperbound(self, category_name: str, upperbound: Any) -> list[Rating]:
        """Ratings in one category across all movies.

        Returns:
            list[Rating]: Oldest first; empty when upperbound is not an integer

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        upperbound_int = _coerce_int(upperbound)
        if upperbound_int is None:
            return []
        return self._ratings(Rating.category_name == category_name, Rating.upperbound == upperbound_int)

    def get_ratings_with_same_name(self, category_name: str) -> list[Rating]:
        """Ratings sharing a category name, whatever their upperbound (oldest first)."""
        return self._ratings(Rating.category_name == category_name)

    def get_ratings_with_movie_id(self, movie_id: str) -> list[Rating]:
        """All ratings on one movie, oldest first.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        return self._ratings(Rating.movie_id == movie_id)

    def get_ratings_with_upperbound(self, upperbound: Any) -> list[Rating]:
        """Ratings on a given scale across all movies.

        Returns:
            list[Rating]: Oldest first; empty when upperbound is not an integer
        """
        upperbound_int = _coerce_int(upperbound)
        if upperbound_int is None:
            return []
        return self._ratings(Rating.upperbound == upperbound_int)

    # ------------------------------------------------------------------
    # aggregates
    # ------------------------------------------------------------------

    def get_most_popular_aggregated_rating_for_movie(self, movie_id: str) -> Optional[AggregateRating]:
        """Average of the most common upperbound of the most common category name.

        Ties on count go to the lexicographically smallest name, then to the
        smallest upperbound. Returns None when the movie has no ratings.
        """
        with store_errors(self.db, "get_most_popular_aggregated_rating_for_movie"):
            name_counts = (
                self.db.query(Rating.category_name, func.count(Rating.id).label("count"))
                .filter(Rating.movie_id == movie_id)
                .group_by(Rating.category_name)
                .all()
            )
            if not name_counts:
                return None
            # Winner picked in Python: store collations disagree on name order.
            category_name = min(name_counts, key=lambda r: (-r.count, r.category_name)).category_name

            upperbound_counts = (
                self.db.query(Rating.upperbound, func.count(Rating.id).label("count"))
                .filter(
                    Rating.movie_id == movie_id,
                    Rating.category_name == category_name,
                )
                .group_by(Rating.upperbound)
                .all()
            )
            upperbound = min(upperbound_counts, key=lambda r: (-r.count, r.upperbound)).upperbound

            average, count = self.db.query(
                func.avg(Rating.value),
                func.count(Rating.id),
            ).filter(
                Rating.movie_id == movie_id,
                Rating.category_name == category_name,
                Rating.upperbound == upperbound,
            ).one()

        return AggregateRating(
            movie_id=movie_id,
            category_name=category_name,
            upperbound=upperbound,
            average_value=float(average),
            count=int(count),
        )

    def get_unique_rating_categories_and_user_rating_with_movie_id(
        self,
        movie_id: str,
        requester_username: Optional[str],
    ) -> list[CategoryAverage]:
        """One average per (category_name, upperbound) on the movie.

        The requester's own value and username are attached to the categories
        they rated. Sorted by category name, then upperbound.
        """
        groups: dict[tuple[str, int], list[Rating]] = {}
        for rating in self.get_ratings_with_movie_id(movie_id):
            groups.setdefault((rating.category_name, rating.upperbound), []).append(rating)

        results = []
        for (category_name, upperbound), rows in sorted(groups.items()):
            own = next((r for r in rows if r.username == requester_username), None)
            results.append(CategoryAverage(
                movie_id=movie_id,
                category_name=category_name,
                upperbound=upperbound,
                subtype=rows[0].subtype,
                average_value=sum(r.value for r in rows) / len(rows),
                count=len(rows),
                user_value=own.value if own else None,
                username=own.username if own else None,
            ))
        return results
