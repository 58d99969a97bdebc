"""Movie lookup used by the rating and tag core to validate writes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from reelrating.database import upsert_insert
from reelrating.metadata import Movie, MovieRatingCategory, MovieTagName


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovieRef:
    exists: bool
    title: Optional[str] = None


MISSING_MOVIE = MovieRef(exists=False)


class MovieLookup:
    """Resolves movie ids and records category/tag names seen on a movie."""

    def __init__(self, db: Session):
        self.db = db

    def resolve_movie(self, movie_id: Optional[str]) -> MovieRef:
        """Return whether the movie exists and its title."""
        movie_key = str(movie_id or "").strip()
        if not movie_key:
            return MISSING_MOVIE
        row = self.db.query(Movie.title).filter(Movie.id == movie_key).first()
        if row is None:
            return MISSING_MOVIE
        return MovieRef(exists=True, title=row.title)

    def register_rating_category_if_new(self, movie_id: str, category_name: str) -> None:
        stmt = upsert_insert(self.db, MovieRatingCategory).values(
            movie_id=movie_id,
            category_name=category_name,
        ).on_conflict_do_nothing(index_elements=["movie_id", "category_name"])
        result = self.db.execute(stmt)
        if result.rowcount:
            logger.debug("Registered rating category %r on movie %s", category_name, movie_id)

    def register_tag_name_if_new(self, movie_id: str, tag_name: str) -> None:
        stmt = upsert_insert(self.db, MovieTagName).values(
            movie_id=movie_id,
            tag_name=tag_name,
        ).on_conflict_do_nothing(index_elements=["movie_id", "tag_name"])
        result = self.db.execute(stmt)
        if result.rowcount:
            logger.debug("Registered tag name %r on movie %s", tag_name, movie_id)

    def get_rating_category_names(self, movie_id: str) -> list[str]:
        """Category names in the order they were first recorded."""
        rows = (
            self.db.query(MovieRatingCategory.category_name)
            .filter(MovieRatingCategory.movie_id == movie_id)
            .order_by(MovieRatingCategory.id.asc())
            .all()
        )
        return [row.category_name for row in rows]

    def get_tag_names(self, movie_id: str) -> list[str]:
        """Tag names in the order they were first recorded."""
        rows = (
            self.db.query(MovieTagName.tag_name)
            .filter(MovieTagName.movie_id == movie_id)
            .order_by(MovieTagName.id.asc())
            .all()
        )
        return [row.tag_name for row in rows]
