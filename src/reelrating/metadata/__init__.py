"""Rating, tag and movie storage models."""

import sqlalchemy as sa
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class Movie(Base):
    """Catalog entry as seen by the rating core: an id and a title."""

    __tablename__ = "movies"

    id = Column(String(64), primary_key=True)  # opaque catalog key
    title = Column(String(512), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class MovieRatingCategory(Base):
    """Rating category names recorded on a movie, for UI population."""

    __tablename__ = "movie_rating_categories"

    id = Column(Integer, primary_key=True)
    movie_id = Column(String(64), ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    category_name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        sa.UniqueConstraint("movie_id", "category_name", name="uq_movie_rating_categories_movie_name"),
    )


class MovieTagName(Base):
    """Tag names recorded on a movie, for UI population."""

    __tablename__ = "movie_tag_names"

    id = Column(Integer, primary_key=True)
    movie_id = Column(String(64), ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    tag_name = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        sa.UniqueConstraint("movie_id", "tag_name", name="uq_movie_tag_names_movie_name"),
    )


class Rating(Base):
    """One user's value on one (category name, upperbound) scale for a movie.

    A category is the pair (category_name, upperbound): the same name may be
    reused with a different scale. One row per user per category (upsert).
    """

    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True)
    movie_id = Column(String(64), nullable=False)   # references movies.id (no FK)
    movie_title = Column(String(512), nullable=True)  # denormalized at insert time
    category_name = Column(String(255), nullable=False)
    upperbound = Column(Integer, nullable=False)
    value = Column(Integer, nullable=False)
    username = Column(String(255), nullable=False)  # stored as given
    subtype = Column(String(50), nullable=True)     # "scale", "yes-no", "thumbsup", ...
    privacy = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        sa.UniqueConstraint(
            "movie_id", "category_name", "upperbound", "username",
            name="uq_ratings_movie_category_upperbound_user",
        ),
        sa.CheckConstraint("upperbound >= 1", name="chk_ratings_upperbound_positive"),
        sa.CheckConstraint("value BETWEEN 1 AND upperbound", name="chk_ratings_value_range"),
        Index("idx_ratings_movie", "movie_id"),
        Index("idx_ratings_category", "category_name", "upperbound"),
    )

    def to_dict(self):
        return {
            "movie_id": self.movie_id,
            "movie_title": self.movie_title,
            "category_name": self.category_name,
            "upperbound": self.upperbound,
            "value": self.value,
            "username": self.username,
            "subtype": self.subtype,
            "privacy": self.privacy,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Tag(Base):
    """One user's vote on a named tag for a movie. One row per user per tag name."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    movie_id = Column(String(64), nullable=False)   # references movies.id (no FK)
    movie_title = Column(String(512), nullable=True)
    tag_name = Column(String(255), nullable=False)
    username = Column(String(255), nullable=False)  # lower-cased
    privacy = Column(String(20), nullable=True)
    state = Column(String(10), nullable=False, server_default="upvote")
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        sa.UniqueConstraint("movie_id", "tag_name", "username", name="uq_tags_movie_tag_user"),
        sa.CheckConstraint("state IN ('upvote', 'downvote')", name="chk_tags_state"),
        Index("idx_tags_movie", "movie_id"),
        Index("idx_tags_tag_name", "tag_name"),
        Index("idx_tags_username", "username"),
    )

    def to_dict(self):
        return {
            "movie_id": self.movie_id,
            "movie_title": self.movie_title,
            "tag_name": self.tag_name,
            "username": self.username,
            "privacy": self.privacy,
            "state": self.state,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
