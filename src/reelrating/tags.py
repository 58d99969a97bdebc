"""Tag creation, upvote/downvote voting and per-movie tag scores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from reelrating.database import upsert_insert
from reelrating.errors import store_errors
from reelrating.metadata import Tag
from reelrating.movies import MovieLookup
from reelrating.outcomes import REASON_MOVIE_NOT_FOUND, WriteResult, WriteStatus
from reelrating.settings import settings
from reelrating.tag_states import (
    TagAction,
    TagState,
    next_state,
    normalize_tag_state,
    normalize_tag_username,
)


logger = logging.getLogger(__name__)

TAG_KEY_COLUMNS = ["movie_id", "tag_name", "username"]


@dataclass(frozen=True)
class TagScore:
    """Net score of a tag name on a movie and the requester's own vote."""

    movie_id: str
    tag_name: str
    score: int
    state: TagState


class TagVotingEngine:
    """Applies tag votes and aggregates them into scores."""

    def __init__(
        self,
        db: Session,
        movies: Optional[MovieLookup] = None,
        default_privacy: Optional[str] = None,
    ):
        self.db = db
        self.movies = movies or MovieLookup(db)
        self.default_privacy = default_privacy or settings.default_tag_privacy

    def _current_state(self, username: str, movie_id: str, tag_name: str) -> TagState:
        row = self.db.query(Tag.state).filter(
            Tag.username == username,
            Tag.tag_name == tag_name,
            Tag.movie_id == movie_id,
        ).first()
        return normalize_tag_state(row.state) if row else TagState.NO_TAG

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def create_tag(self, tag_name: str, movie_id: str, username: str, privacy: Optional[str]) -> WriteResult:
        """Create the user's tag in the upvote state.

        Creating a tag the user already has is a no-op, whatever its state.
        """
        normalized_user = normalize_tag_username(username)
        with store_errors(self.db, "create_tag"):
            movie = self.movies.resolve_movie(movie_id)
            if not movie.exists:
                return self._reject(REASON_MOVIE_NOT_FOUND, movie_id, tag_name, normalized_user)

            stmt = upsert_insert(self.db, Tag).values(
                movie_id=movie_id,
                movie_title=movie.title,
                tag_name=tag_name,
                username=normalized_user,
                privacy=privacy,
                state=next_state(TagState.NO_TAG, TagAction.CREATE).value,
            ).on_conflict_do_nothing(index_elements=TAG_KEY_COLUMNS)
            created = bool(self.db.execute(stmt).rowcount)
            if created:
                self.movies.register_tag_name_if_new(movie_id, tag_name)
            self.db.commit()

        status = WriteStatus.CREATED if created else WriteStatus.UNCHANGED
        logger.debug("Tag %s: movie=%s tag=%r user=%s", status.value, movie_id, tag_name, normalized_user)
        return WriteResult(status)

    def upvote_tag(self, username: str, tag_name: str, movie_id: str) -> WriteResult:
        """Upvote a tag, creating it for the user if needed."""
        return self._vote(username, tag_name, movie_id, TagAction.UPVOTE)

    def downvote_tag(self, username: str, tag_name: str, movie_id: str) -> WriteResult:
        """Downvote a tag; a missing tag is created directly as a downvote."""
        return self._vote(username, tag_name, movie_id, TagAction.DOWNVOTE)

    def _vote(self, username: str, tag_name: str, movie_id: str, action: TagAction) -> WriteResult:
        normalized_user = normalize_tag_username(username)
        with store_errors(self.db, f"{action.value}_tag"):
            current = self._current_state(normalized_user, movie_id, tag_name)
            target = next_state(current, action)
            if current == target:
                return WriteResult(WriteStatus.UNCHANGED)

            movie_title = None
            if current == TagState.NO_TAG:
                movie = self.movies.resolve_movie(movie_id)
                if not movie.exists:
                    return self._reject(REASON_MOVIE_NOT_FOUND, movie_id, tag_name, normalized_user)
                movie_title = movie.title

            # One statement per key: concurrent voters converge on a single row.
            stmt = upsert_insert(self.db, Tag).values(
                movie_id=movie_id,
                movie_title=movie_title,
                tag_name=tag_name,
                username=normalized_user,
                privacy=self.default_privacy,
                state=target.value,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=TAG_KEY_COLUMNS,
                set_={"state": stmt.excluded.state},
            )
            self.db.execute(stmt)
            if current == TagState.NO_TAG:
                self.movies.register_tag_name_if_new(movie_id, tag_name)
            self.db.commit()

        status = WriteStatus.CREATED if current == TagState.NO_TAG else WriteStatus.UPDATED
        logger.debug(
            "Tag %s via %s: movie=%s tag=%r user=%s state=%s",
            status.value, action.value, movie_id, tag_name, normalized_user, target.value,
        )
        return WriteResult(status)

    def _reject(self, reason: str, movie_id: str, tag_name: str, username: str) -> WriteResult:
        logger.info("Rejected tag %r for movie=%s user=%s: %s", tag_name, movie_id, username, reason)
        return WriteResult.rejected(reason)

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def get_tag_state(self, username: str, movie_id: str, tag_name: str) -> TagState:
        """Return the user's own vote on a tag.

        The username is lower-cased before the lookup.

        Returns:
            TagState: UPVOTE or DOWNVOTE, or NO_TAG ("noTag") when the user
            never tagged the movie with this name

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        with store_errors(self.db, "get_tag_state"):
            return self._current_state(normalize_tag_username(username), movie_id, tag_name)

    def _tags(self, *criteria) -> list[Tag]:
        with store_errors(self.db, "tag query"):
            return (
                self.db.query(Tag)
                .filter(*criteria)
                .order_by(Tag.created_at.asc(), Tag.id.asc())
                .all()
            )

    def get_tags_with_movie_id(self, movie_id: str) -> list[Tag]:
        """All tag rows on one movie, oldest first.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        return self._tags(Tag.movie_id == movie_id)

    def get_tags_with_tag_name(self, tag_name: str) -> list[Tag]:
        """Tag rows with this exact name across all movies, oldest first."""
        return self._tags(Tag.tag_name == tag_name)

    def get_tags_with_username(self, username: str) -> list[Tag]:
        """Tag rows created by a user; the username is matched lower-cased.

        Returns:
            list[Tag]: Oldest first
        """
        return self._tags(Tag.username == normalize_tag_username(username))

    def get_tag_scores_for_movie_modal(self, requester_username: str, movie_id: str) -> list[TagScore]:
        """Score every tag name on the movie as upvotes minus downvotes.

        Each score carries the requester's own state for that tag. Ordered by
        score descending, then tag name ascending.
        """
        normalized_user = normalize_tag_username(requester_username)
        score = func.sum(case((Tag.state == TagState.UPVOTE.value, 1), else_=-1)).label("score")
        with store_errors(self.db, "get_tag_scores_for_movie_modal"):
            score_rows = (
                self.db.query(Tag.tag_name, score)
                .filter(Tag.movie_id == movie_id)
                .group_by(Tag.tag_name)
                .all()
            )
            own_rows = self.db.query(Tag.tag_name, Tag.state).filter(
                Tag.movie_id == movie_id,
                Tag.username == normalized_user,
            ).all()

        own_states = {row.tag_name: normalize_tag_state(row.state) for row in own_rows}
        scores = [
            TagScore(
                movie_id=movie_id,
                tag_name=row.tag_name,
                score=int(row.score),
                state=own_states.get(row.tag_name, TagState.NO_TAG),
            )
            for row in score_rows
        ]
        scores.sort(key=lambda s: (-s.score, s.tag_name))
        return scores
