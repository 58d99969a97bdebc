"""Shared dependencies for FastAPI endpoints."""

from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from reelrating.auth import resolve_username
from reelrating.database import get_db
from reelrating.movies import MovieLookup
from reelrating.ratings import RatingAggregator
from reelrating.tags import TagVotingEngine


async def get_current_username(
    x_session_id: Optional[str] = Header(None),
    jsessionid: Optional[str] = Cookie(None, alias="JSESSIONID"),
) -> str:
    """Resolve the caller's session to a username or reject with 401."""
    username = resolve_username(x_session_id or jsessionid)
    if not username:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return username


def get_rating_aggregator(db: Session = Depends(get_db)) -> RatingAggregator:
    return RatingAggregator(db, MovieLookup(db))


def get_tag_engine(db: Session = Depends(get_db)) -> TagVotingEngine:
    return TagVotingEngine(db, MovieLookup(db))
