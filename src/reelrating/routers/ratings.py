"""Router for rating operations."""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from reelrating.dependencies import get_current_username, get_rating_aggregator
from reelrating.ratings import RatingAggregator

router = APIRouter(
    prefix="/api/v1/ratings",
    tags=["ratings"]
)


class RatingBody(BaseModel):
    movie_id: str
    category_name: str
    value: int
    upperbound: int
    subtype: Optional[str] = None
    privacy: Optional[str] = None


@router.post("", response_model=dict, operation_id="create_or_update_rating")
async def create_or_update_rating(
    body: RatingBody,
    username: str = Depends(get_current_username),
    aggregator: RatingAggregator = Depends(get_rating_aggregator),
):
    """Create the caller's rating for a category or overwrite its value.

    Rejected submissions still answer 200; the result field says what happened.
    """
    result = aggregator.create_or_update_rating(
        body.category_name,
        body.value,
        body.upperbound,
        body.subtype,
        username,
        body.movie_id,
        body.privacy,
    )
    return {"result": result.status.value, "reason": result.reason}


@router.get("/movies/{movie_id}/most-popular", response_model=dict, operation_id="get_most_popular_rating")
async def get_most_popular_rating(
    movie_id: str,
    username: str = Depends(get_current_username),
    aggregator: RatingAggregator = Depends(get_rating_aggregator),
):
    """Average of the most common rating category on a movie."""
    aggregate = aggregator.get_most_popular_aggregated_rating_for_movie(movie_id)
    if aggregate is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie has no ratings")
    return asdict(aggregate)


@router.get("/movies/{movie_id}/categories", response_model=dict, operation_id="get_rating_categories")
async def get_rating_categories(
    movie_id: str,
    username: str = Depends(get_current_username),
    aggregator: RatingAggregator = Depends(get_rating_aggregator),
):
    """Average per rating category, with the caller's own values."""
    categories = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie_id, username)
    return {
        "movie_id": movie_id,
        "categories": [asdict(category) for category in categories],
    }


@router.get("/movies/{movie_id}", response_model=dict, operation_id="list_movie_ratings")
async def list_movie_ratings(
    movie_id: str,
    username: str = Depends(get_current_username),
    aggregator: RatingAggregator = Depends(get_rating_aggregator),
):
    ratings = aggregator.get_ratings_with_movie_id(movie_id)
    return {"ratings": [rating.to_dict() for rating in ratings]}


@router.get("/by-category", response_model=dict, operation_id="list_category_ratings")
async def list_category_ratings(
    category_name: str,
    upperbound: Optional[int] = None,
    username: str = Depends(get_current_username),
    aggregator: RatingAggregator = Depends(get_rating_aggregator),
):
    """Ratings sharing a category name, optionally narrowed to one upperbound."""
    if upperbound is None:
        ratings = aggregator.get_ratings_with_same_name(category_name)
    else:
        ratings = aggregator.get_ratings_with_same_name_and_upperbound(category_name, upperbound)
    return {"ratings": [rating.to_dict() for rating in ratings]}


@router.get("/by-upperbound/{upperbound}", response_model=dict, operation_id="list_upperbound_ratings")
async def list_upperbound_ratings(
    upperbound: int,
    username: str = Depends(get_current_username),
    aggregator: RatingAggregator = Depends(get_rating_aggregator),
):
    ratings = aggregator.get_ratings_with_upperbound(upperbound)
    return {"ratings": [rating.to_dict() for rating in ratings]}
