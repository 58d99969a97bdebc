"""Router for tag creation, voting and scores."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from reelrating.dependencies import get_current_username, get_tag_engine
from reelrating.tag_states import normalize_tag_username
from reelrating.tags import TagVotingEngine

router = APIRouter(
    prefix="/api/v1/tags",
    tags=["tags"]
)


class TagBody(BaseModel):
    tag_name: str
    privacy: Optional[str] = None


def _result_to_dict(result) -> dict:
    return {"result": result.status.value, "reason": result.reason}


@router.post("/movies/{movie_id}", response_model=dict, operation_id="create_tag")
async def create_tag(
    movie_id: str,
    body: TagBody,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    """Create the caller's tag on a movie (starts as an upvote)."""
    result = engine.create_tag(body.tag_name, movie_id, username, body.privacy)
    return _result_to_dict(result)


@router.post("/movies/{movie_id}/{tag_name}/upvote", response_model=dict, operation_id="upvote_tag")
async def upvote_tag(
    movie_id: str,
    tag_name: str,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    return _result_to_dict(engine.upvote_tag(username, tag_name, movie_id))


@router.post("/movies/{movie_id}/{tag_name}/downvote", response_model=dict, operation_id="downvote_tag")
async def downvote_tag(
    movie_id: str,
    tag_name: str,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    return _result_to_dict(engine.downvote_tag(username, tag_name, movie_id))


@router.get("/movies/{movie_id}/{tag_name}/state", response_model=dict, operation_id="get_tag_state")
async def get_tag_state(
    movie_id: str,
    tag_name: str,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    """The caller's own vote on a tag: upvote, downvote or noTag."""
    state = engine.get_tag_state(username, movie_id, tag_name)
    return {
        "movie_id": movie_id,
        "tag_name": tag_name,
        "username": normalize_tag_username(username),
        "state": state.value,
    }


@router.get("/movies/{movie_id}/scores", response_model=dict, operation_id="get_tag_scores")
async def get_tag_scores(
    movie_id: str,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    """Tag scores for the movie modal, highest score first."""
    scores = engine.get_tag_scores_for_movie_modal(username, movie_id)
    return {
        "movie_id": movie_id,
        "tags": [
            {"tag_name": s.tag_name, "score": s.score, "state": s.state.value}
            for s in scores
        ],
    }


@router.get("/movies/{movie_id}", response_model=dict, operation_id="list_movie_tags")
async def list_movie_tags(
    movie_id: str,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    return {"tags": [tag.to_dict() for tag in engine.get_tags_with_movie_id(movie_id)]}


@router.get("/by-name/{tag_name}", response_model=dict, operation_id="list_named_tags")
async def list_named_tags(
    tag_name: str,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    return {"tags": [tag.to_dict() for tag in engine.get_tags_with_tag_name(tag_name)]}


@router.get("/by-user/{tag_username}", response_model=dict, operation_id="list_user_tags")
async def list_user_tags(
    tag_username: str,
    username: str = Depends(get_current_username),
    engine: TagVotingEngine = Depends(get_tag_engine),
):
    return {"tags": [tag.to_dict() for tag in engine.get_tags_with_username(tag_username)]}
