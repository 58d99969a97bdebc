"""Tag vote states and the transition table between them."""

from enum import Enum
from typing import Optional


class TagState(str, Enum):
    """Personal vote state of one user on one tag name for one movie."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    NO_TAG = "noTag"


class TagAction(str, Enum):
    CREATE = "create"
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


# current state -> action -> resulting state. Nothing leads back to NO_TAG.
TRANSITIONS: dict[TagState, dict[TagAction, TagState]] = {
    TagState.NO_TAG: {
        TagAction.CREATE: TagState.UPVOTE,
        TagAction.UPVOTE: TagState.UPVOTE,
        TagAction.DOWNVOTE: TagState.DOWNVOTE,
    },
    TagState.UPVOTE: {
        TagAction.CREATE: TagState.UPVOTE,
        TagAction.UPVOTE: TagState.UPVOTE,
        TagAction.DOWNVOTE: TagState.DOWNVOTE,
    },
    TagState.DOWNVOTE: {
        TagAction.CREATE: TagState.DOWNVOTE,
        TagAction.UPVOTE: TagState.UPVOTE,
        TagAction.DOWNVOTE: TagState.DOWNVOTE,
    },
}


def next_state(current: TagState, action: TagAction) -> TagState:
    """Return the state a tag ends up in after applying an action."""
    return TRANSITIONS[current][action]


def normalize_tag_state(state: Optional[str]) -> TagState:
    """Map a stored state value to a TagState; missing values mean no tag."""
    raw = str(state or "").strip().lower()
    if raw == TagState.UPVOTE.value:
        return TagState.UPVOTE
    if raw == TagState.DOWNVOTE.value:
        return TagState.DOWNVOTE
    return TagState.NO_TAG


def normalize_tag_username(username: Optional[str]) -> str:
    """Tag usernames are stored and looked up lower-cased."""
    return str(username or "").lower()
