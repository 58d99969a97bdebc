"""Tests for tag state helpers."""

from reelrating.tag_states import (
    TagAction,
    TagState,
    next_state,
    normalize_tag_state,
    normalize_tag_username,
)


def test_transitions_never_return_to_no_tag():
    for current in TagState:
        for action in TagAction:
            assert next_state(current, action) != TagState.NO_TAG


def test_vote_actions_set_target_state():
    for current in TagState:
        assert next_state(current, TagAction.UPVOTE) == TagState.UPVOTE
        assert next_state(current, TagAction.DOWNVOTE) == TagState.DOWNVOTE


def test_create_keeps_existing_state():
    assert next_state(TagState.NO_TAG, TagAction.CREATE) == TagState.UPVOTE
    assert next_state(TagState.DOWNVOTE, TagAction.CREATE) == TagState.DOWNVOTE


def test_normalize_tag_state():
    assert normalize_tag_state("upvote") == TagState.UPVOTE
    assert normalize_tag_state("DOWNVOTE") == TagState.DOWNVOTE
    assert normalize_tag_state(None) == TagState.NO_TAG
    assert normalize_tag_state("sideways") == TagState.NO_TAG


def test_normalize_tag_username():
    assert normalize_tag_username("Alice") == "alice"
    assert normalize_tag_username(None) == ""
