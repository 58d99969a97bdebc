"""Session-to-username resolution through the auth service."""

from reelrating.auth.identity import resolve_username, username_from_token

__all__ = ["resolve_username", "username_from_token"]
