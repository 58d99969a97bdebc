"""Resolve a client session id to a username.

The auth service exchanges a session id for a signed JWT; the username is the
token's ``upn`` claim. An empty response means the session is not
authenticated.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from jose import jwt, JWTError

from reelrating.settings import settings


logger = logging.getLogger(__name__)

USERNAME_CLAIM = "upn"


def fetch_session_token(session_id: str) -> Optional[str]:
    """Ask the auth service for the JWT bound to a session id."""
    url = f"{settings.auth_service_url.rstrip('/')}/reel-rating-auth-service/jwt/generate/{session_id}"
    response = httpx.get(url, timeout=settings.auth_timeout_seconds)
    response.raise_for_status()
    token = response.text.strip()
    return token or None


def decode_token(token: str) -> Dict[str, Any]:
    """Decode the auth service JWT.

    Signatures are verified when a verification key is configured.
    """
    if settings.jwt_verification_key:
        return jwt.decode(
            token,
            settings.jwt_verification_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    return jwt.get_unverified_claims(token)


def username_from_token(token: str) -> Optional[str]:
    claims = decode_token(token)
    username = claims.get(USERNAME_CLAIM)
    if username is None:
        return None
    return str(username) or None


def resolve_username(session_id: Optional[str]) -> Optional[str]:
    """Return the username for a session, or None when unauthenticated."""
    session_key = str(session_id or "").strip()
    if not session_key:
        return None
    try:
        token = fetch_session_token(session_key)
        if token is None:
            return None
        return username_from_token(token)
    except httpx.HTTPError:
        logger.warning("Auth service request failed for session lookup", exc_info=True)
        return None
    except JWTError:
        logger.warning("Auth service returned an invalid token", exc_info=True)
        return None
