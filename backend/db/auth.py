"""Firebase Authentication - resolves ID tokens to user IDs."""

import logging

from firebase_admin import auth

from db.firestore import get_firestore_service

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a request carries no valid ID token."""


def verify_id_token(token: str) -> str:
    """Verify a Firebase ID token and return the user's uid.

    Raises:
        AuthenticationError: Token missing, expired, revoked, or malformed.
    """
    if not token:
        raise AuthenticationError("Missing ID token")

    # Ensures the default Firebase app is initialized
    get_firestore_service()

    try:
        decoded = auth.verify_id_token(token)
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError) as e:
        logger.warning("Rejected ID token: %s", e)
        raise AuthenticationError("Invalid or expired ID token") from e

    return decoded["uid"]
