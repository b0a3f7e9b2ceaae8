"""
Bearer-token identity for listen events.

With FIREBASE_PROJECT_ID set, tokens are Firebase ID tokens checked by
google-auth. Without it the token itself is the user id, which is what local
development and the test suite use.
"""
import logging

from fastapi import Depends, Header
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from .config import Settings, get_settings
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


def verify_token(token: str, settings: Settings) -> str:
    if not token:
        raise AuthenticationError("Missing Bearer token")
    if not settings.firebase_project_id:
        return token
    try:
        claims = id_token.verify_firebase_token(
            token, google_requests.Request(), audience=settings.firebase_project_id
        )
    except ValueError as e:
        logger.info("Rejected Firebase token: %s", e)
        raise AuthenticationError("Invalid token") from e
    uid = (claims or {}).get("user_id") or (claims or {}).get("sub")
    if not uid:
        raise AuthenticationError("Token has no user id")
    return uid


def get_user_id(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Missing Bearer token")
    return verify_token(authorization.removeprefix("Bearer ").strip(), settings)
