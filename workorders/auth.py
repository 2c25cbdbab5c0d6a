import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from .config import AUTH_ENABLED
from .services.firebase import get_firebase_app

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

DEFAULT_ACTOR = "system"


def verify_token(token: str) -> str:
    """Verify a Firebase ID token and return the user's UID"""
    try:
        decoded_token = firebase_auth.verify_id_token(token, app=get_firebase_app())
    except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError) as e:
        logger.warning(f"⚠️ Rejected ID token: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e
    except firebase_exceptions.FirebaseError as e:
        logger.error(f"❌ Firebase token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Could not verify token") from e

    uid = decoded_token.get("uid") or decoded_token.get("sub")
    if not uid:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(decoded_token.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")
    return uid


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_user_id: Optional[str] = Header(default=None),
) -> str:
    """
    Resolve the acting user's ID for the change log.

    With AUTH_ENABLED=false the ID is taken from the X-User-Id header instead
    of a verified bearer token.
    """
    if not AUTH_ENABLED:
        return x_user_id or DEFAULT_ACTOR

    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return verify_token(credentials.credentials)
