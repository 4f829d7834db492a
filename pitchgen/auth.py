# Auth module for Firebase Authentication
# Resolves bearer tokens to an owner identity; identity itself is managed externally

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

# Firebase Admin SDK
import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions

from pitchgen.config import load_settings
from pitchgen.errors import AuthError

logger = logging.getLogger(__name__)

# Initialize Firebase Admin SDK
_firebase_app = None


def get_firebase_app():
    """Get or initialize the Firebase Admin app."""
    global _firebase_app
    if _firebase_app is None:
        # In Cloud Run, this uses Application Default Credentials
        # Locally, set GOOGLE_APPLICATION_CREDENTIALS to a service account key
        try:
            _firebase_app = firebase_admin.get_app()
        except ValueError:
            # App not initialized yet
            options = {}
            project_id = load_settings().firebase_project_id
            if project_id:
                options["projectId"] = project_id
            cred = credentials.ApplicationDefault()
            _firebase_app = firebase_admin.initialize_app(cred, options or None)
    return _firebase_app


# Security scheme for extracting Bearer tokens
security = HTTPBearer(auto_error=False)


class UserInfo:
    """Represents an authenticated user."""
    def __init__(self, uid: str, email: Optional[str] = None,
                 display_name: Optional[str] = None):
        self.uid = uid
        self.email = email
        self.display_name = display_name

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "email": self.email,
            "display_name": self.display_name,
        }


def verify_token(token: str) -> Optional[UserInfo]:
    """
    Verify a Firebase ID token.
    Returns None if the token is invalid, expired, revoked or malformed.
    """
    try:
        decoded_token = auth.verify_id_token(token, app=get_firebase_app())
    except (firebase_exceptions.FirebaseError, ValueError) as e:
        logger.info(f"Token verification failed: {e}")
        return None

    uid = decoded_token.get("uid")
    if not uid:
        return None
    return UserInfo(
        uid=uid,
        email=decoded_token.get("email"),
        display_name=decoded_token.get("name"),
    )


async def require_auth(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> UserInfo:
    """
    Dependency that requires authentication.
    Raises AuthError (rendered as 401) if not authenticated.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Unauthorized: No token provided.")

    user = verify_token(credentials.credentials)
    if user is None:
        raise AuthError("Unauthorized: Invalid session.")
    return user
