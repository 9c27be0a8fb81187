"""
Firebase Admin SDK helpers

Token verification does not need the Admin SDK (see auth.py); it is only used
for revoking sessions and for role custom claims. Both are best-effort: a
missing service account must not break sign-out or role changes.
"""

import logging

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from .config import FIREBASE_PROJECT_ID

logger = logging.getLogger(__name__)


def get_firebase_app():
    """Initialize Firebase Admin SDK (only once)"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    try:
        cred = credentials.ApplicationDefault()
        app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with default credentials")
    except Exception:
        app = firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with project ID only")
    return app


def revoke_sessions(firebase_uid: str) -> bool:
    """Revoke all refresh tokens of a user"""
    try:
        firebase_auth.revoke_refresh_tokens(firebase_uid, app=get_firebase_app())
        logger.info(f"🔒 Revoked refresh tokens for {firebase_uid}")
        return True
    except Exception as e:
        logger.warning(f"⚠️ Could not revoke refresh tokens for {firebase_uid}: {e}")
        return False


def set_role_claim(firebase_uid: str, role: str) -> bool:
    """Mirror the user's role into a Firebase custom claim"""
    try:
        firebase_auth.set_custom_user_claims(firebase_uid, {"role": role}, app=get_firebase_app())
        logger.info(f"✅ Set role claim '{role}' for {firebase_uid}")
        return True
    except Exception as e:
        logger.warning(f"⚠️ Could not set role claim for {firebase_uid}: {e}")
        return False
