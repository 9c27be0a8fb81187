import base64
import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import ADMIN_EMAILS, AUTH_COOKIE_NAME, FIREBASE_PROJECT_ID
from .database import get_db
from .models import User

logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)

# Bearer is optional: the session cookie is accepted as well
security = HTTPBearer(auto_error=False)

# Cache for Google's public keys
_cached_keys: Optional[dict] = None


async def get_google_public_keys() -> Optional[dict]:
    """Fetch Google's public keys for Firebase token verification"""
    global _cached_keys
    if _cached_keys:
        logger.debug("✅ Using cached Google public keys")
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(GOOGLE_CERTS_URL)
        if response.status_code == 200:
            _cached_keys = response.json()
            logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
            return _cached_keys
        logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token: RS256 signature against Google's x509 certificates,
    then the aud, iss, exp, iat and auth_time claims.

    Raises:
        HTTPException: 401 for any invalid token, 500 when Firebase is not configured
    """
    global _cached_keys

    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    parts = token.split(".")
    if len(parts) != 3:
        logger.warning(f"⚠️ Malformed token received: {len(parts)} parts")
        raise HTTPException(status_code=401, detail="Invalid token format")

    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode(header_b64))
    except ValueError as e:
        logger.error(f"❌ Failed to decode token header: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token header") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256":
        logger.error(f"❌ Invalid token algorithm: {header.get('alg')}")
        raise HTTPException(status_code=401, detail="Invalid token algorithm")
    if not kid:
        logger.error("❌ Token missing key ID")
        raise HTTPException(status_code=401, detail="Token missing key ID")

    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        # Google rotates its keys; refetch once before giving up
        logger.warning(f"⚠️ Key ID {kid} not found in public keys, invalidating cache and retrying")
        _cached_keys = None
        public_keys = await get_google_public_keys()
        if not public_keys or kid not in public_keys:
            logger.error(f"❌ Key ID {kid} not found in public keys after retry")
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    try:
        public_key = load_pem_x509_certificate(public_keys[kid].encode()).public_key()
        public_key.verify(
            _b64decode(signature_b64),
            f"{header_b64}.{payload_b64}".encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        claims = json.loads(_b64decode(payload_b64))
    except Exception as e:
        logger.error(f"❌ Token signature verification failed: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    if claims.get("aud") != FIREBASE_PROJECT_ID:
        logger.error("❌ Token audience mismatch")
        raise HTTPException(status_code=401, detail="Invalid token audience")

    if claims.get("iss") != f"https://securetoken.google.com/{FIREBASE_PROJECT_ID}":
        logger.error("❌ Token issuer mismatch")
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    now = time.time()
    exp = claims.get("exp", 0)
    if exp < now:
        if now - exp > 60:
            logger.info(f"ℹ️ Token expired {int(now - exp)}s ago for {claims.get('email')}")
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )

    # Allow 60 seconds clock skew
    if claims.get("iat", 0) > now + 60:
        logger.warning("⚠️ Token issued in the future")
        raise HTTPException(status_code=401, detail="Invalid token")

    if "auth_time" not in claims:
        raise HTTPException(status_code=401, detail="Invalid token claims")

    logger.debug(f"✅ Token verified for user: {claims.get('email')}")
    return claims


def get_or_create_user(db: Session, claims: dict) -> User:
    """
    Find the user for verified token claims, creating it on first sign-in.

    An existing email signing in through a different provider keeps its account;
    only the firebase uid is migrated.
    """
    firebase_uid = claims.get("sub") or claims.get("user_id") or claims.get("uid")
    email = (claims.get("email") or "").lower()
    name = claims.get("name")

    if not firebase_uid:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()
    if user:
        return user

    if email:
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            logger.info(
                f"🔄 Migrating user {email} from Firebase UID {existing_user.firebase_uid} to {firebase_uid}"
            )
            existing_user.firebase_uid = firebase_uid
            if name and not existing_user.name:
                existing_user.name = name
            db.commit()
            db.refresh(existing_user)
            return existing_user

    logger.info(f"🆕 Creating new user: {email}")
    user = User(
        firebase_uid=firebase_uid,
        email=email,
        name=name,
        role="admin" if email in ADMIN_EMAILS else "user",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"❌ Email {email} was taken by another account (race condition)")
        raise HTTPException(
            status_code=409,
            detail="This email is already registered. Please sign in with your existing account.",
        ) from e
    db.refresh(user)
    logger.info(f"✅ New user created: {user.email} ({user.role})")
    return user


def touch_last_login(db: Session, user: User) -> User:
    # Stored as naive UTC to match the other DateTime columns
    user.last_login = datetime.now(timezone.utc).replace(tzinfo=None)
    db.commit()
    db.refresh(user)
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the Bearer token or the session cookie"""
    token = credentials.credentials if credentials else request.cookies.get(AUTH_COOKIE_NAME)

    if not token:
        logger.debug(f"No credentials for {request.method} {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token or session cookie.",
        )

    claims = await verify_firebase_token(token)
    user = await run_in_threadpool(get_or_create_user, db, claims)
    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_current_admin(user: User = Depends(get_current_user)) -> User:
    """Get current user and verify they have the admin role"""
    if user.role != "admin":
        logger.warning(f"⚠️ User {user.email} attempted to access an admin route")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
