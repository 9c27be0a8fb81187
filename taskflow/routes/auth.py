import logging

from fastapi import APIRouter, Depends, Response
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from ..auth import get_current_user, get_or_create_user, touch_last_login, verify_firebase_token
from ..config import AUTH_COOKIE_MAX_AGE, AUTH_COOKIE_NAME, AUTH_COOKIE_SECURE
from ..database import get_db
from ..firebase import revoke_sessions
from ..models import User
from ..rate_limiter import create_rate_limiter
from ..schemas import MessageResponse, SessionCreate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# 20 sign-ins per IP per minute
rate_limit_session = create_rate_limiter(limit=20, window_seconds=60, key_prefix="auth_session")


@router.post("/session", response_model=UserResponse)
async def create_session(
    data: SessionCreate,
    response: Response,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_session),
):
    """
    Exchange a Firebase ID token for a session.

    The token is verified, the user is created on first sign-in, and the token
    is mirrored into the session cookie used for route gating.
    """
    claims = await verify_firebase_token(data.idToken)
    user = await run_in_threadpool(lambda: touch_last_login(db, get_or_create_user(db, claims)))

    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=data.idToken,
        httponly=True,
        secure=AUTH_COOKIE_SECURE,
        samesite="lax",
        max_age=AUTH_COOKIE_MAX_AGE,
        path="/",
    )
    logger.info(f"🔑 Session started for {user.email}")
    return user


@router.delete("/session", response_model=MessageResponse)
def delete_session(response: Response, current_user: User = Depends(get_current_user)):
    """Sign out: revoke Firebase refresh tokens and clear the session cookie"""
    revoke_sessions(current_user.firebase_uid)
    response.delete_cookie(key=AUTH_COOKIE_NAME, path="/")
    logger.info(f"👋 Session ended for {current_user.email}")
    return {"message": "Signed out"}


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
