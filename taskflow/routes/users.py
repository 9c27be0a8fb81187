import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import get_current_admin, get_current_user
from ..database import get_db
from ..firebase import set_role_claim
from ..models import User
from ..schemas import RoleUpdate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserResponse)
def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the current user's profile"""
    if data.name is not None:
        current_user.name = data.name or None
        db.commit()
        db.refresh(current_user)
        logger.info(f"✅ Profile updated for {current_user.email}")
    return current_user


@router.get("", response_model=list[UserResponse])
def list_users(
    _: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """All users, newest first (admin only)"""
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


@router.patch("/{user_id}/role", response_model=UserResponse)
def update_role(
    user_id: int,
    data: RoleUpdate,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Change a user's role and mirror it into their Firebase custom claims"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == admin.id and data.role != "admin":
        raise HTTPException(status_code=409, detail="Admins cannot remove their own admin role")

    if user.role != data.role:
        user.role = data.role
        db.commit()
        db.refresh(user)
        logger.info(f"🛡️ {admin.email} set role of {user.email} to {data.role}")
        set_role_claim(user.firebase_uid, data.role)

    return user
