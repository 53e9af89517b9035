from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from contentdesk.core.deps import get_current_user
from contentdesk.db.session import get_db
from contentdesk.models.user import User
from contentdesk.schemas.user import UserProfile, UserProfileUpdate

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)

# Required columns ignore an explicit null instead of clearing it.
_REQUIRED_FIELDS = ("full_name", "email")


@router.get("/profile", response_model=UserProfile)
def get_profile(current_user: User = Depends(get_current_user)) -> UserProfile:
    return UserProfile.model_validate(current_user)


@router.put("/profile", response_model=UserProfile)
def update_profile(
    profile_update: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserProfile:
    update_data = profile_update.model_dump(exclude_unset=True)
    update_data = {
        field: value
        for field, value in update_data.items()
        if value is not None or field not in _REQUIRED_FIELDS
    }

    email = update_data.get("email")
    if email is not None:
        email = update_data["email"] = str(email).lower()
        taken = (
            db.query(User.id)
            .filter(func.lower(User.email) == email, User.id != current_user.id)
            .first()
        )
        if taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already taken")
    if update_data.get("website") is not None:
        update_data["website"] = str(update_data["website"])

    for field, value in update_data.items():
        setattr(current_user, field, value)

    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    logger.info("profile_updated", extra={"user_id": current_user.id, "entity": "user", "entity_id": current_user.id})
    return UserProfile.model_validate(current_user)


@router.delete("/account", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    # Records stay in place; get_current_user refuses inactive accounts from now on.
    current_user.is_active = False
    db.add(current_user)
    db.commit()
    logger.info("account_deactivated", extra={"user_id": current_user.id, "entity": "user", "entity_id": current_user.id})
