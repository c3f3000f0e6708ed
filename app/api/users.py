# app/api/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.context import SessionContext, get_current_context
from app.schemas.user import ProfileUpdate, ProfileResponse
from app.services.profile_service import ProfileService

router = APIRouter()


@router.get("/me", response_model=ProfileResponse, summary="My profile")
def get_my_profile(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_current_context),
):
    return ProfileService(db, ctx).load()


@router.patch("/me", response_model=ProfileResponse, summary="Update my profile")
def update_my_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_current_context),
):
    """Only username, in-game name and avatar can be changed here"""
    return ProfileService(db, ctx).update(data)
