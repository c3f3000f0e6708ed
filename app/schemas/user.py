from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional
from app.models.users import UserType


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile"""
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    in_game_name: Optional[str] = Field(None, min_length=1, max_length=50)
    avatar_url: Optional[str] = Field(None, max_length=500)


class ProfileResponse(BaseModel):
    """Profile response"""
    id: UUID
    username: str
    email: str
    in_game_name: str
    level: int
    wins: int
    total_matches: int
    earnings: int
    win_rate: float
    avatar_url: Optional[str] = None
    user_type: UserType
    organizer_code: Optional[str] = None
    linked_organizer_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
