from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from app.models.users import UserType


class SignUpRequest(BaseModel):
    """Email/password sign-up"""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    username: str = Field(..., min_length=3, max_length=50)
    in_game_name: str = Field(..., min_length=1, max_length=50)
    user_type: UserType = UserType.TEAM
    organizer_code: Optional[str] = Field(
        None, min_length=4, max_length=4, description="4-digit code of the organizer a team links to"
    )


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    is_new_user: bool = False
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class RefreshTokenRequest(BaseModel):
    """Token refresh"""
    refresh_token: str
