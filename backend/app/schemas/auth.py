"""
Authentication and user schemas.
"""
from typing import Optional
from pydantic import BaseModel, Field


class GoogleLogin(BaseModel):
    id_token: str = Field(min_length=1)


class UserSummary(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    public_slug: Optional[str] = None

    class Config:
        from_attributes = True


class PublicUser(BaseModel):
    """Owner details shown to anyone holding an invite link. No email."""

    id: int
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    public_slug: Optional[str] = None

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    user: Optional[UserSummary] = None
