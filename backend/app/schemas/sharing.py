"""
Share and invite schemas.
"""
from datetime import date as Date, datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, field_validator

from app.config import settings
from app.core.timeutils import as_utc, parse_date
from app.schemas.auth import PublicUser, UserSummary
from app.schemas.schedule import DateString


class ShareUpsert(BaseModel):
    date: DateString
    email: EmailStr
    can_edit: bool = True

    @property
    def day(self) -> Date:
        return parse_date(self.date)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class ShareResponse(BaseModel):
    id: int
    shared_with_user_id: int
    shared_with: Optional[UserSummary] = None
    can_edit: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ShareList(BaseModel):
    shares: List[ShareResponse]


class ShareEnvelope(BaseModel):
    share: ShareResponse


class IncomingShare(BaseModel):
    schedule_id: int
    owner: UserSummary
    date: Date
    can_edit: bool


class IncomingShareList(BaseModel):
    shared: List[IncomingShare]


class InviteCreate(BaseModel):
    date: DateString
    can_edit: bool = True
    email: Optional[EmailStr] = None
    ttl_hours: Optional[int] = None  # defaults to 14 days

    @property
    def day(self) -> Date:
        return parse_date(self.date)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else None

    @field_validator("ttl_hours")
    @classmethod
    def check_ttl(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        if not settings.invite_min_ttl_hours <= v <= settings.invite_max_ttl_hours:
            raise ValueError(
                f"ttl_hours must be between {settings.invite_min_ttl_hours} "
                f"and {settings.invite_max_ttl_hours}"
            )
        return v


class InviteResponse(BaseModel):
    """Owner view of an invite. Carries the token; never return it to anyone else."""

    id: int
    token: str
    invited_email: Optional[str] = None
    can_edit: bool
    expires_at: Optional[datetime] = None
    redeemed_at: Optional[datetime] = None
    redeemed_by_user_id: Optional[int] = None
    created_at: datetime
    status: str  # 'active', 'redeemed', 'expired'

    @field_validator("expires_at", "redeemed_at", "created_at")
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class InviteEnvelope(BaseModel):
    invite: InviteResponse


class InviteList(BaseModel):
    invites: List[InviteResponse]


class InviteMeta(BaseModel):
    """What anyone holding the link may see."""

    owner: PublicUser
    date: Date
    can_edit: bool
    invited_email: Optional[str] = None
    expires_at: Optional[datetime] = None
    redeemed_at: Optional[datetime] = None
    expired: bool

    @field_validator("expires_at", "redeemed_at")
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class InviteMetaEnvelope(BaseModel):
    invite: InviteMeta


class InviteAccepted(BaseModel):
    owner_id: int
    date: Date
