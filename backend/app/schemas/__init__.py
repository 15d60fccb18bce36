"""
Pydantic schemas for API request/response validation.
"""
from app.schemas.auth import (
    GoogleLogin,
    UserSummary,
    PublicUser,
    MeResponse,
)
from app.schemas.schedule import (
    DayUpsert,
    ItemCreate,
    ItemUpdate,
    ItemResponse,
    ScheduleResponse,
    DayResponse,
    ItemEnvelope,
    OkResponse,
)
from app.schemas.sharing import (
    ShareUpsert,
    ShareResponse,
    ShareList,
    ShareEnvelope,
    IncomingShare,
    IncomingShareList,
    InviteCreate,
    InviteResponse,
    InviteEnvelope,
    InviteList,
    InviteMeta,
    InviteMetaEnvelope,
    InviteAccepted,
)

__all__ = [
    # Auth
    "GoogleLogin",
    "UserSummary",
    "PublicUser",
    "MeResponse",
    # Schedule
    "DayUpsert",
    "ItemCreate",
    "ItemUpdate",
    "ItemResponse",
    "ScheduleResponse",
    "DayResponse",
    "ItemEnvelope",
    "OkResponse",
    # Shares
    "ShareUpsert",
    "ShareResponse",
    "ShareList",
    "ShareEnvelope",
    "IncomingShare",
    "IncomingShareList",
    # Invites
    "InviteCreate",
    "InviteResponse",
    "InviteEnvelope",
    "InviteList",
    "InviteMeta",
    "InviteMetaEnvelope",
    "InviteAccepted",
]
