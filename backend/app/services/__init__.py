"""
Domain services for Shiori.
"""
from app.services.access import Access, AccessKind, AccessPolicy, Action
from app.services.identity import ExternalIdentity, GoogleIdentityVerifier
from app.services.users import UserDirectory
from app.services.schedule import ScheduleService
from app.services.sharing import ShareService
from app.services.invites import InviteService, InviteStatus

__all__ = [
    "Access",
    "AccessKind",
    "AccessPolicy",
    "Action",
    "ExternalIdentity",
    "GoogleIdentityVerifier",
    "UserDirectory",
    "ScheduleService",
    "ShareService",
    "InviteService",
    "InviteStatus",
]
