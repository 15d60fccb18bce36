"""
API routers for Shiori.
"""
from app.api import auth, schedule, shares, invites

__all__ = [
    "auth",
    "schedule",
    "shares",
    "invites",
]
