"""
Core building blocks for Shiori: errors, sessions, rate limits and time helpers.
"""
from app.core.errors import (
    ShioriError,
    ValidationFailed,
    Unauthenticated,
    Forbidden,
    NotFound,
    Conflict,
    Expired,
    RateLimited,
    IdentityProviderError,
)

__all__ = [
    "ShioriError",
    "ValidationFailed",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "Conflict",
    "Expired",
    "RateLimited",
    "IdentityProviderError",
]
