"""
Error taxonomy shared by services and translated to responses in app.main.
"""
from typing import Optional


class ShioriError(Exception):
    """Base class for errors that map to a caller-visible outcome."""

    code = "INTERNAL"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationFailed(ShioriError):
    code = "VALIDATION"
    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(ShioriError):
    code = "UNAUTHENTICATED"
    status_code = 401
    default_message = "Login required"


class Forbidden(ShioriError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "You do not have permission for this schedule"


class NotFound(ShioriError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class Conflict(ShioriError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Invite already redeemed"


class Expired(ShioriError):
    code = "EXPIRED"
    status_code = 410
    default_message = "Invite has expired"


class RateLimited(ShioriError):
    code = "RATE_LIMITED"
    status_code = 429
    default_message = "Too many requests"


class IdentityProviderError(ShioriError):
    """The identity provider could not be reached or is not configured."""

    default_message = "Identity provider unavailable"
