"""
Google identity-token verification.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from fastapi.concurrency import run_in_threadpool
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from app.config import settings
from app.core.errors import IdentityProviderError, Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalIdentity:
    subject: str
    email: Optional[str] = None
    email_verified: bool = False
    name: Optional[str] = None
    picture: Optional[str] = None


class _TimeoutSession(requests.Session):
    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def request(self, *args, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(*args, **kwargs)


class GoogleIdentityVerifier:
    """Verifies Google ID tokens against Google's published certificates."""

    def __init__(self, client_id: Optional[str], timeout: float = 10.0):
        self.client_id = client_id
        self.timeout = timeout

    def _verify_sync(self, token: str) -> dict:
        transport = google_requests.Request(session=_TimeoutSession(self.timeout))
        return id_token.verify_oauth2_token(token, transport, self.client_id)

    async def verify(self, token: str) -> ExternalIdentity:
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID not configured")
            raise IdentityProviderError("Identity provider not configured")

        try:
            idinfo = await run_in_threadpool(self._verify_sync, token)
        except google_exceptions.TransportError as e:
            raise IdentityProviderError() from e
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            # Bad signature, wrong audience, expired, malformed
            logger.warning(f"Identity token rejected: {e}")
            raise Unauthenticated("Invalid identity token") from e

        subject = idinfo.get("sub")
        if not subject:
            raise Unauthenticated("Invalid identity token")

        return ExternalIdentity(
            subject=str(subject),
            email=idinfo.get("email"),
            email_verified=bool(idinfo.get("email_verified")),
            name=idinfo.get("name"),
            picture=idinfo.get("picture"),
        )


def get_identity_verifier() -> GoogleIdentityVerifier:
    """Dependency returning the configured identity verifier."""
    return GoogleIdentityVerifier(settings.google_client_id, settings.identity_timeout_seconds)
