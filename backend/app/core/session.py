"""
Stateless session credentials.

A session is a signed JWT carrying the internal user id, delivered in an
httpOnly cookie. There is no server-side store; expiry is the only revocation.
"""
import logging
from datetime import timedelta
from typing import Optional

from fastapi import Response
from jose import JWTError, jwt

from app.config import Settings, settings
from app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

TOKEN_TYPE = "session"


class SessionManager:
    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_days: int = 30,
        cookie_name: str = "shiori_session",
        secure_cookie: bool = False,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(days=ttl_days)
        self.cookie_name = cookie_name
        self.secure_cookie = secure_cookie

    @classmethod
    def from_settings(cls, config: Settings) -> "SessionManager":
        return cls(
            secret=config.session_secret,
            algorithm=config.session_algorithm,
            ttl_days=config.session_ttl_days,
            cookie_name=config.session_cookie_name,
            secure_cookie=config.is_production,
        )

    def issue(self, user_id: int) -> str:
        now = utcnow()
        payload = {
            "sub": str(user_id),
            "type": TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[int]:
        """Return the user id for a valid credential, otherwise None."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Session verification failed: {e}")
            return None

        if payload.get("type") != TOKEN_TYPE:
            logger.warning("Session verification failed: wrong token type")
            return None
        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError):
            logger.warning("Session verification failed: bad subject")
            return None

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=int(self.ttl.total_seconds()),
            httponly=True,
            samesite="lax",
            secure=self.secure_cookie,
            path="/",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            httponly=True,
            samesite="lax",
            secure=self.secure_cookie,
            path="/",
        )


session_manager = SessionManager.from_settings(settings)
