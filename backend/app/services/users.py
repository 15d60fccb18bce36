"""
User directory: internal ids, emails, public slugs and profile refresh.
"""
import logging
import secrets
import string
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.errors import ShioriError
from app.models.user import User
from app.services.identity import ExternalIdentity

logger = logging.getLogger(__name__)

SLUG_ALPHABET = string.ascii_lowercase + string.digits


def generate_slug(length: Optional[int] = None) -> str:
    length = length or settings.slug_length
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


class UserDirectory:
    """Lookup and maintenance of User rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_by_external_id(self, external_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.external_id == external_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.public_slug == slug))
        return result.scalar_one_or_none()

    async def resolve_owner(
        self,
        owner_id: Optional[int] = None,
        owner_slug: Optional[str] = None,
    ) -> Optional[int]:
        """
        Turn an owner reference into a user id.

        A numeric id wins over a slug. Unknown references give None rather
        than an error so callers can treat them as "no schedule".
        """
        if owner_id is not None:
            user = await self.get(owner_id)
            return user.id if user else None
        if owner_slug:
            user = await self.get_by_slug(owner_slug)
            return user.id if user else None
        return None

    async def upsert_from_identity(self, identity: ExternalIdentity) -> User:
        """Create the user on first login, refresh profile fields afterwards."""
        user = await self.get_by_external_id(identity.subject)

        email = None
        if identity.email and identity.email_verified:
            email = identity.email.strip().lower()
            holder = await self.get_by_email(email)
            if holder is not None and (user is None or holder.id != user.id):
                logger.warning(
                    f"Email for identity {identity.subject} already belongs to user {holder.id}; not linking"
                )
                email = None

        if user is None:
            user = User(
                external_id=identity.subject,
                email=email,
                name=identity.name,
                avatar_url=identity.picture,
            )
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError:
                # Concurrent first login for the same identity
                await self.db.rollback()
                existing = await self.get_by_external_id(identity.subject)
                if existing is None:
                    raise
                return existing
            logger.info(f"Created user {user.id} for external identity")
            return user

        if email:
            user.email = email
        if identity.name:
            user.name = identity.name
        if identity.picture:
            user.avatar_url = identity.picture
        await self.db.commit()
        return user

    async def ensure_public_slug(self, user: User) -> str:
        """Assign a public slug on first need. Collisions are retried."""
        if user.public_slug:
            return user.public_slug

        for _ in range(settings.slug_max_attempts):
            candidate = generate_slug()
            taken = await self.db.scalar(select(User.id).where(User.public_slug == candidate))
            if taken is not None:
                continue
            user.public_slug = candidate
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                await self.db.refresh(user)
                if user.public_slug:
                    return user.public_slug
                continue
            logger.info(f"Assigned public slug to user {user.id}")
            return candidate

        raise ShioriError("Could not allocate a public slug")
