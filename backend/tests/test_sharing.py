"""Tests for app.services.sharing: owner-managed share registry."""

from datetime import date

import pytest

from app.core.errors import NotFound, ValidationFailed
from app.services.access import AccessKind, AccessPolicy
from app.services.sharing import ShareService

from conftest import DAY


class TestUpsertShare:
    @pytest.mark.asyncio
    async def test_creates_schedule_and_share(self, db, make_user):
        owner = await make_user()
        friend = await make_user(email="friend@example.com")
        share = await ShareService(db, owner.id).upsert_share(DAY, "friend@example.com", can_edit=False)
        assert share.shared_with_user_id == friend.id
        assert share.shared_with.email == "friend@example.com"
        assert share.can_edit is False

        access = await AccessPolicy(db).lookup(friend.id, owner.id, DAY)
        assert access.kind == AccessKind.SHARED

    @pytest.mark.asyncio
    async def test_email_lookup_ignores_case(self, db, make_user):
        owner = await make_user()
        friend = await make_user(email="friend@example.com")
        share = await ShareService(db, owner.id).upsert_share(DAY, "  Friend@Example.COM ", can_edit=True)
        assert share.shared_with_user_id == friend.id

    @pytest.mark.asyncio
    async def test_second_upsert_updates_flag(self, db, make_user):
        owner = await make_user()
        await make_user(email="friend@example.com")
        service = ShareService(db, owner.id)
        first = await service.upsert_share(DAY, "friend@example.com", can_edit=False)
        second = await service.upsert_share(DAY, "friend@example.com", can_edit=True)
        assert first.id == second.id
        assert second.can_edit is True
        assert len(await service.list_shares(DAY)) == 1

    @pytest.mark.asyncio
    async def test_unknown_email(self, db, make_user):
        owner = await make_user()
        with pytest.raises(NotFound, match="must log in first"):
            await ShareService(db, owner.id).upsert_share(DAY, "nobody@example.com", can_edit=True)

    @pytest.mark.asyncio
    async def test_self_share_rejected(self, db, make_user):
        owner = await make_user(email="me@example.com")
        with pytest.raises(ValidationFailed):
            await ShareService(db, owner.id).upsert_share(DAY, "me@example.com", can_edit=True)


class TestListShares:
    @pytest.mark.asyncio
    async def test_no_schedule_is_empty(self, db, make_user):
        owner = await make_user()
        assert await ShareService(db, owner.id).list_shares(DAY) == []

    @pytest.mark.asyncio
    async def test_ordered_oldest_first(self, db, make_user):
        owner = await make_user()
        await make_user(email="b@example.com")
        await make_user(email="a@example.com")
        service = ShareService(db, owner.id)
        await service.upsert_share(DAY, "b@example.com", can_edit=True)
        await service.upsert_share(DAY, "a@example.com", can_edit=False)
        shares = await service.list_shares(DAY)
        assert [s.shared_with.email for s in shares] == ["b@example.com", "a@example.com"]


class TestRevokeShare:
    @pytest.mark.asyncio
    async def test_revoke_by_user_id(self, db, make_user):
        owner = await make_user()
        friend = await make_user(email="friend@example.com")
        service = ShareService(db, owner.id)
        await service.upsert_share(DAY, "friend@example.com", can_edit=True)
        await service.revoke_share(DAY, user_id=friend.id)
        assert await service.list_shares(DAY) == []
        access = await AccessPolicy(db).lookup(friend.id, owner.id, DAY)
        assert access.kind == AccessKind.NONE

    @pytest.mark.asyncio
    async def test_revoke_by_email(self, db, make_user):
        owner = await make_user()
        await make_user(email="friend@example.com")
        service = ShareService(db, owner.id)
        await service.upsert_share(DAY, "friend@example.com", can_edit=True)
        await service.revoke_share(DAY, email="FRIEND@example.com")
        assert await service.list_shares(DAY) == []

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, db, make_user):
        owner = await make_user()
        friend = await make_user()
        service = ShareService(db, owner.id)
        await service.revoke_share(DAY, user_id=friend.id)
        await service.revoke_share(DAY, email="ghost@example.com")

    @pytest.mark.asyncio
    async def test_revoke_needs_a_target(self, db, make_user):
        owner = await make_user()
        with pytest.raises(ValidationFailed):
            await ShareService(db, owner.id).revoke_share(DAY)


class TestSharedWithMe:
    @pytest.mark.asyncio
    async def test_lists_only_that_date(self, db, make_user):
        alice = await make_user(email="alice@example.com")
        bob = await make_user(email="bob@example.com")
        carol = await make_user(email="carol@example.com")
        await ShareService(db, alice.id).upsert_share(DAY, "carol@example.com", can_edit=True)
        await ShareService(db, bob.id).upsert_share(DAY, "carol@example.com", can_edit=False)
        await ShareService(db, bob.id).upsert_share(date(2025, 3, 20), "carol@example.com", can_edit=True)

        incoming = await ShareService(db, carol.id).shared_with_me(DAY)
        assert [(s.schedule.owner.email, s.can_edit) for s in incoming] == [
            ("alice@example.com", True),
            ("bob@example.com", False),
        ]
