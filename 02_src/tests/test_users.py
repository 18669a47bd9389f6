"""Tests for UserDirectory."""

import pytest

from messenger.errors import ConflictError, DuplicateEmailError, InvariantViolationError


class TestRegister:
    """Tests for UserDirectory.register()."""

    async def test_register_returns_profile_and_token(self, users, tokens):
        """Test registration signs the user in."""
        profile, access_token = await users.register(
            username="alice",
            email="a@x.com",
            password="secret123",
            display_name="Alice",
        )

        assert profile.username == "alice"
        assert profile.friend_ids == []
        assert profile.friend_request_user_ids == []
        assert await tokens.verify(access_token.token) == profile.id

    async def test_password_is_hashed(self, users):
        """Test the stored record never holds the plaintext password."""
        await users.register("alice", "a@x.com", "secret123", "Alice")

        record = await users.find_by_email("a@x.com")
        assert record.password != "secret123"

    async def test_duplicate_email(self, users):
        """Test a second registration with the same email fails."""
        first, _ = await users.register("alice", "a@x.com", "secret123", "Alice")

        with pytest.raises(DuplicateEmailError) as exc_info:
            await users.register("alice2", "a@x.com", "other123", "Alice Two")

        assert exc_info.value.message == "Email already exists"
        assert isinstance(exc_info.value, ConflictError)
        assert [u.id for u in await users.find_all()] == [first.id]
        assert (await users.find_by_id(first.id)).display_name == "Alice"

    async def test_email_is_case_sensitive(self, users):
        """Test emails differing only in case are distinct."""
        await users.register("alice", "a@x.com", "secret123", "Alice")
        await users.register("alice2", "A@x.com", "secret123", "Alice")

        assert len(await users.find_all()) == 2


class TestAuthenticate:
    """Tests for UserDirectory.authenticate()."""

    async def test_login(self, users, tokens):
        """Test valid credentials issue a new token."""
        profile, _ = await users.register("alice", "a@x.com", "secret123", "Alice")

        result = await users.authenticate("a@x.com", "secret123")

        assert result is not None
        user, access_token = result
        assert user.id == profile.id
        assert user.last_active is not None
        assert await tokens.verify(access_token.token) == profile.id

    async def test_login_keeps_older_tokens(self, users, tokens):
        """Test earlier sessions stay valid after a new login."""
        _, first = await users.register("alice", "a@x.com", "secret123", "Alice")
        await users.authenticate("a@x.com", "secret123")

        assert await tokens.verify(first.token) is not None

    async def test_wrong_password(self, users):
        """Test a wrong password returns None."""
        await users.register("alice", "a@x.com", "secret123", "Alice")
        assert await users.authenticate("a@x.com", "nope") is None

    async def test_unknown_email(self, users):
        """Test an unknown email returns None."""
        assert await users.authenticate("ghost@x.com", "secret123") is None


class TestSessions:
    """Tests for token-based session helpers."""

    async def test_get_user_by_token(self, users):
        """Test resolving a bearer token to a profile."""
        profile, access_token = await users.register("alice", "a@x.com", "pw12345", "Alice")
        assert (await users.get_user_by_token(access_token.token)).id == profile.id
        assert await users.get_user_by_token("nope") is None

    async def test_logout(self, users):
        """Test logout() invalidates only the given token."""
        _, first = await users.register("alice", "a@x.com", "pw12345", "Alice")
        _, second = await users.authenticate("a@x.com", "pw12345")

        assert await users.logout(first.token) is True
        assert await users.get_user_by_token(first.token) is None
        assert await users.get_user_by_token(second.token) is not None

    async def test_logout_all_sessions(self, users):
        """Test logout_all_sessions() invalidates every token."""
        profile, first = await users.register("alice", "a@x.com", "pw12345", "Alice")
        _, second = await users.authenticate("a@x.com", "pw12345")

        assert await users.logout_all_sessions(profile.id) == 2
        assert await users.get_user_by_token(first.token) is None
        assert await users.get_user_by_token(second.token) is None


class TestLookups:
    """Tests for finders and search."""

    async def test_find_by_id_unknown(self, users):
        """Test an unknown id returns None."""
        assert await users.find_by_id("nope") is None

    async def test_find_by_ids(self, register, users):
        """Test find_by_ids() skips unknown ids."""
        alice = await register("alice")
        bob = await register("bob")

        found = await users.find_by_ids([bob.id, "nope", alice.id])
        assert {u.id for u in found} == {alice.id, bob.id}

    async def test_find_by_email_returns_copy(self, register, users):
        """Test changing the returned record does not touch stored data."""
        alice = await register("alice")

        record = await users.find_by_email("alice@example.com")
        record.friend_ids.append("intruder")
        record.display_name = "Mallory"

        stored = await users.find_by_id(alice.id)
        assert stored.friend_ids == []
        assert stored.display_name == "Alice"

    async def test_search_by_display_name(self, register, users):
        """Test case-insensitive substring search."""
        await register("alice", display_name="Alice Smith")
        await register("bob", display_name="Bob Smithers")
        await register("carol", display_name="Carol Jones")

        found = await users.search_by_display_name("SMITH")
        assert sorted(u.display_name for u in found) == ["Alice Smith", "Bob Smithers"]


class TestUpdate:
    """Tests for profile and password updates."""

    async def test_update_profile(self, register, users):
        """Test display name and avatar can change."""
        alice = await register("alice")

        updated = await users.update(
            alice.id, display_name="Ally", avatar_url="https://cdn/a.png"
        )

        assert updated.display_name == "Ally"
        assert updated.avatar_url == "https://cdn/a.png"
        assert updated.updated_at >= alice.updated_at

    async def test_update_rejects_other_fields(self, register, users):
        """Test identity and credential fields cannot be changed by update()."""
        alice = await register("alice")

        with pytest.raises(ValueError):
            await users.update(alice.id, email="new@x.com")

    @pytest.mark.parametrize("display_name", [None, "", "   "])
    async def test_update_rejects_blank_display_name(self, register, users, display_name):
        """Test a missing or blank display name is refused and search keeps working."""
        alice = await register("alice")
        await register("bob")

        with pytest.raises(InvariantViolationError):
            await users.update(alice.id, display_name=display_name)

        assert (await users.find_by_id(alice.id)).display_name == "Alice"
        assert [u.username for u in await users.search_by_display_name("bo")] == ["bob"]

    async def test_update_unknown(self, users):
        """Test updating an unknown user returns None."""
        assert await users.update("nope", display_name="X") is None

    async def test_update_password(self, register, users):
        """Test the new password works and the old one does not."""
        alice = await register("alice", password="old12345")

        assert await users.update_password(alice.id, "new12345") is True
        assert await users.authenticate("alice@example.com", "old12345") is None
        assert await users.authenticate("alice@example.com", "new12345") is not None

    async def test_verify_password(self, register, users):
        """Test checking a password without signing in."""
        alice = await register("alice", password="old12345")

        assert await users.verify_password(alice.id, "old12345") is True
        assert await users.verify_password(alice.id, "wrong") is False
        assert await users.verify_password("nope", "old12345") is False


class TestDelete:
    """Tests for UserDirectory.delete()."""

    async def test_delete(self, register, users):
        """Test deleting a user."""
        alice = await register("alice")

        assert await users.delete(alice.id) is True
        assert await users.find_by_id(alice.id) is None
        assert await users.delete(alice.id) is False

    async def test_delete_does_not_cascade(self, register, users, conversations):
        """Test the user's conversations are left in place."""
        alice = await register("alice")
        bob = await register("bob")
        conversation = await conversations.create_direct([alice.id, bob.id])

        await users.delete(alice.id)

        assert await conversations.find_by_id(conversation.id) is not None
