"""Tests for AccessTokenService and PasswordHasher."""

import re
from datetime import datetime, timedelta, timezone

import pytest

from messenger.auth import AccessTokenService


def _expire(db, token: str) -> None:
    for access_token in db.snapshot.access_tokens:
        if access_token.token == token:
            access_token.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)


class TestAccessTokenIssue:
    """Tests for AccessTokenService.issue()."""

    async def test_token_is_64_hex_chars(self, tokens):
        """Test that tokens carry 256 bits of randomness as hex."""
        access_token = await tokens.issue("u1")
        assert re.fullmatch(r"[0-9a-f]{64}", access_token.token)

    async def test_default_ttl(self, tokens):
        """Test that tokens expire after the configured lifetime."""
        access_token = await tokens.issue("u1")
        assert access_token.expires_at - access_token.created_at == timedelta(days=7)

    async def test_custom_ttl(self, tokens):
        """Test the per-call lifetime override."""
        access_token = await tokens.issue("u1", ttl_days=1)
        assert access_token.expires_at - access_token.created_at == timedelta(days=1)

    async def test_issue_persists(self, tokens, db):
        """Test that issued tokens are in the snapshot."""
        access_token = await tokens.issue("u1")
        assert access_token in db.snapshot.access_tokens

    async def test_multiple_tokens_stay_valid(self, tokens):
        """Test that issuing again does not revoke earlier tokens."""
        first = await tokens.issue("u1")
        second = await tokens.issue("u1")

        assert await tokens.verify(first.token) == "u1"
        assert await tokens.verify(second.token) == "u1"


class TestAccessTokenVerify:
    """Tests for AccessTokenService.verify()."""

    async def test_verify_valid(self, tokens):
        """Test verify() returns the issuing user id."""
        access_token = await tokens.issue("u1")
        assert await tokens.verify(access_token.token) == "u1"

    async def test_verify_unknown(self, tokens):
        """Test verify() on an unknown token returns None."""
        assert await tokens.verify("nope") is None

    async def test_verify_expired_deletes_token(self, tokens, db):
        """Test that an expired token fails and is removed."""
        access_token = await tokens.issue("u1")
        _expire(db, access_token.token)

        assert await tokens.verify(access_token.token) is None
        assert all(t.token != access_token.token for t in db.snapshot.access_tokens)
        assert await tokens.verify(access_token.token) is None


class TestAccessTokenRevoke:
    """Tests for revoke(), revoke_all_for_user() and sweep_expired()."""

    async def test_revoke(self, tokens):
        """Test revoke() removes exactly one token."""
        first = await tokens.issue("u1")
        second = await tokens.issue("u1")

        assert await tokens.revoke(first.token) is True
        assert await tokens.verify(first.token) is None
        assert await tokens.verify(second.token) == "u1"

    async def test_revoke_unknown(self, tokens):
        """Test revoking an unknown token reports False."""
        assert await tokens.revoke("nope") is False

    async def test_revoke_all_for_user(self, tokens):
        """Test revoke_all_for_user() leaves other users alone."""
        await tokens.issue("u1")
        await tokens.issue("u1")
        other = await tokens.issue("u2")

        assert await tokens.revoke_all_for_user("u1") == 2
        assert await tokens.verify(other.token) == "u2"

    async def test_sweep_expired(self, tokens, db):
        """Test sweep_expired() only removes expired tokens."""
        stale = await tokens.issue("u1")
        fresh = await tokens.issue("u1")
        _expire(db, stale.token)

        assert await tokens.sweep_expired() == 1
        assert [t.token for t in db.snapshot.access_tokens] == [fresh.token]

    async def test_tokens_survive_restart(self, tmp_path):
        """Test that a token verifies against a reloaded database."""
        from messenger.storage import Database, JsonFileStore

        path = tmp_path / "db.json"
        db = Database(JsonFileStore(path))
        await db.init()
        access_token = await AccessTokenService(db).issue("u1")

        reloaded = Database(JsonFileStore(path))
        await reloaded.init()
        assert await AccessTokenService(reloaded).verify(access_token.token) == "u1"


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    async def test_hash_is_not_plaintext(self, hasher):
        """Test the stored value is a bcrypt hash."""
        hashed = await hasher.hash("secret123")
        assert hashed != "secret123"
        assert hashed.startswith("$2")

    async def test_verify(self, hasher):
        """Test correct and wrong passwords."""
        hashed = await hasher.hash("secret123")
        assert await hasher.verify("secret123", hashed) is True
        assert await hasher.verify("wrong", hashed) is False

    async def test_salted(self, hasher):
        """Test the same password hashes differently each time."""
        assert await hasher.hash("secret123") != await hasher.hash("secret123")

    @pytest.mark.parametrize("stored", ["", "plaintext", "$2b$invalid"])
    async def test_verify_garbage_hash(self, hasher, stored):
        """Test that a non-bcrypt stored value never verifies."""
        assert await hasher.verify("secret123", stored) is False
