"""Tests for Application."""

from datetime import datetime, timedelta, timezone

import pytest

from messenger.app import Application
from messenger.models import AccessToken

TEST_ROUNDS = 4


class TestApplicationStart:
    """Tests for Application.start()."""

    @pytest.mark.asyncio
    async def test_start_initializes_components(self):
        """Test that start initializes all components."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()

        assert app._db is not None
        assert app._event_bus is not None
        assert app._tracker is not None
        assert app._tokens is not None
        assert app._conversations is not None
        assert app._messages is not None
        assert app._users is not None
        assert app._social is not None

    @pytest.mark.asyncio
    async def test_start_wires_dependencies(self):
        """Test that components share the same database and event bus."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()

        assert app._tokens._db is app._db
        assert app._users._tokens is app._tokens
        assert app._social._conversations is app._conversations
        assert app._social._messages is app._messages
        assert app._messages._event_bus is app._event_bus
        assert app._tracker._event_bus is app._event_bus

    @pytest.mark.asyncio
    async def test_start_uses_configured_ttl(self):
        """Test the token lifetime passed to Application is used."""
        app = Application(db_path=":memory:", token_ttl=2, password_rounds=TEST_ROUNDS)
        await app.start()

        access_token = await app.tokens.issue("u1")
        assert access_token.expires_at - access_token.created_at == timedelta(days=2)

    @pytest.mark.asyncio
    async def test_database_path_from_env(self, monkeypatch, tmp_path):
        """Test DATABASE_PATH is honoured when no path is given."""
        path = tmp_path / "env.json"
        monkeypatch.setenv("DATABASE_PATH", str(path))

        app = Application(password_rounds=TEST_ROUNDS)
        await app.start()

        assert path.exists()

    @pytest.mark.asyncio
    async def test_start_sweeps_expired_tokens(self, tmp_path):
        """Test expired tokens from a previous run are dropped on start."""
        path = str(tmp_path / "db.json")
        first = Application(db_path=path, password_rounds=TEST_ROUNDS)
        await first.start()
        now = datetime.now(timezone.utc)
        async with first.db.transaction() as snapshot:
            snapshot.access_tokens.append(
                AccessToken(
                    user_id="u1",
                    token="stale",
                    created_at=now - timedelta(days=8),
                    expires_at=now - timedelta(days=1),
                )
            )
            first.db.mark_dirty()
        await first.stop()

        second = Application(db_path=path, password_rounds=TEST_ROUNDS)
        await second.start()

        assert second.db.snapshot.access_tokens == []


class TestApplicationLifecycle:
    """Tests for Application.stop() and reset()."""

    @pytest.mark.asyncio
    async def test_data_survives_restart(self, tmp_path):
        """Test that a restart sees committed users."""
        path = str(tmp_path / "db.json")
        first = Application(db_path=path, password_rounds=TEST_ROUNDS)
        await first.start()
        profile, _ = await first.users.register("alice", "a@x.com", "pw12345", "Alice")
        await first.stop()

        second = Application(db_path=path, password_rounds=TEST_ROUNDS)
        await second.start()

        assert (await second.users.find_by_id(profile.id)).username == "alice"

    @pytest.mark.asyncio
    async def test_stop_releases_database(self):
        """Test that the database is unavailable after stop."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()
        await app.stop()

        with pytest.raises(RuntimeError, match="not started"):
            _ = app.db

    @pytest.mark.parametrize(
        "name",
        ["db", "event_bus", "tracker", "tokens", "conversations", "messages", "users", "social"],
    )
    @pytest.mark.asyncio
    async def test_stop_releases_every_component(self, name):
        """Test no service stays reachable after stop."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()
        await app.stop()

        with pytest.raises(RuntimeError, match="not started"):
            getattr(app, name)

    @pytest.mark.asyncio
    async def test_restart_after_stop(self):
        """Test an application can be started again after stop."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()
        await app.stop()
        await app.start()

        assert await app.users.find_all() == []

    @pytest.mark.asyncio
    async def test_reset_clears_data(self):
        """Test that reset drops users and pending update flags."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()
        await app.users.register("alice", "a@x.com", "pw12345", "Alice")
        app.tracker.mark("alice")

        await app.reset()

        assert await app.users.find_all() == []
        assert not app.tracker.has_updates("alice")

    @pytest.mark.asyncio
    async def test_components_work_after_reset(self):
        """Test that services keep working on the cleared dataset."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()
        await app.users.register("alice", "a@x.com", "pw12345", "Alice")
        await app.reset()

        profile, _ = await app.users.register("alice", "a@x.com", "pw12345", "Alice")
        assert await app.users.find_by_id(profile.id) is not None


class TestApplicationProperties:
    """Tests for Application properties."""

    @pytest.mark.asyncio
    async def test_properties_return_components(self):
        """Test each property exposes the started component."""
        app = Application(db_path=":memory:", password_rounds=TEST_ROUNDS)
        await app.start()

        assert app.db is app._db
        assert app.event_bus is app._event_bus
        assert app.tracker is app._tracker
        assert app.tokens is app._tokens
        assert app.conversations is app._conversations
        assert app.messages is app._messages
        assert app.users is app._users
        assert app.social is app._social

    @pytest.mark.parametrize(
        "name",
        ["db", "event_bus", "tracker", "tokens", "conversations", "messages", "users", "social"],
    )
    def test_property_raises_when_not_started(self, name):
        """Test that properties raise before start()."""
        app = Application(db_path=":memory:")

        with pytest.raises(RuntimeError, match="not started"):
            getattr(app, name)
