"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Lowest cost bcrypt accepts; keeps hashing fast in tests
TEST_BCRYPT_ROUNDS = 4


@pytest_asyncio.fixture
async def db():
    """Create an initialized in-memory database."""
    from messenger.storage import Database, JsonFileStore

    database = Database(JsonFileStore(":memory:"))
    await database.init()
    return database


@pytest.fixture
def event_bus():
    """Create EventBus."""
    from messenger.event_bus import EventBus

    return EventBus()


@pytest_asyncio.fixture
async def tracker(event_bus):
    """Create UpdateTracker subscribed to the event bus."""
    from messenger.tracker import UpdateTracker

    tr = UpdateTracker(event_bus)
    await tr.start()
    return tr


@pytest.fixture
def hasher():
    """Create a fast PasswordHasher."""
    from messenger.auth import PasswordHasher

    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def tokens(db):
    """Create AccessTokenService."""
    from messenger.auth import AccessTokenService

    return AccessTokenService(db, ttl_days=7)


@pytest.fixture
def conversations(db):
    """Create ConversationRegistry."""
    from messenger.conversations import ConversationRegistry

    return ConversationRegistry(db)


@pytest.fixture
def messages(db, event_bus):
    """Create MessageLog publishing to the event bus."""
    from messenger.messages import MessageLog

    return MessageLog(db, event_bus=event_bus)


@pytest.fixture
def users(db, tokens, hasher):
    """Create UserDirectory."""
    from messenger.users import UserDirectory

    return UserDirectory(db, tokens=tokens, hasher=hasher)


@pytest.fixture
def social(db, conversations, messages, event_bus):
    """Create SocialGraph."""
    from messenger.users import SocialGraph

    return SocialGraph(
        db, conversations=conversations, messages=messages, event_bus=event_bus
    )


@pytest.fixture
def register(users):
    """Register a user and return the profile; fields default from username."""

    async def _register(username: str, password: str = "secret123", display_name=None):
        profile, _ = await users.register(
            username=username,
            email=f"{username}@example.com",
            password=password,
            display_name=display_name or username.capitalize(),
        )
        return profile

    return _register
