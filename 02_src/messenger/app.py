"""Application bootstrap and lifecycle management."""

import os
from typing import Protocol

from .auth import AccessTokenService, IAccessTokenService, PasswordHasher
from .config import bcrypt_rounds, resolve_db_path, token_ttl_days
from .conversations import ConversationRegistry, IConversationRegistry
from .event_bus import EventBus, IEventBus
from .logging_config import get_logger
from .messages import IMessageLog, MessageLog
from .storage import Database, JsonFileStore
from .tracker import IUpdateTracker, UpdateTracker
from .users import ISocialGraph, IUserDirectory, SocialGraph, UserDirectory

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Drop all data (tests and local development)."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        db_path: str | None = None,
        token_ttl: int | None = None,
        password_rounds: int | None = None,
    ):
        env_db_path = os.getenv("DATABASE_PATH") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._token_ttl = token_ttl_days() if token_ttl is None else token_ttl
        self._password_rounds = (
            bcrypt_rounds() if password_rounds is None else password_rounds
        )

        # Components (will be initialized in start())
        self._db: Database | None = None
        self._event_bus: EventBus | None = None
        self._tracker: UpdateTracker | None = None
        self._tokens: AccessTokenService | None = None
        self._conversations: ConversationRegistry | None = None
        self._messages: MessageLog | None = None
        self._users: UserDirectory | None = None
        self._social: SocialGraph | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application", extra={"context": {"db_path": str(self._db_path)}})

        # 1. Database (no dependencies)
        self._db = Database(JsonFileStore(self._db_path))
        await self._db.init()

        # 2. EventBus + UpdateTracker
        self._event_bus = EventBus()
        self._tracker = UpdateTracker(self._event_bus)
        await self._tracker.start()

        # 3. Single-entity services (depend on Database)
        self._tokens = AccessTokenService(self._db, ttl_days=self._token_ttl)
        self._conversations = ConversationRegistry(self._db)
        self._messages = MessageLog(self._db, event_bus=self._event_bus)

        # 4. Users (depend on tokens); social graph composes conversations + messages
        self._users = UserDirectory(
            self._db,
            tokens=self._tokens,
            hasher=PasswordHasher(rounds=self._password_rounds),
        )
        self._social = SocialGraph(
            self._db,
            conversations=self._conversations,
            messages=self._messages,
            event_bus=self._event_bus,
        )

        await self.sweep_expired_tokens()
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order.

        Every commit is already on disk, so only in-memory state is dropped.
        """
        if self._tracker:
            self._tracker.clear()

        self._social = None
        self._users = None
        self._messages = None
        self._conversations = None
        self._tokens = None
        self._tracker = None
        self._event_bus = None
        self._db = None
        logger.info("Application stopped")

    async def reset(self) -> None:
        """Drop all data (tests and local development)."""
        if self._db:
            await self._db.clear()
            logger.info("Database cleared")
        if self._tracker:
            self._tracker.clear()

    async def sweep_expired_tokens(self) -> int:
        """Remove expired access tokens."""
        return await self.tokens.sweep_expired()

    @property
    def db(self) -> Database:
        """Get database instance."""
        if not self._db:
            raise RuntimeError("Application not started")
        return self._db

    @property
    def event_bus(self) -> IEventBus:
        if not self._event_bus:
            raise RuntimeError("Application not started")
        return self._event_bus

    @property
    def tracker(self) -> IUpdateTracker:
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker

    @property
    def tokens(self) -> IAccessTokenService:
        if not self._tokens:
            raise RuntimeError("Application not started")
        return self._tokens

    @property
    def conversations(self) -> IConversationRegistry:
        if not self._conversations:
            raise RuntimeError("Application not started")
        return self._conversations

    @property
    def messages(self) -> IMessageLog:
        if not self._messages:
            raise RuntimeError("Application not started")
        return self._messages

    @property
    def users(self) -> IUserDirectory:
        if not self._users:
            raise RuntimeError("Application not started")
        return self._users

    @property
    def social(self) -> ISocialGraph:
        if not self._social:
            raise RuntimeError("Application not started")
        return self._social
