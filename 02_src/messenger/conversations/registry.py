"""ConversationRegistry implementation."""

from datetime import datetime, timezone
from typing import Protocol

from ..errors import InvariantViolationError
from ..ids import generate_id
from ..logging_config import get_logger
from ..models import Conversation
from ..storage import Database

logger = get_logger(__name__)


class IConversationRegistry(Protocol):
    """Direct and group conversations and their membership."""

    async def create(
        self, participant_ids: list[str], is_group: bool, name: str | None = None
    ) -> Conversation:
        """Store a new conversation as given."""
        ...

    async def create_direct(self, user_ids: list[str]) -> Conversation:
        """Return the direct conversation of two users, creating it if needed."""
        ...

    async def create_group(self, user_ids: list[str], name: str) -> Conversation:
        """Create a new named group conversation."""
        ...

    async def find_by_id(self, conversation_id: str) -> Conversation | None:
        """Get a conversation by ID."""
        ...

    async def find_by_user_id(self, user_id: str) -> list[Conversation]:
        """Get all conversations a user participates in."""
        ...

    async def find_direct_between(
        self, user_id_a: str, user_id_b: str
    ) -> Conversation | None:
        """Get the direct conversation of two users."""
        ...

    async def update(self, conversation_id: str, *, name: str | None) -> Conversation | None:
        """Rename a conversation."""
        ...

    async def add_participants(
        self, conversation_id: str, user_ids: list[str]
    ) -> Conversation | None:
        """Add users to a group conversation."""
        ...

    async def remove_participant(
        self, conversation_id: str, user_id: str
    ) -> Conversation | None:
        """Remove a user from a group conversation."""
        ...

    async def delete(self, conversation_id: str) -> bool:
        """Delete a conversation and all of its messages."""
        ...

    async def is_participant(self, conversation_id: str, user_id: str) -> bool:
        """Check conversation membership."""
        ...

    async def get_recent_for_user(
        self, user_id: str, limit: int = 20
    ) -> list[Conversation]:
        """Get a user's conversations, most recently active first."""
        ...


class ConversationRegistry:
    """Conversations stored in the snapshot, queried by linear scan."""

    def __init__(self, db: Database):
        self._db = db

    async def create(
        self, participant_ids: list[str], is_group: bool, name: str | None = None
    ) -> Conversation:
        """Store a new conversation as given."""
        now = datetime.now(timezone.utc)
        conversation = Conversation(
            id=generate_id(),
            participant_ids=list(participant_ids),
            is_group=is_group,
            name=name,
            created_at=now,
            updated_at=now,
        )

        async with self._db.transaction() as snapshot:
            snapshot.conversations.append(conversation)
            self._db.mark_dirty()

        logger.info(
            "Conversation created",
            extra={
                "context": {
                    "conversation_id": conversation.id,
                    "is_group": is_group,
                    "participants": len(conversation.participant_ids),
                }
            },
        )
        return conversation

    async def create_direct(self, user_ids: list[str]) -> Conversation:
        """Return the direct conversation of two users, creating it if needed.

        Raises:
            InvariantViolationError: user_ids does not hold exactly two
                distinct ids.
        """
        if len(user_ids) != 2 or user_ids[0] == user_ids[1]:
            raise InvariantViolationError(
                "Direct conversations require exactly two distinct users"
            )

        async with self._db.transaction():
            existing = await self.find_direct_between(user_ids[0], user_ids[1])
            if existing:
                return existing
            return await self.create(list(user_ids), is_group=False)

    async def create_group(self, user_ids: list[str], name: str) -> Conversation:
        """Create a new named group conversation.

        Raises:
            InvariantViolationError: fewer than two user ids given.
        """
        # Participants form a set
        participant_ids = list(dict.fromkeys(user_ids))
        if len(participant_ids) < 2:
            raise InvariantViolationError(
                "Group conversations require at least two users"
            )

        return await self.create(participant_ids, is_group=True, name=name)

    async def find_by_id(self, conversation_id: str) -> Conversation | None:
        """Get a conversation by ID."""
        for conversation in self._db.snapshot.conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    async def find_by_user_id(self, user_id: str) -> list[Conversation]:
        """Get all conversations a user participates in."""
        return [
            c for c in self._db.snapshot.conversations if user_id in c.participant_ids
        ]

    async def find_direct_between(
        self, user_id_a: str, user_id_b: str
    ) -> Conversation | None:
        """Get the direct conversation of two users (order-independent)."""
        if user_id_a == user_id_b:
            return None
        for c in self._db.snapshot.conversations:
            if (
                not c.is_group
                and len(c.participant_ids) == 2
                and user_id_a in c.participant_ids
                and user_id_b in c.participant_ids
            ):
                return c
        return None

    async def update(self, conversation_id: str, *, name: str | None) -> Conversation | None:
        """Rename a conversation.

        Direct conversations are not rejected here; callers enforce that.
        """
        async with self._db.transaction():
            conversation = await self.find_by_id(conversation_id)
            if not conversation:
                return None

            conversation.name = name
            conversation.updated_at = datetime.now(timezone.utc)
            self._db.mark_dirty()

        return conversation

    async def add_participants(
        self, conversation_id: str, user_ids: list[str]
    ) -> Conversation | None:
        """Add users to a group conversation, skipping existing members.

        Raises:
            InvariantViolationError: the conversation is direct.
        """
        async with self._db.transaction():
            conversation = await self.find_by_id(conversation_id)
            if not conversation:
                return None

            if not conversation.is_group:
                raise InvariantViolationError(
                    "Cannot add participants to a direct conversation"
                )

            new_ids = [
                user_id
                for user_id in dict.fromkeys(user_ids)
                if user_id not in conversation.participant_ids
            ]
            if new_ids:
                conversation.participant_ids.extend(new_ids)
                conversation.updated_at = datetime.now(timezone.utc)
                self._db.mark_dirty()

        return conversation

    async def remove_participant(
        self, conversation_id: str, user_id: str
    ) -> Conversation | None:
        """Remove a user from a group conversation (no-op for non-members).

        Raises:
            InvariantViolationError: the conversation is direct.
        """
        async with self._db.transaction():
            conversation = await self.find_by_id(conversation_id)
            if not conversation:
                return None

            if not conversation.is_group:
                raise InvariantViolationError(
                    "Cannot remove participants from a direct conversation"
                )

            if user_id not in conversation.participant_ids:
                return conversation

            conversation.participant_ids = [
                pid for pid in conversation.participant_ids if pid != user_id
            ]
            conversation.updated_at = datetime.now(timezone.utc)
            self._db.mark_dirty()

        return conversation

    async def delete(self, conversation_id: str) -> bool:
        """Delete a conversation and all of its messages."""
        async with self._db.transaction() as snapshot:
            remaining = [c for c in snapshot.conversations if c.id != conversation_id]
            if len(remaining) == len(snapshot.conversations):
                return False

            snapshot.conversations = remaining
            snapshot.messages = [
                m for m in snapshot.messages if m.conversation_id != conversation_id
            ]
            self._db.mark_dirty()

        logger.info(f"Conversation {conversation_id} deleted with its messages")
        return True

    async def is_participant(self, conversation_id: str, user_id: str) -> bool:
        """Check conversation membership."""
        conversation = await self.find_by_id(conversation_id)
        return conversation is not None and user_id in conversation.participant_ids

    async def get_recent_for_user(
        self, user_id: str, limit: int = 20
    ) -> list[Conversation]:
        """Get a user's conversations, most recently active first.

        Ties keep insertion order.
        """
        conversations = await self.find_by_user_id(user_id)
        conversations.sort(key=lambda c: c.activity_at, reverse=True)
        return conversations[:limit]
