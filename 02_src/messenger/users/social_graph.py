"""SocialGraph: friend requests and friendships."""

from datetime import datetime, timezone
from typing import Protocol

from ..conversations import IConversationRegistry
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..messages import IMessageLog
from ..models import Topic, User, UserProfile
from ..storage import Database

logger = get_logger(__name__)

# Seed messages of the direct conversation opened on acceptance
REQUEST_GREETING = "Will you be my friend?"
ACCEPT_GREETING = "Of course I will <3"


class ISocialGraph(Protocol):
    """Friend-request lifecycle and symmetric friendships."""

    async def send_friend_request(self, requester_id: str, recipient_id: str) -> bool:
        """Record a pending request from requester to recipient."""
        ...

    async def accept_friend_request(self, user_id: str, requester_id: str) -> bool:
        """Turn a pending request into a friendship."""
        ...

    async def decline_friend_request(self, user_id: str, requester_id: str) -> bool:
        """Drop a pending request."""
        ...

    async def remove_friend(self, user_id: str, friend_id: str) -> bool:
        """End a friendship on both sides."""
        ...

    async def get_friends(self, user_id: str) -> list[UserProfile] | None:
        """Get a user's friends."""
        ...

    async def get_friend_requests(self, user_id: str) -> list[UserProfile] | None:
        """Get users with a pending request to user_id."""
        ...


class SocialGraph:
    """Friendship state machine over the users in the snapshot.

    A pending request lives in the recipient's friend_request_user_ids.
    Accepting moves both users into each other's friend_ids and opens their
    direct conversation with two seed messages.
    """

    def __init__(
        self,
        db: Database,
        conversations: IConversationRegistry,
        messages: IMessageLog,
        event_bus: IEventBus | None = None,
    ):
        self._db = db
        self._conversations = conversations
        self._messages = messages
        self._event_bus = event_bus

    async def send_friend_request(self, requester_id: str, recipient_id: str) -> bool:
        """Record a pending request from requester to recipient.

        Returns False for self-requests, unknown users, existing friends and
        requests that are already pending.
        """
        if requester_id == recipient_id:
            return False

        async with self._db.transaction():
            requester = self._find(requester_id)
            recipient = self._find(recipient_id)
            if not requester or not recipient:
                return False

            if requester_id in recipient.friend_ids:
                return False

            if requester_id in recipient.friend_request_user_ids:
                return False

            recipient.friend_request_user_ids.append(requester_id)
            self._db.mark_dirty()

        logger.info(
            "Friend request sent",
            extra={"context": {"requester_id": requester_id, "recipient_id": recipient_id}},
        )
        await self._publish(
            Topic.FRIEND_REQUEST_SENT,
            {"requester_id": requester_id, "recipient_id": recipient_id},
        )
        return True

    async def accept_friend_request(self, user_id: str, requester_id: str) -> bool:
        """Turn a pending request into a friendship.

        The friendship, the direct conversation and both seed messages are
        committed together.
        """
        async with self._db.transaction():
            user = self._find(user_id)
            requester = self._find(requester_id)
            if not user or not requester:
                return False

            if requester_id not in user.friend_request_user_ids:
                return False

            user.friend_request_user_ids.remove(requester_id)
            if requester_id not in user.friend_ids:
                user.friend_ids.append(requester_id)
            if user_id not in requester.friend_ids:
                requester.friend_ids.append(user_id)

            now = datetime.now(timezone.utc)
            user.updated_at = now
            requester.updated_at = now
            self._db.mark_dirty()

            conversation = await self._conversations.create_direct([requester_id, user_id])
            await self._messages.create(
                sender_id=requester_id,
                conversation_id=conversation.id,
                content=REQUEST_GREETING,
                metadata={},
            )
            await self._messages.create(
                sender_id=user_id,
                conversation_id=conversation.id,
                content=ACCEPT_GREETING,
                metadata={},
            )

        logger.info(
            "Friend request accepted",
            extra={
                "context": {
                    "user_id": user_id,
                    "requester_id": requester_id,
                    "conversation_id": conversation.id,
                }
            },
        )
        await self._publish(
            Topic.FRIEND_REQUEST_ACCEPTED,
            {
                "user_id": user_id,
                "requester_id": requester_id,
                "conversation_id": conversation.id,
            },
        )
        return True

    async def decline_friend_request(self, user_id: str, requester_id: str) -> bool:
        """Drop a pending request. The requester may ask again right away."""
        async with self._db.transaction():
            user = self._find(user_id)
            if not user or requester_id not in user.friend_request_user_ids:
                return False

            user.friend_request_user_ids.remove(requester_id)
            user.updated_at = datetime.now(timezone.utc)
            self._db.mark_dirty()

        logger.info(
            "Friend request declined",
            extra={"context": {"user_id": user_id, "requester_id": requester_id}},
        )
        return True

    async def remove_friend(self, user_id: str, friend_id: str) -> bool:
        """End a friendship on both sides.

        Only user_id -> friend_id has to exist; the reverse edge is removed
        when present.
        """
        async with self._db.transaction():
            user = self._find(user_id)
            friend = self._find(friend_id)
            if not user or not friend:
                return False

            if friend_id not in user.friend_ids:
                return False

            user.friend_ids.remove(friend_id)
            if user_id in friend.friend_ids:
                friend.friend_ids.remove(user_id)

            now = datetime.now(timezone.utc)
            user.updated_at = now
            friend.updated_at = now
            self._db.mark_dirty()

        logger.info(
            "Friend removed",
            extra={"context": {"user_id": user_id, "friend_id": friend_id}},
        )
        return True

    async def get_friends(self, user_id: str) -> list[UserProfile] | None:
        """Get a user's friends, or None for an unknown user."""
        user = self._find(user_id)
        if not user:
            return None
        return [
            u.to_profile() for u in self._db.snapshot.users if u.id in user.friend_ids
        ]

    async def get_friend_requests(self, user_id: str) -> list[UserProfile] | None:
        """Get users with a pending request to user_id, or None if unknown."""
        user = self._find(user_id)
        if not user:
            return None
        return [
            u.to_profile()
            for u in self._db.snapshot.users
            if u.id in user.friend_request_user_ids
        ]

    def _find(self, user_id: str) -> User | None:
        for user in self._db.snapshot.users:
            if user.id == user_id:
                return user
        return None

    async def _publish(self, topic: Topic, payload: dict) -> None:
        if self._event_bus:
            await self._event_bus.publish(topic, payload, source="social_graph")
