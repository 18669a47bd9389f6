"""API route factories."""

from .auth import create_auth_router
from .conversations import create_conversations_router
from .friends import create_friends_router
from .messages import create_messages_router
from .updates import create_updates_router
from .users import create_users_router

__all__ = [
    "create_auth_router",
    "create_conversations_router",
    "create_friends_router",
    "create_messages_router",
    "create_updates_router",
    "create_users_router",
]
