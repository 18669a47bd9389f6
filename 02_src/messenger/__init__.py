"""Messenger core module."""

from .app import Application, IApplication
from .auth import AccessTokenService, IAccessTokenService, PasswordHasher
from .conversations import ConversationRegistry, IConversationRegistry
from .errors import (
    ConflictError,
    DuplicateEmailError,
    InvariantViolationError,
    MessengerError,
    StorageError,
)
from .event_bus import EventBus, IEventBus
from .messages import IMessageLog, MessageLog
from .models import (
    AccessToken,
    Attachment,
    AttachmentType,
    Conversation,
    DomainEvent,
    Message,
    ReadReceipt,
    Snapshot,
    Topic,
    User,
    UserProfile,
)
from .storage import Database, ISnapshotStore, JsonFileStore
from .tracker import IUpdateTracker, UpdateTracker
from .users import ISocialGraph, IUserDirectory, SocialGraph, UserDirectory

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "User",
    "UserProfile",
    "AccessToken",
    "Conversation",
    "Message",
    "Attachment",
    "AttachmentType",
    "ReadReceipt",
    "Snapshot",
    "DomainEvent",
    "Topic",
    # Errors
    "MessengerError",
    "ConflictError",
    "DuplicateEmailError",
    "InvariantViolationError",
    "StorageError",
    # Components
    "ISnapshotStore",
    "JsonFileStore",
    "Database",
    "IEventBus",
    "EventBus",
    "IUpdateTracker",
    "UpdateTracker",
    "PasswordHasher",
    "IAccessTokenService",
    "AccessTokenService",
    "IConversationRegistry",
    "ConversationRegistry",
    "IMessageLog",
    "MessageLog",
    "IUserDirectory",
    "UserDirectory",
    "ISocialGraph",
    "SocialGraph",
]
