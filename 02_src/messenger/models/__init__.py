"""Core data models for the messenger."""

from .conversations import Conversation
from .events import DomainEvent, Topic
from .messages import Attachment, AttachmentType, Message, ReadReceipt
from .snapshot import Snapshot
from .users import AccessToken, User, UserProfile

__all__ = [
    # Users
    "User",
    "UserProfile",
    "AccessToken",
    # Conversations
    "Conversation",
    # Messages
    "Message",
    "Attachment",
    "AttachmentType",
    "ReadReceipt",
    # Dataset
    "Snapshot",
    # Events
    "DomainEvent",
    "Topic",
]
