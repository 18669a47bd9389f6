"""Message-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AttachmentType(str, Enum):
    """Kinds of message attachments."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    OTHER = "other"


@dataclass
class Attachment:
    """A file attached to a message."""

    id: str
    message_id: str
    type: AttachmentType
    url: str
    name: str
    size: int  # bytes


@dataclass
class ReadReceipt:
    """Marks a message as read by one user."""

    user_id: str
    at: datetime


@dataclass
class Message:
    """A single message in a conversation."""

    id: str
    sender_id: str
    conversation_id: str
    content: str
    created_at: datetime
    updated_at: datetime
    attachments: list[Attachment] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    read: list[ReadReceipt] = field(default_factory=list)

    def is_read_by(self, user_id: str) -> bool:
        """Check whether user_id has a read receipt on this message."""
        return any(receipt.user_id == user_id for receipt in self.read)
