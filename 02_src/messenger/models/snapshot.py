"""The complete persisted dataset."""

from dataclasses import dataclass, field

from .conversations import Conversation
from .messages import Message
from .users import AccessToken, User


@dataclass
class Snapshot:
    """Everything the service stores, mirrored to one JSON file."""

    users: list[User] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    conversations: list[Conversation] = field(default_factory=list)
    access_tokens: list[AccessToken] = field(default_factory=list)
