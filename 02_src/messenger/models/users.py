"""User-related data models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class UserProfile:
    """A user as exposed to callers (no password hash)."""

    id: str
    username: str
    email: str
    display_name: str
    created_at: datetime
    updated_at: datetime
    avatar_url: str | None = None
    last_active: datetime | None = None
    friend_ids: list[str] = field(default_factory=list)
    friend_request_user_ids: list[str] = field(default_factory=list)  # pending, incoming


@dataclass
class User:
    """A stored user record."""

    id: str
    username: str
    email: str
    password: str  # bcrypt hash
    display_name: str
    created_at: datetime
    updated_at: datetime
    avatar_url: str | None = None
    last_active: datetime | None = None
    friend_ids: list[str] = field(default_factory=list)
    friend_request_user_ids: list[str] = field(default_factory=list)

    def to_profile(self) -> UserProfile:
        """Copy of this user without the password hash."""
        return UserProfile(
            id=self.id,
            username=self.username,
            email=self.email,
            display_name=self.display_name,
            created_at=self.created_at,
            updated_at=self.updated_at,
            avatar_url=self.avatar_url,
            last_active=self.last_active,
            friend_ids=list(self.friend_ids),
            friend_request_user_ids=list(self.friend_request_user_ids),
        )


@dataclass
class AccessToken:
    """Bearer credential bound to a user until expires_at."""

    user_id: str
    token: str
    created_at: datetime
    expires_at: datetime
