"""UserDirectory implementation."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Protocol

from ..auth import IAccessTokenService, PasswordHasher
from ..errors import DuplicateEmailError, InvariantViolationError
from ..ids import generate_id
from ..logging_config import get_logger
from ..models import AccessToken, User, UserProfile
from ..storage import Database

logger = get_logger(__name__)

# Profile fields a user may change through update()
PROFILE_FIELDS = frozenset({"display_name", "avatar_url"})


class IUserDirectory(Protocol):
    """User accounts, credentials and profile lookups."""

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        display_name: str,
        avatar_url: str | None = None,
    ) -> tuple[UserProfile, AccessToken]:
        """Create an account and sign it in."""
        ...

    async def authenticate(
        self, email: str, password: str
    ) -> tuple[UserProfile, AccessToken] | None:
        """Check credentials and issue a new token."""
        ...

    async def verify_password(self, user_id: str, password: str) -> bool:
        """Check a password without signing in."""
        ...

    async def get_user_by_token(self, token: str) -> UserProfile | None:
        """Resolve a bearer token to the user it belongs to."""
        ...

    async def logout(self, token: str) -> bool:
        """Invalidate one token."""
        ...

    async def logout_all_sessions(self, user_id: str) -> int:
        """Invalidate every token of a user."""
        ...

    async def find_by_id(self, user_id: str) -> UserProfile | None:
        """Get a user profile by ID."""
        ...

    async def find_by_ids(self, user_ids: list[str]) -> list[UserProfile]:
        """Get the profiles of the given ids that exist."""
        ...

    async def find_by_email(self, email: str) -> User | None:
        """Get the full user record (including password hash) by email."""
        ...

    async def find_all(self) -> list[UserProfile]:
        """Get every user profile."""
        ...

    async def search_by_display_name(self, term: str) -> list[UserProfile]:
        """Case-insensitive substring match on display names."""
        ...

    async def update(self, user_id: str, **changes: Any) -> UserProfile | None:
        """Change display name and/or avatar."""
        ...

    async def update_password(self, user_id: str, new_password: str) -> bool:
        """Replace the password hash."""
        ...

    async def delete(self, user_id: str) -> bool:
        """Remove the user record."""
        ...


class UserDirectory:
    """Users stored in the snapshot; tokens via IAccessTokenService."""

    def __init__(
        self,
        db: Database,
        tokens: IAccessTokenService,
        hasher: PasswordHasher | None = None,
    ):
        self._db = db
        self._tokens = tokens
        self._hasher = hasher or PasswordHasher()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        display_name: str,
        avatar_url: str | None = None,
    ) -> tuple[UserProfile, AccessToken]:
        """Create an account and sign it in.

        Email comparison is exact (case-sensitive).

        Raises:
            DuplicateEmailError: the email is already registered.
        """
        if self._find_record_by_email(email):
            logger.warning("Registration rejected: email already exists")
            raise DuplicateEmailError()

        hashed = await self._hasher.hash(password)

        async with self._db.transaction() as snapshot:
            # Re-check under the lock: another request may have registered meanwhile
            if self._find_record_by_email(email):
                logger.warning("Registration rejected: email already exists")
                raise DuplicateEmailError()

            now = datetime.now(timezone.utc)
            user = User(
                id=generate_id(),
                username=username,
                email=email,
                password=hashed,
                display_name=display_name,
                avatar_url=avatar_url,
                created_at=now,
                updated_at=now,
                friend_ids=[],
                friend_request_user_ids=[],
            )
            snapshot.users.append(user)
            self._db.mark_dirty()

            access_token = await self._tokens.issue(user.id)

        logger.info("User registered", extra={"context": {"user_id": user.id}})
        return user.to_profile(), access_token

    async def authenticate(
        self, email: str, password: str
    ) -> tuple[UserProfile, AccessToken] | None:
        """Check credentials and issue a new token.

        Tokens issued earlier stay valid. Returns None on unknown email or
        wrong password.
        """
        user = self._find_record_by_email(email)
        if not user:
            logger.warning("Authentication failed: unknown email")
            return None

        if not await self._hasher.verify(password, user.password):
            logger.warning(
                "Authentication failed: wrong password",
                extra={"context": {"user_id": user.id}},
            )
            return None

        async with self._db.transaction():
            user = self._find_record(user.id)
            if not user:
                return None
            user.last_active = datetime.now(timezone.utc)
            self._db.mark_dirty()
            access_token = await self._tokens.issue(user.id)

        logger.info("User logged in", extra={"context": {"user_id": user.id}})
        return user.to_profile(), access_token

    async def verify_password(self, user_id: str, password: str) -> bool:
        """Check a password without signing in."""
        user = self._find_record(user_id)
        if not user:
            return False
        return await self._hasher.verify(password, user.password)

    async def get_user_by_token(self, token: str) -> UserProfile | None:
        """Resolve a bearer token to the user it belongs to."""
        user_id = await self._tokens.verify(token)
        if not user_id:
            return None
        return await self.find_by_id(user_id)

    async def logout(self, token: str) -> bool:
        """Invalidate one token."""
        return await self._tokens.revoke(token)

    async def logout_all_sessions(self, user_id: str) -> int:
        """Invalidate every token of a user."""
        count = await self._tokens.revoke_all_for_user(user_id)
        logger.info(
            "Logged out all sessions",
            extra={"context": {"user_id": user_id, "tokens": count}},
        )
        return count

    async def find_by_id(self, user_id: str) -> UserProfile | None:
        """Get a user profile by ID."""
        user = self._find_record(user_id)
        return user.to_profile() if user else None

    async def find_by_email(self, email: str) -> User | None:
        """Get a copy of the full user record (including password hash) by email."""
        user = self._find_record_by_email(email)
        if not user:
            return None
        return replace(
            user,
            friend_ids=list(user.friend_ids),
            friend_request_user_ids=list(user.friend_request_user_ids),
        )

    async def find_all(self) -> list[UserProfile]:
        """Get every user profile."""
        return [u.to_profile() for u in self._db.snapshot.users]

    async def find_by_ids(self, user_ids: list[str]) -> list[UserProfile]:
        """Get the profiles of the given ids that exist, in stored order."""
        wanted = set(user_ids)
        return [u.to_profile() for u in self._db.snapshot.users if u.id in wanted]

    async def search_by_display_name(self, term: str) -> list[UserProfile]:
        """Case-insensitive substring match on display names."""
        needle = term.lower()
        return [
            u.to_profile()
            for u in self._db.snapshot.users
            if needle in u.display_name.lower()
        ]

    async def update(self, user_id: str, **changes: Any) -> UserProfile | None:
        """Change display name and/or avatar.

        Raises:
            ValueError: a field other than display_name/avatar_url was given.
            InvariantViolationError: display_name is missing or blank.
        """
        invalid = set(changes) - PROFILE_FIELDS
        if invalid:
            raise ValueError(f"Cannot update user fields: {sorted(invalid)}")

        if "display_name" in changes and not (
            isinstance(changes["display_name"], str) and changes["display_name"].strip()
        ):
            raise InvariantViolationError("Display name cannot be empty")

        async with self._db.transaction():
            user = self._find_record(user_id)
            if not user:
                return None

            for key, value in changes.items():
                setattr(user, key, value)
            user.updated_at = datetime.now(timezone.utc)
            self._db.mark_dirty()

        return user.to_profile()

    async def update_password(self, user_id: str, new_password: str) -> bool:
        """Replace the password hash."""
        if not self._find_record(user_id):
            return False

        hashed = await self._hasher.hash(new_password)

        async with self._db.transaction():
            user = self._find_record(user_id)
            if not user:
                return False
            user.password = hashed
            user.updated_at = datetime.now(timezone.utc)
            self._db.mark_dirty()

        logger.info("Password changed", extra={"context": {"user_id": user_id}})
        return True

    async def delete(self, user_id: str) -> bool:
        """Remove the user record.

        Conversations, messages and tokens of the user are left in place.
        """
        async with self._db.transaction() as snapshot:
            remaining = [u for u in snapshot.users if u.id != user_id]
            if len(remaining) == len(snapshot.users):
                return False
            snapshot.users = remaining
            self._db.mark_dirty()

        logger.info("User deleted", extra={"context": {"user_id": user_id}})
        return True

    def _find_record(self, user_id: str) -> User | None:
        for user in self._db.snapshot.users:
            if user.id == user_id:
                return user
        return None

    def _find_record_by_email(self, email: str) -> User | None:
        for user in self._db.snapshot.users:
            if user.email == email:
                return user
        return None
