"""Access token issuing, verification and revocation."""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Protocol

from ..config import DEFAULT_TOKEN_TTL_DAYS
from ..logging_config import get_logger
from ..models import AccessToken
from ..storage import Database

logger = get_logger(__name__)


class IAccessTokenService(Protocol):
    """Bearer credentials mapped to user ids with an expiry."""

    async def issue(self, user_id: str, ttl_days: int | None = None) -> AccessToken:
        """Mint and store a new token for user_id."""
        ...

    async def verify(self, token: str) -> str | None:
        """Return the owning user id, or None if unknown or expired."""
        ...

    async def revoke(self, token: str) -> bool:
        """Delete one token. Return whether it existed."""
        ...

    async def revoke_all_for_user(self, user_id: str) -> int:
        """Delete every token of a user. Return how many were removed."""
        ...

    async def sweep_expired(self) -> int:
        """Delete all expired tokens. Return how many were removed."""
        ...


class AccessTokenService:
    """Access tokens stored in the snapshot; expiry is checked lazily."""

    def __init__(self, db: Database, ttl_days: int = DEFAULT_TOKEN_TTL_DAYS):
        self._db = db
        self._ttl_days = ttl_days

    async def issue(self, user_id: str, ttl_days: int | None = None) -> AccessToken:
        """Mint and store a new token for user_id.

        Earlier tokens of the same user stay valid.
        """
        now = datetime.now(timezone.utc)
        days = self._ttl_days if ttl_days is None else ttl_days
        access_token = AccessToken(
            user_id=user_id,
            token=secrets.token_hex(32),  # 256 bits
            created_at=now,
            expires_at=now + timedelta(days=days),
        )

        async with self._db.transaction() as snapshot:
            snapshot.access_tokens.append(access_token)
            self._db.mark_dirty()

        return access_token

    async def verify(self, token: str) -> str | None:
        """Return the owning user id, or None if unknown or expired.

        An expired token is deleted on sight.
        """
        access_token = self._find(token)
        if access_token is None:
            return None

        if datetime.now(timezone.utc) > access_token.expires_at:
            logger.info("Access token expired", extra={"context": {"user_id": access_token.user_id}})
            await self.revoke(token)
            return None

        return access_token.user_id

    async def revoke(self, token: str) -> bool:
        """Delete one token. Return whether it existed."""
        async with self._db.transaction() as snapshot:
            remaining = [t for t in snapshot.access_tokens if t.token != token]
            if len(remaining) == len(snapshot.access_tokens):
                return False
            snapshot.access_tokens = remaining
            self._db.mark_dirty()
        return True

    async def revoke_all_for_user(self, user_id: str) -> int:
        """Delete every token of a user. Return how many were removed."""
        async with self._db.transaction() as snapshot:
            remaining = [t for t in snapshot.access_tokens if t.user_id != user_id]
            removed = len(snapshot.access_tokens) - len(remaining)
            if removed:
                snapshot.access_tokens = remaining
                self._db.mark_dirty()
        return removed

    async def sweep_expired(self) -> int:
        """Delete all expired tokens. Return how many were removed."""
        now = datetime.now(timezone.utc)
        async with self._db.transaction() as snapshot:
            remaining = [t for t in snapshot.access_tokens if not t.expires_at < now]
            removed = len(snapshot.access_tokens) - len(remaining)
            if removed:
                snapshot.access_tokens = remaining
                self._db.mark_dirty()

        if removed:
            logger.info(f"Removed {removed} expired access tokens")
        return removed

    def _find(self, token: str) -> AccessToken | None:
        for access_token in self._db.snapshot.access_tokens:
            if access_token.token == token:
                return access_token
        return None
