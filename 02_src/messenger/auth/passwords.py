"""Password hashing with bcrypt."""

import asyncio

import bcrypt

from ..config import DEFAULT_BCRYPT_ROUNDS


class PasswordHasher:
    """Salted one-way hashing; work runs off the event loop."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self._rounds = rounds

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, hashed: str) -> bool:
        return await asyncio.to_thread(self._verify, password, hashed)

    def _hash(self, password: str) -> str:
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode("utf-8")

    @staticmethod
    def _verify(password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
