"""Shared FastAPI dependencies."""

from dataclasses import dataclass

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..app import Application
from ..models import UserProfile

_bearer = HTTPBearer(auto_error=False)


@dataclass
class Session:
    """The authenticated caller of a request."""

    user: UserProfile
    token: str


def create_authenticator(app: Application):
    """Build the dependency that resolves the bearer token to a Session."""

    async def authenticate(
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    ) -> Session:
        if credentials is None:
            raise HTTPException(status_code=401, detail="Authentication required")

        user = await app.users.get_user_by_token(credentials.credentials)
        if not user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        return Session(user=user, token=credentials.credentials)

    return authenticate


def create_optional_authenticator(app: Application):
    """Like create_authenticator, but yields None instead of rejecting."""

    async def authenticate(
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    ) -> Session | None:
        if credentials is None:
            return None
        user = await app.users.get_user_by_token(credentials.credentials)
        if not user:
            return None
        return Session(user=user, token=credentials.credentials)

    return authenticate
