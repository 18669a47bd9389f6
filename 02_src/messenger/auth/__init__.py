"""Authentication module."""

from .passwords import PasswordHasher
from .tokens import AccessTokenService, IAccessTokenService

__all__ = ["AccessTokenService", "IAccessTokenService", "PasswordHasher"]
