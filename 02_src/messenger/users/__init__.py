"""Users module."""

from .directory import IUserDirectory, UserDirectory
from .social_graph import ISocialGraph, SocialGraph

__all__ = ["IUserDirectory", "UserDirectory", "ISocialGraph", "SocialGraph"]
