"""Conversations module."""

from .registry import ConversationRegistry, IConversationRegistry

__all__ = ["ConversationRegistry", "IConversationRegistry"]
