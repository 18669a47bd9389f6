"""Conversion between model dataclasses and JSON records.

Records use the camelCase keys of the persisted document, so a snapshot file
written by earlier deployments loads unchanged.
"""

from datetime import datetime, timezone
from typing import Any

from ..models import (
    AccessToken,
    Attachment,
    AttachmentType,
    Conversation,
    Message,
    ReadReceipt,
    Snapshot,
    User,
    UserProfile,
)


def _dump_ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _load_ts(value: str | None) -> datetime | None:
    if not value:
        return None
    ts = datetime.fromisoformat(value)
    # Fix timezone for naive timestamps
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


# Users


def profile_to_record(user: User | UserProfile) -> dict[str, Any]:
    """Public user record (never includes the password hash)."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "displayName": user.display_name,
        "avatarUrl": user.avatar_url,
        "createdAt": _dump_ts(user.created_at),
        "updatedAt": _dump_ts(user.updated_at),
        "lastActive": _dump_ts(user.last_active),
        "friendIds": list(user.friend_ids),
        "friendRequestUserIds": list(user.friend_request_user_ids),
    }


def user_to_record(user: User) -> dict[str, Any]:
    record = profile_to_record(user)
    record["password"] = user.password
    return record


def user_from_record(record: dict[str, Any]) -> User:
    return User(
        id=record["id"],
        username=record["username"],
        email=record["email"],
        password=record["password"],
        display_name=record["displayName"],
        created_at=_load_ts(record["createdAt"]),
        updated_at=_load_ts(record["updatedAt"]),
        avatar_url=record.get("avatarUrl"),
        last_active=_load_ts(record.get("lastActive")),
        friend_ids=list(record.get("friendIds", [])),
        friend_request_user_ids=list(record.get("friendRequestUserIds", [])),
    )


# Access tokens


def token_to_record(token: AccessToken) -> dict[str, Any]:
    return {
        "userId": token.user_id,
        "token": token.token,
        "createdAt": _dump_ts(token.created_at),
        "expiresAt": _dump_ts(token.expires_at),
    }


def token_from_record(record: dict[str, Any]) -> AccessToken:
    return AccessToken(
        user_id=record["userId"],
        token=record["token"],
        created_at=_load_ts(record["createdAt"]),
        expires_at=_load_ts(record["expiresAt"]),
    )


# Conversations


def conversation_to_record(conversation: Conversation) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": conversation.id,
        "participantIds": list(conversation.participant_ids),
        "isGroup": conversation.is_group,
        "createdAt": _dump_ts(conversation.created_at),
        "updatedAt": _dump_ts(conversation.updated_at),
        "lastMessageAt": _dump_ts(conversation.last_message_at),
    }
    if conversation.name is not None:
        record["name"] = conversation.name
    return record


def conversation_from_record(record: dict[str, Any]) -> Conversation:
    return Conversation(
        id=record["id"],
        participant_ids=list(record["participantIds"]),
        is_group=bool(record["isGroup"]),
        created_at=_load_ts(record["createdAt"]),
        updated_at=_load_ts(record["updatedAt"]),
        name=record.get("name"),
        last_message_at=_load_ts(record.get("lastMessageAt")),
    )


# Messages


def attachment_to_record(attachment: Attachment) -> dict[str, Any]:
    return {
        "id": attachment.id,
        "messageId": attachment.message_id,
        "type": attachment.type.value,
        "url": attachment.url,
        "name": attachment.name,
        "size": attachment.size,
    }


def attachment_from_record(record: dict[str, Any]) -> Attachment:
    return Attachment(
        id=record["id"],
        message_id=record["messageId"],
        type=AttachmentType(record["type"]),
        url=record["url"],
        name=record["name"],
        size=int(record["size"]),
    )


def message_to_record(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "senderId": message.sender_id,
        "conversationId": message.conversation_id,
        "content": message.content,
        "attachments": [attachment_to_record(a) for a in message.attachments],
        "metadata": message.metadata,
        "read": [
            {"userId": receipt.user_id, "at": _dump_ts(receipt.at)}
            for receipt in message.read
        ],
        "createdAt": _dump_ts(message.created_at),
        "updatedAt": _dump_ts(message.updated_at),
    }


def message_from_record(record: dict[str, Any]) -> Message:
    return Message(
        id=record["id"],
        sender_id=record["senderId"],
        conversation_id=record["conversationId"],
        content=record["content"],
        created_at=_load_ts(record["createdAt"]),
        updated_at=_load_ts(record["updatedAt"]),
        attachments=[
            attachment_from_record(a) for a in record.get("attachments") or []
        ],
        metadata=record.get("metadata") or {},
        read=[
            ReadReceipt(user_id=r["userId"], at=_load_ts(r["at"]))
            for r in record.get("read", [])
        ],
    )


# Snapshot


def snapshot_to_document(snapshot: Snapshot) -> dict[str, Any]:
    """Serialize the whole dataset into the persisted document shape."""
    return {
        "users": [user_to_record(u) for u in snapshot.users],
        "messages": [message_to_record(m) for m in snapshot.messages],
        "conversations": [
            conversation_to_record(c) for c in snapshot.conversations
        ],
        "accessToken": [token_to_record(t) for t in snapshot.access_tokens],
    }


def snapshot_from_document(document: dict[str, Any]) -> Snapshot:
    """Build a Snapshot; missing top-level arrays default to empty."""
    return Snapshot(
        users=[user_from_record(r) for r in document.get("users", [])],
        messages=[message_from_record(r) for r in document.get("messages", [])],
        conversations=[
            conversation_from_record(r) for r in document.get("conversations", [])
        ],
        access_tokens=[
            token_from_record(r) for r in document.get("accessToken", [])
        ],
    )
