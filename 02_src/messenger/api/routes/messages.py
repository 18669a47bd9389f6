"""Message API routes."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ...app import Application
from ...storage.serialization import message_to_record
from ..dependencies import Session, create_authenticator


class SendMessageRequest(BaseModel):
    """Request model for sending a message."""

    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


def create_messages_router(app: Application) -> APIRouter:
    """Create messages router."""
    router = APIRouter(prefix="/messages", tags=["messages"])
    authenticate = create_authenticator(app)

    async def require_member(conversation_id: str, user_id: str) -> None:
        if not await app.conversations.is_participant(conversation_id, user_id):
            raise HTTPException(
                status_code=403, detail="You don't have access to this conversation"
            )

    @router.get("/unread")
    async def get_unread_counts(session: Session = Depends(authenticate)) -> dict:
        """Unread counts for the caller's conversations that have any."""
        conversations = await app.conversations.find_by_user_id(session.user.id)
        return await app.messages.get_unread_counts(
            [c.id for c in conversations], session.user.id
        )

    @router.get("/search")
    async def search_messages(
        term: str = Query(""),
        conversation_id: str | None = Query(default=None, alias="conversationId"),
        session: Session = Depends(authenticate),
    ) -> list[dict]:
        """Search messages in the caller's conversations."""
        if len(term) < 2:
            raise HTTPException(
                status_code=400, detail="Search term must be at least 2 characters"
            )

        if conversation_id:
            await require_member(conversation_id, session.user.id)
            messages = await app.messages.search_by_content(term, conversation_id)
        else:
            own = {
                c.id for c in await app.conversations.find_by_user_id(session.user.id)
            }
            messages = [
                m
                for m in await app.messages.search_by_content(term)
                if m.conversation_id in own
            ]
        return [message_to_record(m) for m in messages]

    @router.get("/conversations/{conversation_id}/messages")
    async def get_messages(
        conversation_id: str,
        limit: int = Query(default=50, ge=1),
        before: datetime | None = Query(default=None),
        session: Session = Depends(authenticate),
    ) -> list[dict]:
        """Page through a conversation, newest first."""
        if before and before.tzinfo is None:
            before = before.replace(tzinfo=timezone.utc)

        await require_member(conversation_id, session.user.id)
        messages = await app.messages.find_by_conversation_id(
            conversation_id, limit=limit, before=before
        )
        return [message_to_record(m) for m in messages]

    @router.post("/conversations/{conversation_id}/messages", status_code=201)
    async def send_message(
        conversation_id: str,
        request: SendMessageRequest,
        session: Session = Depends(authenticate),
    ) -> dict:
        """Post a message to a conversation."""
        if not request.content:
            raise HTTPException(status_code=400, detail="Message content is required")

        conversation = await app.conversations.find_by_id(conversation_id)
        if not conversation:
            raise HTTPException(status_code=404, detail="Conversation not found")
        await require_member(conversation_id, session.user.id)

        message = await app.messages.create(
            sender_id=session.user.id,
            conversation_id=conversation_id,
            content=request.content,
            metadata=request.metadata,
        )
        return message_to_record(message)

    @router.put("/conversations/{conversation_id}/read")
    async def mark_conversation_read(
        conversation_id: str, session: Session = Depends(authenticate)
    ) -> dict:
        """Mark every message of a conversation read by the caller."""
        await require_member(conversation_id, session.user.id)
        marked = await app.messages.mark_all_as_read(conversation_id, session.user.id)
        return {"message": f"{marked} messages marked as read", "markedCount": marked}

    @router.put("/{message_id}/read")
    async def mark_message_read(
        message_id: str, session: Session = Depends(authenticate)
    ) -> dict:
        """Mark one message read by the caller."""
        message = await app.messages.find_by_id(message_id)
        if not message:
            raise HTTPException(status_code=404, detail="Message not found")
        if not await app.conversations.is_participant(
            message.conversation_id, session.user.id
        ):
            raise HTTPException(
                status_code=403, detail="You don't have access to this message"
            )

        await app.messages.mark_as_read(message_id, session.user.id)
        return {"message": "Message marked as read"}

    @router.delete("/{message_id}")
    async def delete_message(
        message_id: str, session: Session = Depends(authenticate)
    ) -> dict:
        """Delete a message; only its sender may do so."""
        message = await app.messages.find_by_id(message_id)
        if not message:
            raise HTTPException(status_code=404, detail="Message not found")
        if message.sender_id != session.user.id:
            raise HTTPException(
                status_code=403,
                detail="You don't have permission to delete this message",
            )

        await app.messages.delete(message_id)
        return {"message": "Message successfully deleted"}

    return router
