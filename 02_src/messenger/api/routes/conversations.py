"""Conversation API routes."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ...app import Application
from ...models import Conversation
from ...storage.serialization import conversation_to_record, profile_to_record
from ..dependencies import Session, create_authenticator


class CreateGroupRequest(BaseModel):
    """Request model for creating a group conversation."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    user_ids: list[str] = Field(default_factory=list, alias="userIds")


class RenameRequest(BaseModel):
    """Request model for renaming a group conversation."""

    name: str | None = None


class AddParticipantsRequest(BaseModel):
    """Request model for adding users to a group conversation."""

    model_config = ConfigDict(populate_by_name=True)

    user_ids: list[str] = Field(default_factory=list, alias="userIds")


def create_conversations_router(app: Application) -> APIRouter:
    """Create conversations router."""
    router = APIRouter(prefix="/conversations", tags=["conversations"])
    authenticate = create_authenticator(app)

    async def load_for_member(conversation_id: str, user_id: str) -> Conversation:
        conversation = await app.conversations.find_by_id(conversation_id)
        if not conversation:
            raise HTTPException(status_code=404, detail="Conversation not found")
        if not await app.conversations.is_participant(conversation_id, user_id):
            raise HTTPException(
                status_code=403, detail="You don't have access to this conversation"
            )
        return conversation

    @router.get("")
    async def get_conversations(session: Session = Depends(authenticate)) -> list[dict]:
        """List the caller's recent conversations with the other participants."""
        conversations = await app.conversations.get_recent_for_user(session.user.id)
        result = []
        for conversation in conversations:
            others = await app.users.find_by_ids(
                [pid for pid in conversation.participant_ids if pid != session.user.id]
            )
            record = conversation_to_record(conversation)
            record["otherParticipants"] = [profile_to_record(u) for u in others]
            result.append(record)
        return result

    @router.post("/direct/{user_id}", status_code=201)
    async def create_direct(user_id: str, session: Session = Depends(authenticate)) -> dict:
        """Open (or return) the direct conversation with user_id."""
        if user_id == session.user.id:
            raise HTTPException(
                status_code=400,
                detail="You cannot create a conversation with yourself",
            )

        conversation = await app.conversations.create_direct([session.user.id, user_id])
        return conversation_to_record(conversation)

    @router.post("/group", status_code=201)
    async def create_group(
        request: CreateGroupRequest, session: Session = Depends(authenticate)
    ) -> dict:
        """Create a group conversation that includes the caller."""
        if not request.name:
            raise HTTPException(status_code=400, detail="Conversation name is required")
        if len(request.user_ids) < 2:
            raise HTTPException(status_code=400, detail="You must add at least 2 users")

        conversation = await app.conversations.create_group(
            [*request.user_ids, session.user.id], request.name
        )
        return conversation_to_record(conversation)

    @router.get("/{conversation_id}")
    async def get_conversation(
        conversation_id: str, session: Session = Depends(authenticate)
    ) -> dict:
        """Get a conversation the caller participates in."""
        conversation = await load_for_member(conversation_id, session.user.id)
        return conversation_to_record(conversation)

    @router.put("/{conversation_id}")
    async def rename_conversation(
        conversation_id: str,
        request: RenameRequest,
        session: Session = Depends(authenticate),
    ) -> dict:
        """Rename a group conversation."""
        conversation = await load_for_member(conversation_id, session.user.id)
        if not conversation.is_group:
            raise HTTPException(
                status_code=400, detail="Direct conversations cannot be modified"
            )

        updated = await app.conversations.update(conversation_id, name=request.name)
        return conversation_to_record(updated)

    @router.delete("/{conversation_id}")
    async def delete_conversation(
        conversation_id: str, session: Session = Depends(authenticate)
    ) -> dict:
        """Delete a conversation together with its messages."""
        await load_for_member(conversation_id, session.user.id)
        await app.conversations.delete(conversation_id)
        return {"message": "Conversation successfully deleted"}

    @router.post("/{conversation_id}/participants")
    async def add_participants(
        conversation_id: str,
        request: AddParticipantsRequest,
        session: Session = Depends(authenticate),
    ) -> dict:
        """Add users to a group conversation."""
        if not request.user_ids:
            raise HTTPException(
                status_code=400, detail="You must provide a list of users to add"
            )

        conversation = await load_for_member(conversation_id, session.user.id)
        if not conversation.is_group:
            raise HTTPException(
                status_code=400,
                detail="You cannot add users to a direct conversation",
            )

        updated = await app.conversations.add_participants(
            conversation_id, request.user_ids
        )
        return conversation_to_record(updated)

    @router.delete("/{conversation_id}/participants/{user_id}")
    async def remove_participant(
        conversation_id: str, user_id: str, session: Session = Depends(authenticate)
    ) -> dict:
        """Remove a user (possibly the caller) from a group conversation."""
        conversation = await load_for_member(conversation_id, session.user.id)
        if not conversation.is_group:
            raise HTTPException(
                status_code=400,
                detail="You cannot remove users from a direct conversation",
            )

        updated = await app.conversations.remove_participant(conversation_id, user_id)
        return conversation_to_record(updated)

    return router
