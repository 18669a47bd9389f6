"""Friendship API routes."""

from fastapi import APIRouter, Depends, HTTPException

from ...app import Application
from ...storage.serialization import profile_to_record
from ..dependencies import Session, create_authenticator


def create_friends_router(app: Application) -> APIRouter:
    """Create friends router."""
    router = APIRouter(prefix="/friends", tags=["friends"])
    authenticate = create_authenticator(app)

    @router.get("")
    async def get_friends(session: Session = Depends(authenticate)) -> list[dict]:
        """List the caller's friends."""
        friends = await app.social.get_friends(session.user.id)
        if friends is None:
            raise HTTPException(status_code=404, detail="User not found")
        return [profile_to_record(f) for f in friends]

    @router.get("/requests")
    async def get_requests(session: Session = Depends(authenticate)) -> list[dict]:
        """List users with a pending request to the caller."""
        requesters = await app.social.get_friend_requests(session.user.id)
        if requesters is None:
            raise HTTPException(status_code=404, detail="User not found")
        return [profile_to_record(r) for r in requesters]

    @router.post("/requests/{user_id}")
    async def send_request(user_id: str, session: Session = Depends(authenticate)) -> dict:
        """Send a friend request to user_id."""
        if user_id == session.user.id:
            raise HTTPException(
                status_code=400, detail="You cannot send a request to yourself"
            )

        if not await app.social.send_friend_request(session.user.id, user_id):
            raise HTTPException(
                status_code=400,
                detail=(
                    "Cannot send request. User either doesn't exist, "
                    "request already sent, or you're already friends."
                ),
            )
        return {"message": "Friend request sent successfully"}

    @router.put("/requests/{user_id}/accept")
    async def accept_request(user_id: str, session: Session = Depends(authenticate)) -> dict:
        """Accept the pending request from user_id."""
        if not await app.social.accept_friend_request(session.user.id, user_id):
            raise HTTPException(
                status_code=400,
                detail="Cannot accept request. User either doesn't exist or request was not found.",
            )
        return {"message": "Friend request accepted successfully"}

    @router.put("/requests/{user_id}/decline")
    async def decline_request(user_id: str, session: Session = Depends(authenticate)) -> dict:
        """Decline the pending request from user_id."""
        if not await app.social.decline_friend_request(session.user.id, user_id):
            raise HTTPException(
                status_code=400,
                detail="Cannot decline request. User either doesn't exist or request was not found.",
            )
        return {"message": "Friend request declined"}

    @router.delete("/{user_id}")
    async def remove_friend(user_id: str, session: Session = Depends(authenticate)) -> dict:
        """Remove user_id from the caller's friends."""
        if not await app.social.remove_friend(session.user.id, user_id):
            raise HTTPException(
                status_code=400,
                detail="Cannot remove friend. User either doesn't exist or you're not friends.",
            )
        return {"message": "Friend removed successfully"}

    return router
