"""User API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from ...app import Application
from ...storage.serialization import profile_to_record
from ..dependencies import Session, create_authenticator


class UpdateProfileRequest(BaseModel):
    """Request model for profile changes."""

    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(default=None, alias="displayName", min_length=1)
    avatar_url: str | None = Field(default=None, alias="avatarUrl")


class ChangePasswordRequest(BaseModel):
    """Request model for password changes."""

    model_config = ConfigDict(populate_by_name=True)

    old_password: str = Field(alias="oldPassword", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1)


def create_users_router(app: Application) -> APIRouter:
    """Create users router."""
    router = APIRouter(prefix="/users", tags=["users"])
    authenticate = create_authenticator(app)

    @router.get("/me")
    async def get_me(session: Session = Depends(authenticate)) -> dict:
        """Get the caller's profile."""
        return profile_to_record(session.user)

    @router.put("/me")
    async def update_me(
        request: UpdateProfileRequest, session: Session = Depends(authenticate)
    ) -> dict:
        """Update display name and/or avatar of the caller."""
        changes = request.model_dump(exclude_unset=True)
        user = await app.users.update(session.user.id, **changes)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return profile_to_record(user)

    @router.put("/password")
    async def change_password(
        request: ChangePasswordRequest, session: Session = Depends(authenticate)
    ) -> dict:
        """Change the caller's password after checking the old one."""
        if not await app.users.verify_password(session.user.id, request.old_password):
            raise HTTPException(status_code=401, detail="Invalid old password")

        await app.users.update_password(session.user.id, request.new_password)
        return {"message": "Password successfully changed"}

    @router.get("/search")
    async def search_users(
        query: str = Query(..., description="Display name fragment"),
        session: Session = Depends(authenticate),
    ) -> list[dict]:
        """Search other users by display name."""
        if len(query) < 2:
            raise HTTPException(
                status_code=400,
                detail="Search query must be at least 2 characters long",
            )

        users = await app.users.search_by_display_name(query)
        return [profile_to_record(u) for u in users if u.id != session.user.id]

    @router.get("/{user_id}")
    async def get_user(user_id: str, session: Session = Depends(authenticate)) -> dict:
        """Get a user by ID."""
        user = await app.users.find_by_id(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return profile_to_record(user)

    return router
