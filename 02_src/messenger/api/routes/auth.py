"""Authentication API routes."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ...app import Application
from ...storage.serialization import profile_to_record
from ..dependencies import Session, create_authenticator, create_optional_authenticator


class RegisterRequest(BaseModel):
    """Request model for registration."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    display_name: str = Field(alias="displayName", min_length=1)


class LoginRequest(BaseModel):
    """Request model for login."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


def create_auth_router(app: Application) -> APIRouter:
    """Create authentication router."""
    router = APIRouter(prefix="/auth", tags=["auth"])
    authenticate = create_authenticator(app)
    optional_authenticate = create_optional_authenticator(app)

    @router.post("/register", status_code=201)
    async def register(request: RegisterRequest) -> dict:
        """Register a new user and sign them in."""
        user, access_token = await app.users.register(
            username=request.username,
            email=request.email,
            password=request.password,
            display_name=request.display_name,
        )
        return {
            "user": profile_to_record(user),
            "token": access_token.token,
            "expiresAt": access_token.expires_at.isoformat(),
            "message": "Registration successful",
        }

    @router.post("/login")
    async def login(request: LoginRequest) -> dict:
        """Exchange credentials for a new access token."""
        result = await app.users.authenticate(request.email, request.password)
        if not result:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        user, access_token = result
        return {
            "user": profile_to_record(user),
            "token": access_token.token,
            "expiresAt": access_token.expires_at.isoformat(),
            "message": "Login successful",
        }

    @router.post("/logout")
    async def logout(session: Session = Depends(authenticate)) -> dict:
        """Invalidate the token used for this request."""
        await app.users.logout(session.token)
        return {"message": "Logout successful"}

    @router.post("/logout-all")
    async def logout_all(session: Session = Depends(authenticate)) -> dict:
        """Invalidate every token of the caller."""
        count = await app.users.logout_all_sessions(session.user.id)
        return {"message": "Logged out from all sessions", "revoked": count}

    @router.get("/verify")
    async def verify(session: Session | None = Depends(optional_authenticate)) -> dict:
        """Report whether the presented token is valid."""
        if session is None:
            return {"valid": False}
        return {"valid": True, "user": profile_to_record(session.user)}

    return router
