"""Update polling route."""

from fastapi import APIRouter, Depends

from ...app import Application
from ..dependencies import Session, create_authenticator


def create_updates_router(app: Application) -> APIRouter:
    """Create updates router."""
    router = APIRouter(prefix="/updates", tags=["updates"])
    authenticate = create_authenticator(app)

    @router.get("/check")
    async def check_updates(session: Session = Depends(authenticate)) -> dict:
        """Report (and consume) the caller's new-items flag."""
        return {"hasNewItems": app.tracker.has_updates(session.user.id)}

    return router
