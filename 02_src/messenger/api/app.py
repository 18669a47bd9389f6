"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..app import Application
from ..config import cors_origins
from ..errors import MessengerError, StorageError
from ..logging_config import get_logger
from .routes import (
    create_auth_router,
    create_conversations_router,
    create_friends_router,
    create_messages_router,
    create_updates_router,
    create_users_router,
)

logger = get_logger(__name__)


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    The Application is started and stopped with the FastAPI lifespan.
    """
    application = application or Application()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="Messenger API",
        description="Accounts, friendships, conversations and messages",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.application = application

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @fastapi_app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @fastapi_app.exception_handler(MessengerError)
    async def messenger_error_handler(request: Request, exc: MessengerError):
        status_code = 500 if isinstance(exc, StorageError) else 400
        if status_code == 500:
            logger.error(
                f"Storage failure on {request.url.path}: {exc.message}",
                exc_info=exc,
            )
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @fastapi_app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @fastapi_app.get("/healthCheck")
    async def health_check() -> dict:
        """Liveness probe."""
        return {"status": "ok"}

    fastapi_app.include_router(create_auth_router(application))
    fastapi_app.include_router(create_users_router(application))
    fastapi_app.include_router(create_friends_router(application))
    fastapi_app.include_router(create_conversations_router(application))
    fastapi_app.include_router(create_messages_router(application))
    fastapi_app.include_router(create_updates_router(application))

    return fastapi_app
