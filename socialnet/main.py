"""
Main FastAPI application for the social network backend.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from socialnet.config import CORS_ORIGINS, configure_logging
from socialnet.errors import SocialNetError
from socialnet.routes.accounts import router as accounts_router
from socialnet.routes.admin import router as admin_router
from socialnet.routes.chat import router as chat_router
from socialnet.routes.comments import router as comments_router
from socialnet.routes.health import health_check
from socialnet.routes.health import router as health_router
from socialnet.routes.notifications import router as notifications_router
from socialnet.routes.posts import router as posts_router
from socialnet.routes.realtime import router as realtime_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    configure_logging()
    app = FastAPI(
        title="Social Network API",
        description="Social graph, content engagement, notifications and moderation",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SocialNetError)
    async def domain_exception_handler(request: Request, exc: SocialNetError):
        """Map domain errors to their HTTP status."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle SQLAlchemy database errors."""
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "DATABASE_ERROR",
                "message": "Database operation failed",
                "details": str(exc) if app.debug else "Database connection issue",
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unhandled exceptions."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if app.debug else "Internal server error",
            },
        )

    app.include_router(accounts_router)
    app.include_router(posts_router)
    app.include_router(comments_router)
    app.include_router(chat_router)
    app.include_router(notifications_router)
    app.include_router(admin_router)
    app.include_router(health_router)
    app.include_router(realtime_router)

    @app.get("/")
    async def root():
        return {"message": "Social Network API", "status": "healthy", "version": "1.0.0"}

    @app.get("/health")
    async def health():
        """Same as /health/."""
        return await health_check()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("socialnet.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
