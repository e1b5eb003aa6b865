"""Messagely API application.

Run with the app factory so configuration is read at startup:

    uvicorn messagely.main:create_app --factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from messagely.auth import PasswordHasher, SessionIssuer
from messagely.config import Settings, settings as default_settings
from messagely.database import build_engine, build_sessionmaker, create_tables
from messagely.exceptions import ConflictError, NotFoundError

logger = logging.getLogger("messagely.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables(app.state.engine)
    yield
    await app.state.engine.dispose()


async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Storage unavailable"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Raises ConfigurationError without a usable secret key or bcrypt cost."""
    settings = (settings or default_settings).validate()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Messagely API",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.hasher = PasswordHasher(settings)
    app.state.issuer = SessionIssuer(settings)
    app.state.engine = build_engine(settings)
    app.state.sessionmaker = build_sessionmaker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ConflictError, conflict_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    from messagely.api.v1 import auth, users

    app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/v1/users", tags=["users"])

    @app.get("/")
    async def root():
        return {"message": "Messagely API", "version": settings.VERSION}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    logger.info(f"{settings.APP_NAME} {settings.VERSION} configured")
    return app
