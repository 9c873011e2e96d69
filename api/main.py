from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth import router as auth_router
from comments import router as comments_router
from core import errors, settings
from core.db import Database
from core.storage import ThumbnailStorage
from projects import router as projects_router

errors.configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pool and one storage client per process, shared by all requests.
    app.state.db = await Database.connect()
    app.state.storage = ThumbnailStorage.from_env()
    try:
        yield
    finally:
        await app.state.db.close()
        app.state.db = None
        app.state.storage = None


def health() -> dict:
    return {"status": "ok"}


def root() -> dict:
    return {"message": "project-share api"}


def create_app() -> FastAPI:
    """Build the application; ALLOWED_ORIGINS is read at call time."""
    app = FastAPI(lifespan=lifespan)

    # Browser frontends on the allow-list send the session cookie cross-site.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    errors.install_error_handlers(app)

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(projects_router.router, tags=["projects"])
    app.include_router(comments_router.router, tags=["comments"])

    app.add_api_route("/health", health, methods=["GET"])
    app.add_api_route("/", root, methods=["GET"])
    return app


app = create_app()
