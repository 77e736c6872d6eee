import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from routes.credential_route import router as credential_router
from routes.session_route import router as session_router
from services.session_store import SessionStore
from utils.database_init import AsyncDatabaseInitializer
from utils.settings import Settings

load_dotenv()  # Load environment variables from .env file if present

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite credential store (at DATABASE_DIR/app.db)
      - the in-memory session store
    and attach them to `app.state`.
    """
    db_initializer = AsyncDatabaseInitializer()
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    app.state.session_store = SessionStore()

    try:
        yield
    finally:
        store: SessionStore = app.state.session_store
        # Flows close their API clients while unwinding.
        await store.drain()
        logger.info("Session store drained")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="VIS Genius", lifespan=lifespan)
    app.state.settings = settings
    # Overridable for tests; None selects GenerationClient.from_credentials.
    app.state.client_factory = None

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies the credential store and session store.
        """
        has_db = hasattr(request.app.state, "db_initializer")
        store = getattr(request.app.state, "session_store", None)
        return {
            "ok": True,
            "db_initialized": has_db,
            "sessions": len(store.list_ids()) if store is not None else 0,
        }

    app.include_router(credential_router)
    app.include_router(session_router)

    return app


app = create_app()
