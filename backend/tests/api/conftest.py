"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apoio.core.auth import SessionUser, require_auth


@pytest.fixture
def api_client(engine, test_db_url):
    """FastAPI test client with test database.

    Initializes the global database via init_db inside the TestClient's
    own event loop so route handlers can use get_session_factory().
    The engine fixture ensures tables exist before this runs.
    """
    from fastapi import HTTPException
    from fastapi.middleware.cors import CORSMiddleware

    from apoio.api.routes import api_router
    from apoio.core.config import get_settings
    from apoio.db import close_db, init_db
    from apoio.main import generic_exception_handler, http_exception_handler
    from apoio.middleware.correlation import setup_correlation_middleware

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        """Test lifespan - initialize DB in TestClient's event loop."""
        # Reset global so init_db creates a fresh engine in THIS loop
        import apoio.db.base as db_mod

        db_mod._engine = None
        db_mod._session_factory = None
        await init_db(test_db_url)
        yield
        await close_db()

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Apoio - Test Client",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_correlation_middleware(app)

    # Exception handlers (needed for debug_id testing)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def authenticate(api_client: TestClient):
    """Override require_auth so requests run as the given user id."""

    def _authenticate(user_id: str) -> SessionUser:
        user = SessionUser(user_id=user_id, claims={"sub": user_id})

        async def _override():
            return user

        api_client.app.dependency_overrides[require_auth] = _override
        return user

    return _authenticate
