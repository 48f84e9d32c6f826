"""
Todo Tracker API - Main Application
===================================

FastAPI application entry point with middleware configuration
and route registration.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import newrelic.agent

# Configure logging for the application (root logger defaults to WARNING)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.errors import setup_exception_handlers
from app.core.route_gate import RouteGateMiddleware
from app.db.session import init_db
from app.services.document_store import get_document_store

logger = logging.getLogger(__name__)


# =============================================================================
# New Relic Transaction Enrichment Middleware (Raw ASGI)
# =============================================================================

class NewRelicTransactionMiddleware:
    """
    Raw ASGI middleware that adds custom attributes to every New Relic
    transaction.

    Raw ASGI keeps the route handler in the same task, so the agent's
    contextvars-based spans for store and blob calls stay attached.

    Captures: response status, latency, HTTP method, route pattern, and
    user ID (when authenticated). Does nothing when no agent is running.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500  # until the response starts

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000

            txn = newrelic.agent.current_transaction()
            if txn:
                # Route pattern (e.g. "/todos/{todo_id}/edit") for grouping
                route = scope.get("route")
                route_path = route.path if route else scope.get("path", "unknown")

                newrelic.agent.add_custom_attributes([
                    ("http.method", scope.get("method", "")),
                    ("http.route", route_path),
                    ("http.status_code", status_code),
                    ("http.duration_ms", round(duration_ms, 2)),
                    ("environment", settings.ENVIRONMENT),
                ])

                # Set by the identity dependency
                state = scope.get("state")
                user_id = state.get("user_id") if isinstance(state, dict) else None
                if user_id:
                    newrelic.agent.add_custom_attribute("enduser.id", str(user_id))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Checks the database on startup when the SQL store is configured and
    releases the document store on shutdown.
    """
    logger.info(
        "startup environment=%s store=%s auth=%s blobs=%s",
        settings.ENVIRONMENT,
        settings.DOCUMENT_STORE_BACKEND,
        settings.AUTH_PROVIDER,
        settings.BLOB_STORE_BACKEND,
    )

    if settings.DOCUMENT_STORE_BACKEND == "sql":
        try:
            await init_db()
        except Exception as e:
            # Keep serving /health; store calls will fail with 500
            logger.error("database_init_failed error=%s", e)

    yield

    logger.info("shutdown")
    await get_document_store().close()


# Create FastAPI application
app = FastAPI(
    title="Todo Tracker API",
    description="""
## Personal Todo Tracker Backend

Create, list, edit, complete and delete todos, optionally with a
category, priority, deadline and an image.

### Authentication
- Bearer token in the `Authorization` header
- Mutations require a token and only touch the caller's own todos

### Images
- Upload to the blob store first, then send the URL as `imageUrl`
- Max 5MB; jpg, jpeg, png, gif, webp
    """,
    version=settings.API_VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
    responses={
        400: {"description": "Validation error"},
        401: {"description": "Not authenticated"},
        403: {"description": "Todo belongs to another user"},
        404: {"description": "Todo not found"},
        500: {"description": "Internal server error"},
    },
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session-cookie redirects for /, /login and /signup
app.add_middleware(RouteGateMiddleware)

# New Relic transaction enrichment (adds custom attrs to every transaction)
app.add_middleware(NewRelicTransactionMiddleware)

# Setup exception handlers
setup_exception_handlers(app)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Health check endpoint.

    Not gated and does not touch the store.
    """
    return {
        "status": "healthy",
        "version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT,
    }


# =============================================================================
# Pages (behind the route gate)
# =============================================================================

@app.get("/", tags=["Pages"])
async def root() -> dict:
    """Home. Reached only with a session cookie."""
    return {
        "name": "Todo Tracker API",
        "version": settings.API_VERSION,
        "todos": "/todos",
        "docs": "/docs" if settings.is_development else "Disabled in production",
    }


@app.get("/login", tags=["Pages"])
async def login_page() -> dict:
    """Sign-in instructions. Reached only without a session cookie."""
    return {
        "page": "login",
        "provider": settings.AUTH_PROVIDER,
        "session": "POST /auth/session with an Authorization: Bearer <token> header",
    }


@app.get("/signup", tags=["Pages"])
async def signup_page() -> dict:
    """Sign-up instructions. Reached only without a session cookie."""
    return {
        "page": "signup",
        "provider": settings.AUTH_PROVIDER,
        "session": "POST /auth/session with an Authorization: Bearer <token> header",
    }


# =============================================================================
# API Routes
# =============================================================================

from app.api.v1 import session, todos

app.include_router(todos.router, prefix="/todos", tags=["Todos"])
app.include_router(todos.router, prefix="/api/todos", tags=["Todos"], include_in_schema=False)
app.include_router(session.router, prefix="/auth", tags=["Session"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
