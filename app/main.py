# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the asset marketplace API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.exceptions import (
    MarketplaceException,
    RedirectRequired,
    marketplace_exception_handler,
    redirect_required_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.routers import health, admin_assets, contributors, assets, plans, admin
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup and shutdown."""
    logger.info(f"Starting Asset Marketplace API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.EMAIL_ENABLED:
        logger.info("Email delivery disabled; notification emails will only be logged")

    yield

    logger.info("Shutting down Asset Marketplace API")


# Create FastAPI application
app = FastAPI(
    title="Asset Marketplace API",
    description="""
## Asset Marketplace API

Contributors upload media assets; admins review them before they go live.

### Moderation

| From | Action | To |
|------|--------|----|
| pending | approve | approved |
| pending | reject | rejected |

Approved and rejected are final. Contributors are notified (in-app and by
email) when their asset is reviewed.

### Authentication

Send the Supabase access token as `Authorization: Bearer <token>`, or the
Supabase auth cookie set by the web app. Admin routes additionally require
`role = admin` on the caller's profile.

### Errors

Every error body has the shape `{"error": "...", "status": 400, "code": "..."}`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Verify tokens and read the caller's profile",
        },
        {
            "name": "Moderation",
            "description": "Review contributor assets (admin only)",
        },
        {
            "name": "Contributors",
            "description": "Contributor applications and their review",
        },
        {
            "name": "Assets",
            "description": "Submit assets for review",
        },
        {
            "name": "Plans",
            "description": "Subscription plans and pricing",
        },
        {
            "name": "Admin",
            "description": "Site settings and dashboard",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(MarketplaceException, marketplace_exception_handler)
app.add_exception_handler(RedirectRequired, redirect_required_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Asset moderation endpoints
app.include_router(
    admin_assets.router,
    prefix="/api/v1",
    tags=["Moderation"]
)

# Contributor application endpoints
app.include_router(
    contributors.router,
    prefix="/api/v1",
    tags=["Contributors"]
)

# Asset submission endpoints
app.include_router(
    assets.router,
    prefix="/api/v1",
    tags=["Assets"]
)

# Subscription plan endpoints
app.include_router(
    plans.router,
    prefix="/api/v1",
    tags=["Plans"]
)

# Admin settings and dashboard
app.include_router(
    admin.router,
    prefix="/api/v1",
    tags=["Admin"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Asset Marketplace API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
