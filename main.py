"""
SelfEmploy Portal - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import async_session_maker, close_db, init_db
from app.utils.error_handling import (
    ErrorTrackingMiddleware,
    setup_exception_handlers,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def seed_super_admin():
    """
    Seed the configured Super Admin user on startup.
    Skipped when SUPER_ADMIN_USERNAME / SUPER_ADMIN_PASSWORD are not set.
    """
    from app.services.admin_service import AdminService

    async with async_session_maker() as session:
        super_admin = await AdminService(session).get_or_create_super_admin(
            settings.super_admin_username,
            settings.super_admin_password,
        )
        if super_admin:
            logger.info(f"Super Admin ready: {super_admin.username}")
        else:
            logger.warning("No Super Admin configured")


async def seed_default_categories():
    """Seed the free registration category on an empty database."""
    from app.services.category_service import CategoryService

    async with async_session_maker() as session:
        created = await CategoryService(session).create_default_categories()
        if created:
            logger.info(f"Default categories created: {[c.name for c in created]}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")

    # Create tables on the fly in development only
    if settings.is_development:
        await init_db()
        logger.info("Database tables initialized")

    try:
        await seed_super_admin()
        await seed_default_categories()
    except SQLAlchemyError as e:
        logger.warning(f"Startup seeding skipped: {e}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Self-employment registration portal: public registrations, approvals, accounts and reports",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ErrorTrackingMiddleware)

# Standardized error responses
setup_exception_handlers(app)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.app_env,
    }


# ===========================================
# ROUTERS
# ===========================================

from app.routers import (
    accounts,
    admin_users,
    auth,
    categories,
    content,
    panchayaths,
    public,
    registrations,
    reports,
)

# Authentication
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])

# Public site
app.include_router(public.router, prefix="/api/v1/public", tags=["Public"])

# Back office
app.include_router(registrations.router, prefix="/api/v1/registrations", tags=["Registrations"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["Categories"])
app.include_router(panchayaths.router, prefix="/api/v1/panchayaths", tags=["Panchayaths"])
app.include_router(content.announcements_router, prefix="/api/v1/announcements", tags=["Announcements"])
app.include_router(content.utilities_router, prefix="/api/v1/utilities", tags=["Utilities"])
app.include_router(admin_users.router, prefix="/api/v1/admin-users", tags=["Admin Users"])
app.include_router(accounts.router, prefix="/api/v1/accounts", tags=["Accounts"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
