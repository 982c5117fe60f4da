# =============================================================================
# app/main.py
# =============================================================================
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager
from datetime import datetime
from sqlalchemy import text
from app.core.config import settings
from app.core.exceptions import PaymentRequiredError, IntegrationAPIError, IntegrationNotConfiguredError
from app.api.v1.api import api_router
from app.db.init_db import init_db
from app.db.session import SessionLocal
from app.services.cleanup_scheduler import startup_scheduler, shutdown_scheduler, get_scheduler_status
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "main.log")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage FastAPI application lifespan with proper startup/shutdown
    """
    logger.info("🚀 Starting FastAPI application...")

    try:
        logger.info("📦 Initializing database...")
        init_db()
        logger.info("✅ Database initialized successfully")

        logger.info("⏰ Starting cleanup scheduler...")
        await startup_scheduler()

        logger.info("🔧 Application configuration:")
        logger.info(f"   Environment: {settings.ENVIRONMENT}")
        logger.info(f"   Debug mode: {settings.DEBUG}")
        logger.info(f"   Tier override: {'🔓 active' if settings.tier_override_active else 'off'}")
        logger.info(f"   Project: {settings.PROJECT_NAME} v{settings.VERSION}")
        logger.info(f"   Google OAuth: {'✅ Configured' if settings.GOOGLE_CLIENT_ID else '❌ Not configured'}")
        logger.info(f"   Trello API key: {'✅ Configured' if settings.TRELLO_API_KEY else '❌ Not configured'}")

        logger.info("🎉 Application startup completed successfully!")

    except Exception as e:
        logger.error(f"❌ Error during startup: {str(e)}")
        raise

    yield

    logger.info("🛑 Shutting down FastAPI application...")
    await shutdown_scheduler()
    logger.info("👋 Application shutdown completed successfully!")

def register_exception_handlers(application: FastAPI) -> None:
    """Translate domain exceptions into HTTP responses"""

    @application.exception_handler(PaymentRequiredError)
    async def payment_required_handler(request: Request, exc: PaymentRequiredError):
        return JSONResponse(status_code=402, content=exc.to_dict())

    @application.exception_handler(IntegrationNotConfiguredError)
    async def not_configured_handler(request: Request, exc: IntegrationNotConfiguredError):
        return JSONResponse(status_code=400, content={"detail": str(exc), "provider": exc.provider})

    @application.exception_handler(IntegrationAPIError)
    async def integration_error_handler(request: Request, exc: IntegrationAPIError):
        logger.error(f"Upstream error from {exc.provider}: {exc.message}")
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "provider": exc.provider, "upstream_status": exc.status_code},
        )

def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application with all middleware and routes
    """
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.debug = settings.DEBUG

    # Session middleware for OAuth flows
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY,
        session_cookie="session_cookie",
        max_age=86400,  # 24 hours
        same_site="lax",
        https_only=settings.is_production
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)
    application.include_router(api_router, prefix=settings.API_V1_STR)

    logger.info("📋 Registered API routes:")
    logger.info("   🔐 /api/v1/auth/* - Authentication (Google OAuth)")
    logger.info("   👤 /api/v1/users/* - User Management")
    logger.info("   💳 /api/v1/subscription - Subscription tier")
    logger.info("   📁 /api/v1/projects/* - Projects, members, feedback, integrations")
    logger.info("   🧪 /api/v1/dev/* - Developer commands (non-production)")

    return application

app = create_application()

@app.get("/")
async def root():
    """
    Root endpoint with application overview
    """
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "description": settings.DESCRIPTION,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs",
        "api_endpoints": {
            "authentication": f"{settings.API_V1_STR}/auth/",
            "users": f"{settings.API_V1_STR}/users/",
            "subscription": f"{settings.API_V1_STR}/subscription",
            "projects": f"{settings.API_V1_STR}/projects",
            "invites": f"{settings.API_V1_STR}/invites/",
        },
    }

@app.get("/health")
async def health_check():
    """
    Health check with database and scheduler status
    """
    db_healthy = True
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database query failed: {str(e)}")
        db_healthy = False
    finally:
        db.close()

    return {
        "status": "healthy" if db_healthy else "degraded",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.utcnow().isoformat(),
        "components": {
            "database": "healthy" if db_healthy else "unhealthy",
            "api": "healthy",
        },
        "scheduler": get_scheduler_status(),
    }
