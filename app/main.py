import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse
from app.exceptions.handlers import register_exception_handlers
from app.database.base import Base
from app.database.connection import engine
from app.core.config import settings

import app.models  # noqa: F401  registers every table on Base.metadata

from app.api.v1.routes import (
    health_router,
    user_router,
    credit_router,
    membership_router,
    schedule_router,
    booking_router,
    onboarding_router,
    report_router,
    messaging_router,
    profile_router,
    config_router,
    motivation_router
)
from app.middlewares.clerk_auth import ClerkAuthMiddleware, whitelisted_routes

from app.core.logger import get_logger

logger = get_logger("studio-backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 FastAPI app is starting...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Application database tables ensured.")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise e

    yield

    await engine.dispose()
    logger.info("🛑 FastAPI app is shutting down...")


IS_DEVELOPMENT = settings.ENVIRONMENT == "development"

swagger_ui_parameters = {
    "deepLinking": True,
    "displayRequestDuration": True,
    "tryItOutEnabled": True,
    "filter": True,
    "syntaxHighlight.theme": "arta",
}

if IS_DEVELOPMENT:
    swagger_ui_parameters["persistAuthorization"] = True

app = FastAPI(
    title="Studio Booking Backend",
    version="1.0.0",
    lifespan=lifespan,
    description="""
    Booking, credits and onboarding API for a fitness / EMS studio.

    ## Authentication

    **Production Mode**: Uses Clerk JWT tokens. Include your JWT token in the Authorization header:
    ```
    Authorization: Bearer <your-jwt-token>
    ```

    **Development Mode**: With `AUTH_DEV_BYPASS=true` you can act as any existing user by sending
    their id in the `X-Development-User` header. The bypass is ignored when `ENVIRONMENT=production`.
    """,
    swagger_ui_parameters=swagger_ui_parameters,
    openapi_components={
        "securitySchemes": {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Enter your JWT token from Clerk authentication"
            },
            "DevelopmentUser": {
                "type": "apiKey",
                "in": "header",
                "name": "X-Development-User",
                "description": "User id to act as (development bypass only)"
            }
        }
    },
    openapi_security=[] if IS_DEVELOPMENT else [{"BearerAuth": []}]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    ClerkAuthMiddleware,
    whitelisted_routes=whitelisted_routes
)

# Include API routers
app.include_router(health_router, prefix="/api/v1")
app.include_router(user_router, prefix="/api/v1")
app.include_router(credit_router, prefix="/api/v1")
app.include_router(membership_router, prefix="/api/v1")
app.include_router(schedule_router, prefix="/api/v1")
app.include_router(booking_router, prefix="/api/v1")
app.include_router(onboarding_router, prefix="/api/v1")
app.include_router(report_router, prefix="/api/v1")
app.include_router(messaging_router, prefix="/api/v1")
app.include_router(profile_router, prefix="/api/v1")
app.include_router(config_router, prefix="/api/v1")
app.include_router(motivation_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint with development information."""
    return {
        "message": "Studio Booking Backend API",
        "docs": "/docs",
        "development_mode": IS_DEVELOPMENT,
        "version": "1.0.0"
    }


# Unmatched paths only; a NotFoundError from a real endpoint keeps its own body
@app.middleware("http")
async def catch_all_404_middleware(request: Request, call_next):
    response = await call_next(request)
    if response.status_code == 404 and "endpoint" not in request.scope:
        return JSONResponse(
            status_code=404,
            content={"error": "Route not found", "path": str(request.url.path)}
        )
    return response


register_exception_handlers(app)

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=IS_DEVELOPMENT,
        limit_concurrency=20,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30
    )
