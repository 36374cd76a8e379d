from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.core.config import get_settings
from app.core.database import Database
from app.api import suppliers, inventory, pricing, dashboard
from shared.exceptions import PlatformException

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🚀 Starting Farm Supply Service...")

    database = Database(settings.DATABASE_URL)
    try:
        await database.connect()
        logger.info("✅ Database initialized")
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        raise

    if await database.check_health():
        logger.info("✅ Database health check passed")
    else:
        logger.warning("⚠️ Database health check failed")

    app.state.database = database

    yield

    # Shutdown
    logger.info("🛑 Shutting down Farm Supply Service...")
    await database.close()
    logger.info("👋 Farm Supply Service shutdown completed")


# Create FastAPI app
app = FastAPI(
    title="Farm Supply Service",
    description="Back office for farm suppliers, inventory and supplier pricing",
    version=settings.VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlatformException)
async def platform_exception_handler(request: Request, exc: PlatformException):
    """Report typed domain failures with their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} in {request.method} {request.url}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled error in {request.method} {request.url}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred"
        }
    )


# Health check endpoint
@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    db_healthy = await request.app.state.database.check_health()
    content = {
        "status": "healthy" if db_healthy else "unhealthy",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "database": "connected" if db_healthy else "disconnected"
    }
    return JSONResponse(status_code=200 if db_healthy else 503, content=content)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": "Farm Supply Service",
        "version": settings.VERSION,
        "description": "Suppliers, inventory and supplier pricing",
        "endpoints": {
            "suppliers": "/api/suppliers",
            "inventory": "/api/inventory",
            "pricing": "/api/pricing",
            "dashboard": "/api/dashboard/overview",
            "health": "/health",
            "docs": "/docs"
        }
    }


# Include API routers
app.include_router(
    suppliers.router,
    prefix="/api/suppliers",
    tags=["suppliers"]
)

app.include_router(
    inventory.router,
    prefix="/api/inventory",
    tags=["inventory"]
)

app.include_router(
    pricing.router,
    prefix="/api/pricing",
    tags=["pricing"]
)

app.include_router(
    dashboard.router,
    prefix="/api/dashboard",
    tags=["dashboard"]
)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
