# warehouse_manager/main.py
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from warehouse_manager.config.settings import settings
from warehouse_manager.config.database import create_tables
from warehouse_manager.core.error_handlers import setup_exception_handlers
from warehouse_manager.core.middleware import setup_middleware
from warehouse_manager.api.router import api_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"{settings.app_name} starting - version {settings.version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")
    logger.info(f"Database: {settings.database_url.split('@')[-1]}")
    logger.info(f"Warehouse lock timeout: {settings.lock_timeout_seconds}s")
    create_tables()

    yield

    # Shutdown
    logger.info(f"{settings.app_name} shutting down")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Warehouse inventory with atomic stock transfers between warehouses",
    docs_url="/docs",
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)
setup_exception_handlers(app)

# Include routers
app.include_router(api_router, prefix="/api")


# Root endpoint
@app.get("/")
async def root():
    return {
        "message": f"{settings.app_name}",
        "version": settings.version,
        "status": "running",
        "environment": "production" if not settings.debug else "development",
        "docs": "/docs",
        "api": "/api"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.version,
        "app": settings.app_name
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "warehouse_manager.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
