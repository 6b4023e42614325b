from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import uvicorn

from .config import get_settings
from .core.exceptions import ErrorCategory, ServiceError
from .database import engine, init_models
from .api.v1.router import api_router
from .utils.logging import get_logger, log_requests, setup_logging

logger = get_logger(__name__)


STATUS_BY_CATEGORY = {
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.INTERNAL: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging(settings.log_level)
    logger.info("Starting Sprint Backlog API")

    # Create database tables
    await init_models(engine)

    yield

    # Shutdown
    logger.info("Shutting down Sprint Backlog API")
    await engine.dispose()


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Projects, backlog and sprint tracking with a full change history",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

app.middleware("http")(log_requests)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    status_code = STATUS_BY_CATEGORY.get(exc.category, 500)
    if status_code >= 500:
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
        detail = "Internal server error"
    else:
        detail = exc.message

    return JSONResponse(status_code=status_code, content={"detail": detail, "code": exc.code})


# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    uvicorn.run(
        "sprint_backlog.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
