"""
Main FastAPI application entry point.
Initializes the app, middleware, error handling and routes.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from app.config import settings
from app.core.dependencies import close_learning_engine
from app.core.exceptions import LearningEngineError

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Adaptive spaced-repetition vocabulary learning engine",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LearningEngineError)
async def learning_engine_error_handler(request: Request, exc: LearningEngineError):
    """Map engine errors to JSON responses with their status code."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(content=exc.to_dict(), status_code=exc.status_code)


@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("Application started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown. Closes the item store client."""
    logger.info("Shutting down application...")
    await close_learning_engine()
    logger.info("Application shutdown complete")


@app.get("/")
async def root():
    """Health check endpoint"""
    return JSONResponse(content={
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    })


@app.get("/health")
async def health_check():
    """
    Detailed health check endpoint.
    Reports which backing services are configured.
    """
    health_status = {
        "status": "healthy",
        "services": {
            "api": "up",
            "item_store": "configured" if settings.COSMOS_DB_ENDPOINT and settings.COSMOS_DB_KEY else "not_configured",
            "question_augmentation": "enabled" if settings.QUESTION_AUGMENTATION_ENABLED else "disabled"
        }
    }

    return JSONResponse(content=health_status)


# Include routers
from app.api.v1.endpoints import practice
from app.api.v1.endpoints import games
app.include_router(practice.router, prefix=f"{settings.API_V1_PREFIX}/practice", tags=["practice"])
app.include_router(games.router, prefix=f"{settings.API_V1_PREFIX}/games", tags=["games"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
