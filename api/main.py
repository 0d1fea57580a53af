"""
FastAPI application entry point for the Leaderboard API.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from config import settings
from database import engine, Base
from services.exceptions import (
    LeaderboardError,
    NoActivePeriodError,
    PeriodStateError,
    RankingInvariantError,
)

# Import routers
from routers import engagement, leaderboard

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Leaderboard API",
    description="Weekly engagement leaderboard and tier rewards",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LeaderboardError)
async def leaderboard_error_handler(request: Request, exc: LeaderboardError):
    """Map service errors onto HTTP status codes."""
    if isinstance(exc, NoActivePeriodError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, PeriodStateError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, RankingInvariantError):
        logger.error(f"Ranking invariant violated: {exc.message}")
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif exc.code == "PERIOD_NOT_FOUND":
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    return JSONResponse(
        status_code=status_code,
        content={"code": exc.code, "detail": exc.message, "details": exc.details},
    )


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    logger.info("Starting Leaderboard API...")

    # Create database tables if they don't exist
    # Note: In production, use Alembic migrations instead
    try:
        # Import models to register them
        import models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Leaderboard API...")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "message": "Leaderboard API is running",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Detailed health check endpoint."""
    return {
        "status": "healthy",
        "leaderboard_size": settings.LEADERBOARD_SIZE,
        "refresh_interval_seconds": settings.LEADERBOARD_REFRESH_SECONDS,
    }


# Include routers
app.include_router(leaderboard.router, prefix="/api/leaderboard", tags=["Leaderboard"])
app.include_router(engagement.router, prefix="/api/engagement", tags=["Engagement"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
