from contextlib import asynccontextmanager
import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from api import leaderboard_router
from services.leaderboard import leaderboard_service
from utils.logger import setup_logging, get_logger
from utils.utcnow import utcnow

# Setup logging
setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting PnL leaderboard API...")

    try:
        # Liveness probe + per-timeframe initialization; fatal on failure.
        await leaderboard_service.start()
        logger.info("All services started successfully")

        yield

    except Exception as e:
        logger.critical(
            "Startup failed", error=str(e), traceback=traceback.format_exc()
        )
        raise

    finally:
        logger.info("Shutting down...")
        await leaderboard_service.shutdown()
        logger.info("Shutdown complete")


app = FastAPI(
    title="PnL Leaderboard",
    description="Wallet PnL rankings across rolling timeframes, backed by Redis sorted sets",
    version="1.0.0",
    lifespan=lifespan,
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        traceback=traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500, content={"detail": "Internal server error", "error": str(exc)}
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# API routes
app.include_router(leaderboard_router, prefix="/api")


# Health checks
@app.get("/health")
async def health_check():
    """Basic health check - for load balancers"""
    return {"status": "ok"}


@app.get("/health/ready")
async def readiness_check():
    """Readiness probe - does Redis answer?"""
    redis_ok = await leaderboard_service.connection.ping()
    return {
        "status": "ready" if redis_ok else "not_ready",
        "checks": {"redis": redis_ok},
        "timestamp": utcnow().isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
