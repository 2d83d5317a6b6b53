"""
RoomSync Chat Application Entry Point.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from roomsync.core.config import settings
from roomsync.core.exceptions import StoreUnavailable
from roomsync.core.middleware import SessionMiddleware
from roomsync.router.endpoints import api_router
from roomsync.store import close_redis, get_redis_client, init_redis, is_initialized
import logging
import redis
import uvicorn

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting application...")

    # An already-installed client (tests, embedding) is left alone.
    owns_client = not is_initialized()
    if owns_client:
        init_redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            url=settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
        )
    try:
        get_redis_client().ping()
        logger.info(f"Redis connection OK ({settings.redis_target})")
    except redis.RedisError as e:
        logger.error(f"Redis connection failed: {e}")

    yield

    logger.info("Shutting down...")
    if owns_client:
        close_redis()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
)

# Session middleware
app.add_middleware(SessionMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(api_router)


@app.exception_handler(redis.RedisError)
async def store_error_handler(request: Request, exc: redis.RedisError):
    logger.exception("Chat store error on %s: %s", request.url.path, exc)
    error = StoreUnavailable()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME} API!"}


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
