"""Bridge LFU - license and equipment lifecycle alerts API."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bridge_lfu.config import get_settings
from bridge_lfu.logging import setup_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()

    from bridge_lfu.database import Base, engine

    # Import all models so they're registered with Base
    from bridge_lfu import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    yield


app = FastAPI(
    title=settings.app_name,
    description="Track client licenses and equipment, and get alerted before they lapse",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


# Import and include routers
from bridge_lfu.api import cron, notifications  # noqa: E402

app.include_router(notifications.router, prefix="/api")
app.include_router(cron.router, prefix="/api")
