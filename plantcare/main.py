"""
PlantCare Reminder Engine API - Main application entry point.

Watering urgency, on-device reminder plans, server reminders and household
care stats for shared houseplants.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plantcare.core.config import get_settings
from plantcare.core.database import Database
from plantcare.plants.views import router as plants_router
from plantcare.reminders.views import router as reminders_router
from plantcare.notifications.views import router as notifications_router
from plantcare.care_stats.views import router as care_stats_router

settings = get_settings()
API_PREFIX = "/api/v1"

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    await Database.connect()
    yield
    # Shutdown
    await Database.disconnect()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## PlantCare Reminder Engine

- 💧 **Urgency**: OK / due soon / overdue / snoozed for every plant
- ⏰ **Reminders**: on-device alert plans within the platform pending-alert limit
- 📣 **Notifications**: push, email and device delivery with a per-channel audit log
- 🏆 **Care stats**: household streak, monthly breakdown and leaderboard
    """,
    lifespan=lifespan,
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
routers = [
    plants_router,
    reminders_router,
    notifications_router,
    care_stats_router,
]

for router in routers:
    app.include_router(router, prefix=API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if Database.client else "disconnected",
        "version": settings.APP_VERSION,
    }
