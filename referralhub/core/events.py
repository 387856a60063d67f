"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from .config import settings
from .database import close_store, init_store
from .security import close_providers

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    logger.info(f"Starting {settings.APP_NAME} ({settings.STORAGE_BACKEND} backend)...")
    await init_store()
    logger.info(f"{settings.APP_NAME} started successfully")

    try:
        yield
    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await close_providers()
        await close_store()
        logger.info(f"{settings.APP_NAME} shutdown complete")
