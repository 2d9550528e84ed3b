"""VTN API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map VtnError to structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Storage initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py and are registered once here
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vtn.api.error_handlers import register_error_handlers
from vtn.api.routes import events, health, programs, reports, resources, vens
from vtn.config import get_settings
import vtn.infrastructure.database as database
from vtn.infrastructure.observability import setup_logging
from vtn.infrastructure.storage import init_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    await init_storage(settings)
    logger.info("VTN API started")
    yield
    logger.info("VTN API shutting down")
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(title="VTN API", version="0.1.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(programs.router)
app.include_router(events.router)
app.include_router(reports.router)
app.include_router(vens.router)
app.include_router(resources.router)

register_error_handlers(app)
