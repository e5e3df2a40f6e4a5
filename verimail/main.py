"""verimail API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map every failure to an {code, i18n, data} envelope
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import verimail.infrastructure.database as database
from verimail.api.error_handlers import register_error_handlers
from verimail.api.routes import email, email_verification, health
from verimail.config import get_settings
from verimail.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(settings)
    logger.info("verimail API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("verimail API shutting down")


app = FastAPI(title="verimail API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(email.router)
app.include_router(email_verification.router)

register_error_handlers(app)
