"""HTTP transport for the booking assistant."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinic_booking.api.chat import router as chat_router
from clinic_booking.config import settings
from clinic_booking.conversation.workflow import WorkflowEngine
from clinic_booking.tools import build_provider

logger = logging.getLogger(__name__)


def create_app(engine: Optional[WorkflowEngine] = None) -> FastAPI:
    """Build the FastAPI app around ``engine`` (or one built from settings)."""
    if engine is None:
        engine = WorkflowEngine(provider=build_provider(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Booking assistant ready on %s:%d", settings.server.host, settings.server.port)
        yield
        await app.state.engine.provider.aclose()

    app = FastAPI(title="Clinic Booking Assistant", lifespan=lifespan)
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.allowed_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(chat_router, tags=["Chat"])
    return app


__all__ = ["create_app"]
