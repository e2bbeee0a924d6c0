"""Entry point for the Reservation FastAPI application."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

from fastapi import FastAPI

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.database import Database
from app.core.error_handlers import register_exception_handlers
from app.services.booking_coordinator import BookingCoordinator
from app.services.expiry_worker import run_expiry_loop
from app.services.notification_client import NotificationClient

logging.basicConfig(level=settings.LOG_LEVEL)


def create_app(
    *,
    database: Optional[Database] = None,
    notification_client: Optional[NotificationClient] = None,
    expiry_interval_seconds: Optional[float] = None,
) -> FastAPI:
    """Build the application around an injected store handle.

    The handle is opened when the application starts and closed when it shuts
    down.
    """

    sweep_interval = (
        settings.EXPIRY_SWEEP_INTERVAL_SECONDS
        if expiry_interval_seconds is None
        else expiry_interval_seconds
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = (database or Database()).open()
        if settings.CREATE_TABLES_ON_STARTUP:
            # Ensure database tables exist when the application starts (for development purposes).
            store.create_all()

        app.state.database = store
        app.state.notification_client = notification_client or NotificationClient()

        stop_event = asyncio.Event()
        sweeper = None
        if sweep_interval > 0:
            sweeper = asyncio.create_task(
                run_expiry_loop(
                    BookingCoordinator(store),
                    interval_seconds=sweep_interval,
                    stop_event=stop_event,
                )
            )

        try:
            yield
        finally:
            stop_event.set()
            try:
                if sweeper is not None:
                    with suppress(asyncio.CancelledError):
                        await sweeper
            finally:
                store.close()

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    register_exception_handlers(app)

    # Register routers
    app.include_router(
        v1_router,
        prefix="/api/pichangapp/v1/reservation",
    )
    return app


app = create_app()

__all__ = ["app", "create_app"]
