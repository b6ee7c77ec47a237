"""
FastAPI application factory.

* Owns one ``EntityStore`` and one ``Broadcaster`` per application
  instance (``app.state``); nothing is a module-level singleton.
* Creates the store schema (and optional demo data) via lifespan events.
* Registers routes for auth, users, drivers, rides, businesses, premium
  info, admin and the ``/ws`` realtime channel.
* Applies rate-limiting and CORS middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from rideflow.api.errors import register_error_handlers
from rideflow.api.middleware import limiter
from rideflow.api.routes import admin, auth, business, drivers, premium, realtime, rides, users
from rideflow.config import settings
from rideflow.infrastructure.database import EntityStore
from rideflow.realtime.broadcaster import Broadcaster

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on startup; dispose of the engine on shutdown."""
    store: EntityStore = app.state.store
    await store.create_all()
    if settings.seed_demo_data:
        from rideflow.seed import seed

        await seed(store)
    logger.info("Entity store ready (%s)", store.database_url)
    yield
    await store.dispose()
    logger.info("Entity store disposed")


def create_app(
    store: Optional[EntityStore] = None,
    broadcaster: Optional[Broadcaster] = None,
) -> FastAPI:
    app = FastAPI(
        title="RideFlow API",
        description=(
            "Ride booking backend: authentication, fare quotes with "
            "time-of-day surge pricing, ride lifecycle management and a "
            "real-time channel for driver locations and ride status."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.store = store or EntityStore(settings.database_url)
    app.state.broadcaster = broadcaster or Broadcaster()

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    for module in (auth, users, drivers, rides, business, premium, admin):
        app.include_router(module.router, prefix="/api")
    app.include_router(realtime.router)

    return app
