"""
Per-connection socket handling
==============================

One ``SocketSession`` per accepted websocket.  Frames are processed in
arrival order; each is a single JSON object with a ``type`` field:

* ``auth``                   -- register the connection for ``userId``
* ``driver_location_update`` -- persist the driver's location (auth required)
                                and broadcast it to every connection
* ``ride_status_update``     -- apply a status change through the ride
                                lifecycle manager (auth required)

Any failure while handling a frame is answered with an ``error`` event;
the connection stays open.  On disconnect the user's registry entry is
removed if it still points at this connection.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError as MessageValidationError
from starlette.websockets import WebSocket

from rideflow.domain.exceptions import AuthenticationError, DomainError, NotFoundError
from rideflow.infrastructure.database import EntityStore
from rideflow.infrastructure.repositories import DriverRepository
from rideflow.realtime import events
from rideflow.realtime.broadcaster import Broadcaster
from rideflow.realtime.messages import (
    AuthMessage,
    DriverLocationMessage,
    RideStatusMessage,
    parse_message,
)
from rideflow.services.rides import RideLifecycleManager

logger = logging.getLogger(__name__)


def stored_location(location: Any) -> str:
    """Locations are opaque; structured payloads are kept as JSON text."""
    if isinstance(location, str):
        return location
    return json.dumps(location)


class SocketSession:
    def __init__(
        self, websocket: WebSocket, store: EntityStore, broadcaster: Broadcaster
    ):
        self.websocket = websocket
        self.store = store
        self.broadcaster = broadcaster
        self.user_id: Optional[int] = None
        self.user_type: Optional[str] = None

    async def run(self) -> None:
        await self.websocket.accept()
        logger.info("New realtime connection")
        await self.websocket.send_json(events.welcome())
        try:
            while True:
                frame = await self.websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = (frame.get("bytes") or b"").decode("utf-8", errors="replace")
                await self.handle(raw)
        finally:
            if self.user_id is not None:
                self.broadcaster.unregister(self.user_id, self.websocket)
                logger.info("Connection closed for user %s", self.user_id)

    async def handle(self, raw: str) -> None:
        try:
            message = parse_message(raw)
            if isinstance(message, AuthMessage):
                await self.on_auth(message)
            elif isinstance(message, DriverLocationMessage):
                await self.on_driver_location(message)
            elif isinstance(message, RideStatusMessage):
                await self.on_ride_status(message)
        except MessageValidationError as exc:
            logger.warning("Rejected socket message: %s", exc.errors(include_url=False))
            await self.websocket.send_json(events.error("Message processing failed"))
        except DomainError as exc:
            await self.websocket.send_json(events.error(exc.message))
        except Exception:
            logger.exception("Socket message error")
            await self.websocket.send_json(events.error("Message processing failed"))

    def _require_auth(self) -> int:
        if self.user_id is None:
            raise AuthenticationError("Not authenticated")
        return self.user_id

    async def on_auth(self, message: AuthMessage) -> None:
        if self.user_id is not None and self.user_id != message.user_id:
            self.broadcaster.unregister(self.user_id, self.websocket)
        self.user_id = message.user_id
        self.user_type = message.user_type
        self.broadcaster.register(message.user_id, self.websocket, message.user_type)
        await self.websocket.send_json(
            events.auth_success(message.user_id, message.user_type)
        )
        logger.info("User authenticated: %s (%s)", message.user_id, message.user_type)

    async def on_driver_location(self, message: DriverLocationMessage) -> None:
        user_id = self._require_auth()
        async with self.store.session() as db:
            drivers = DriverRepository(db)
            driver = await drivers.get_by_user_id(user_id)
            if driver is None:
                raise NotFoundError("No driver profile for this user")
            driver.current_location = stored_location(message.location)
            driver.is_online = True

        await self.broadcaster.publish(
            events.DRIVER_LOCATION_UPDATE,
            events.driver_location(
                driver,
                message.location,
                speed=message.speed,
                heading=message.heading,
                accuracy=message.accuracy,
            ),
        )

    async def on_ride_status(self, message: RideStatusMessage) -> None:
        user_id = self._require_auth()
        async with self.store.session() as db:
            manager = RideLifecycleManager(db, self.broadcaster)
            await manager.set_status(
                message.ride_id,
                message.status,
                estimated_time=message.estimated_time,
                message=message.message,
                user_id=user_id,
            )
