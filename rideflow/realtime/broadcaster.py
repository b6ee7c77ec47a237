"""
Realtime Broadcaster
====================

Registry of authenticated socket connections keyed by user id, plus a
small publish/subscribe dispatcher.

* One live connection per user id; a second ``auth`` for the same user
  replaces the entry (last auth wins) and the earlier socket is left
  open but unregistered.
* ``publish`` wraps the payload as ``{"type": ..., "data": ...}`` and
  delivers it to every registered connection, or only to those accepted
  by an *audience* predicate.
* A connection that fails to receive is logged and dropped from the
  registry; publishing never raises because of one bad client.

Single event loop, no locks: the registry is copied before fan-out so
(un)registration during a send cannot disturb the iteration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...


@dataclass
class Subscriber:
    user_id: int
    user_type: Optional[str]
    connection: Connection

    @property
    def is_open(self) -> bool:
        state = getattr(self.connection, "client_state", WebSocketState.CONNECTED)
        return state == WebSocketState.CONNECTED


Audience = Callable[[Subscriber], bool]


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def user_types(*types: str) -> Audience:
    """Audience predicate accepting subscribers of the given user types."""
    wanted = set(types)
    return lambda sub: sub.user_type in wanted


class Broadcaster:
    def __init__(self) -> None:
        self._subscribers: dict[int, Subscriber] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._subscribers

    def register(
        self, user_id: int, connection: Connection, user_type: Optional[str] = None
    ) -> Subscriber:
        previous = self._subscribers.get(user_id)
        if previous is not None and previous.connection is not connection:
            logger.info("User %s re-authenticated; replacing connection", user_id)
        sub = Subscriber(user_id=user_id, user_type=user_type, connection=connection)
        self._subscribers[user_id] = sub
        return sub

    def unregister(self, user_id: int, connection: Optional[Connection] = None) -> bool:
        """Drop *user_id*; with *connection* given, only if it is still the registered one."""
        current = self._subscribers.get(user_id)
        if current is None:
            return False
        if connection is not None and current.connection is not connection:
            return False
        del self._subscribers[user_id]
        return True

    def get(self, user_id: int) -> Optional[Subscriber]:
        return self._subscribers.get(user_id)

    def subscribers(self, audience: Optional[Audience] = None) -> list[Subscriber]:
        subs = list(self._subscribers.values())
        if audience is None:
            return subs
        return [s for s in subs if audience(s)]

    async def publish(
        self,
        event_type: str,
        data: dict[str, Any],
        audience: Optional[Audience] = None,
    ) -> int:
        """Fan *data* out as an ``event_type`` event.  Returns deliveries made."""
        message = {"type": event_type, "data": data}
        delivered = 0
        for sub in self.subscribers(audience):
            if not sub.is_open:
                continue
            try:
                await sub.connection.send_json(message)
            except Exception:
                logger.warning(
                    "Dropping connection for user %s after failed send",
                    sub.user_id,
                    exc_info=True,
                )
                self.unregister(sub.user_id, sub.connection)
                continue
            delivered += 1
        logger.debug("Published %s to %d connection(s)", event_type, delivered)
        return delivered
