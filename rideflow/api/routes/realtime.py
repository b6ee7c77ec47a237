"""
Realtime channel
================

WS /ws -- JSON events; see ``rideflow.realtime.handlers`` for the protocol.
"""

from fastapi import APIRouter, WebSocket

from rideflow.realtime.handlers import SocketSession

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket):
    app = websocket.app
    await SocketSession(websocket, app.state.store, app.state.broadcaster).run()
