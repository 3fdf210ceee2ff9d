"""Socket.IO event registration."""

import logging

import socketio

from api.hub import GameHub

logger = logging.getLogger(__name__)


def _bind_event(hub: GameHub, event: str):
    async def handler(sid, data=None):
        await hub.handle(event, sid, data)

    handler.__name__ = f"on_{event}"
    return handler


def register_handlers(sio: socketio.AsyncServer, hub: GameHub, namespace: str = "/") -> None:
    """Route every client event in namespace through the hub."""

    async def connect(sid, environ, auth=None):
        logger.debug("Socket connect: %s", sid)

    sio.on("connect", handler=connect, namespace=namespace)
    sio.on("disconnect", handler=hub.disconnect, namespace=namespace)
    for event in hub.events:
        sio.on(event, handler=_bind_event(hub, event), namespace=namespace)
