"""FastAPI app with the Socket.IO game server mounted in front.

Run with: uvicorn api.main:asgi_app
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from api.config import load_settings
from api.hub import GameHub
from api.models import RoomStateResponse, room_state_to_public
from api.room_store import RoomStore
from api.sockets import register_handlers

settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# engineio only treats the bare string as "any origin"
_cors = "*" if settings.allowed_origins == ["*"] else settings.allowed_origins

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=_cors)
store = RoomStore(idle_ttl_sec=settings.room_idle_ttl_sec)
hub = GameHub(sio, store, settings)
register_handlers(sio, hub)


async def _reap_forever() -> None:
    while True:
        await asyncio.sleep(settings.reap_interval_sec)
        reaped = hub.reap()
        if reaped:
            logger.info("Reaped %d idle rooms; %d live", len(reaped), len(store))


@asynccontextmanager
async def lifespan(_app: FastAPI):
    reaper = asyncio.create_task(_reap_forever())
    try:
        yield
    finally:
        reaper.cancel()


app = FastAPI(title="Mafia Night API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"], summary="Health check")
def health():
    return {"status": "ok"}


@app.get("/rooms", response_model=list[str], tags=["Rooms"], summary="List live room codes")
def list_rooms():
    return store.list_codes()


@app.get("/rooms/{code}", response_model=RoomStateResponse, tags=["Rooms"], summary="Get room state")
def get_room(code: str):
    """Public room state; living players' roles stay hidden until the game ends."""
    room = store.get(code)
    if not room:
        raise HTTPException(404, "Room not found")
    return room_state_to_public(room)


asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
