"""FastAPI endpoints for intents, room views and websocket pushes."""

from __future__ import annotations

from collections import defaultdict
import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from .attributes import load_attribute_store
from .config import BackendSettings, load_settings
from .engine import GameEngine
from .errors import StateError
from .match import MatchRoom
from .models import Intent, IntentKind, Message
from .state import build_room_view, build_solo_view
from .solo import SoloSession
from .store import create_directory

logger = logging.getLogger(__name__)


class IntentEnvelope(BaseModel):
    participant_id: str = Field(min_length=1, max_length=200)
    kind: IntentKind
    argument: str | None = Field(default=None, max_length=200)
    answer: bool | None = None
    display_name: str | None = Field(default=None, max_length=100)


class MessagePayload(BaseModel):
    text: str
    quick_replies: list[str] = Field(default_factory=list)


class BroadcastPayload(BaseModel):
    participant_id: str
    message: MessagePayload


class OutboundResponse(BaseModel):
    direct_reply: MessagePayload
    broadcasts: list[BroadcastPayload]


class GameViewResponse(BaseModel):
    mode: str
    state: dict[str, Any]


def _payload(message: Message) -> MessagePayload:
    return MessagePayload(text=message.text, quick_replies=list(message.quick_replies))


class ParticipantWebSocketHub:
    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, participant_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections[participant_id].add(websocket)

    def disconnect(self, participant_id: str, websocket: WebSocket) -> None:
        connections = self._connections.get(participant_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(participant_id, None)

    async def push(self, participant_id: str, message: MessagePayload) -> int:
        """Send to every connection of a participant; stale sockets are dropped."""
        delivered = 0
        stale_connections: list[WebSocket] = []
        for websocket in list(self._connections.get(participant_id, set())):
            try:
                await websocket.send_json({"type": "message", "message": message.model_dump()})
                delivered += 1
            except RuntimeError:
                stale_connections.append(websocket)
        for websocket in stale_connections:
            logger.warning("Dropping stale websocket for %s", participant_id)
            self.disconnect(participant_id=participant_id, websocket=websocket)
        return delivered


def _default_engine(settings: BackendSettings | None = None) -> GameEngine:
    settings = settings if settings is not None else load_settings()
    store = load_attribute_store(
        settings.animal_data_path,
        yes_marker=settings.yes_marker,
        description_attribute=settings.description_attribute,
        trivia_attribute=settings.trivia_attribute,
        group_attribute=settings.group_attribute,
    )
    return GameEngine(
        store=store,
        directory=create_directory(room_code_length=settings.room_code_length),
        idle_ttl_sec=settings.idle_ttl_sec,
    )


def create_app(engine: GameEngine | None = None) -> FastAPI:
    app = FastAPI(title="BioBuddy API", version="0.1.0")
    game_engine = engine if engine is not None else _default_engine()
    websocket_hub = ParticipantWebSocketHub()
    app.state.websocket_hub = websocket_hub
    app.state.engine = game_engine

    def get_engine() -> GameEngine:
        return game_engine

    @app.post("/api/intents", response_model=OutboundResponse)
    async def post_intent(
        payload: IntentEnvelope,
        local_engine: GameEngine = Depends(get_engine),
    ) -> OutboundResponse:
        # dispatch takes blocking locks
        outbound = await run_in_threadpool(
            local_engine.dispatch,
            Intent(
                participant_id=payload.participant_id,
                kind=payload.kind,
                argument=payload.argument,
                answer=payload.answer,
                display_name=payload.display_name,
            ),
        )
        broadcasts = [
            BroadcastPayload(participant_id=target, message=_payload(message))
            for target, message in outbound.broadcasts
        ]
        for broadcast in broadcasts:
            await websocket_hub.push(participant_id=broadcast.participant_id, message=broadcast.message)
        return OutboundResponse(direct_reply=_payload(outbound.direct_reply), broadcasts=broadcasts)

    @app.get("/api/games/{participant_id}", response_model=GameViewResponse)
    def get_game(
        participant_id: str,
        local_engine: GameEngine = Depends(get_engine),
    ) -> GameViewResponse:
        entry = local_engine.directory.lookup(participant_id)
        if isinstance(entry, SoloSession):
            return GameViewResponse(mode="solo", state=build_solo_view(entry))
        if isinstance(entry, MatchRoom):
            with entry.lock:
                return GameViewResponse(mode="match", state=build_room_view(entry, participant_id))
        raise HTTPException(status_code=404, detail="No active game")

    @app.get("/api/rooms/{code}", response_model=GameViewResponse)
    def get_room(
        code: str,
        participant_id: str = Query(min_length=1),
        local_engine: GameEngine = Depends(get_engine),
    ) -> GameViewResponse:
        room = local_engine.directory.get_room(code.upper())
        if room is None:
            raise HTTPException(status_code=404, detail="Room not found or not a member")
        with room.lock:
            try:
                state = build_room_view(room, participant_id)
            except StateError:
                raise HTTPException(status_code=404, detail="Room not found or not a member")
        return GameViewResponse(mode="match", state=state)

    @app.get("/api/animals", response_model=list[str])
    def list_animals(local_engine: GameEngine = Depends(get_engine)) -> list[str]:
        return list(local_engine.store.names)

    @app.websocket("/ws/participants/{participant_id}")
    async def participant_ws(websocket: WebSocket, participant_id: str) -> None:
        await websocket_hub.connect(participant_id=participant_id, websocket=websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            websocket_hub.disconnect(participant_id=participant_id, websocket=websocket)

    return app
