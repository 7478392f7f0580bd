"""Session directory: participant -> solo session or match room membership."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Callable, Protocol, Union

from biobuddy.backend.attributes import AttributeStore
from biobuddy.backend.errors import StateError, ValidationError
from biobuddy.backend.match import MatchRoom
from biobuddy.backend.security import ROOM_CODE_LENGTH, check_room_code_length, generate_room_code
from biobuddy.backend.solo import SoloSession

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 20
ALREADY_PLAYING = "You are already in a game. End it before starting another one."

Session = Union[SoloSession, MatchRoom]


class SessionDirectory(Protocol):
    def lookup(self, participant_id: str) -> Session | None:
        """Return the participant's solo session or room, if any."""

    def get_room(self, code: str) -> MatchRoom | None:
        """Return an active room by code."""

    def add_solo(self, session: SoloSession) -> SoloSession:
        """Register a solo session unless its owner is already playing."""

    def create_room(self, owner_id: str, display_name: str, store: AttributeStore) -> MatchRoom:
        """Create a room with a fresh code and register its owner."""

    def claim(self, participant_id: str, room: MatchRoom) -> None:
        """Register a joining participant as a member of ``room``."""

    def release(self, participant_id: str, entry: Session) -> None:
        """Drop a participant's entry if it still points at ``entry``."""

    def remove_room(self, room: MatchRoom) -> None:
        """Drop a room and all of its members' entries."""

    def idle_entries(self, ttl_sec: float, now: float | None = None) -> list[Session]:
        """Return sessions and rooms untouched for longer than ``ttl_sec``."""


@dataclass
class InMemorySessionDirectory:
    code_length: int = ROOM_CODE_LENGTH
    code_factory: Callable[[int], str] = field(default=generate_room_code)

    def __post_init__(self) -> None:
        check_room_code_length(self.code_length)
        self._lock = threading.RLock()
        self._participants: dict[str, Session] = {}
        self._rooms: dict[str, MatchRoom] = {}

    def lookup(self, participant_id: str) -> Session | None:
        with self._lock:
            return self._participants.get(participant_id)

    def get_room(self, code: str) -> MatchRoom | None:
        with self._lock:
            return self._rooms.get(code)

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def add_solo(self, session: SoloSession) -> SoloSession:
        with self._lock:
            if session.owner_id in self._participants:
                raise StateError(ALREADY_PLAYING)
            self._participants[session.owner_id] = session
        logger.info("Solo session started for %s", session.owner_id)
        return session

    def create_room(self, owner_id: str, display_name: str, store: AttributeStore) -> MatchRoom:
        with self._lock:
            if owner_id in self._participants:
                raise StateError(ALREADY_PLAYING)
            for _ in range(MAX_CODE_ATTEMPTS):
                code = self.code_factory(self.code_length)
                if code not in self._rooms:
                    break
                logger.info("Room code %s already in use, retrying", code)
            else:
                raise StateError("Could not allocate a free room code, please try again")
            room = MatchRoom.create(code=code, owner_id=owner_id, display_name=display_name, store=store)
            self._rooms[code] = room
            self._participants[owner_id] = room
        logger.info("Room %s created by %s", code, owner_id)
        return room

    def claim(self, participant_id: str, room: MatchRoom) -> None:
        with self._lock:
            if participant_id in self._participants:
                raise StateError(ALREADY_PLAYING)
            if self._rooms.get(room.code) is not room:
                raise ValidationError(f"Room {room.code} was not found")
            self._participants[participant_id] = room

    def release(self, participant_id: str, entry: Session) -> None:
        with self._lock:
            if self._participants.get(participant_id) is entry:
                self._participants.pop(participant_id)

    def remove_room(self, room: MatchRoom) -> None:
        with self._lock:
            if self._rooms.get(room.code) is room:
                self._rooms.pop(room.code)
            for participant_id in room.participant_ids():
                if self._participants.get(participant_id) is room:
                    self._participants.pop(participant_id)
        logger.info("Room %s removed", room.code)

    def idle_entries(self, ttl_sec: float, now: float | None = None) -> list[Session]:
        current = time.monotonic() if now is None else now
        with self._lock:
            entries = {id(entry): entry for entry in self._participants.values()}
        return [entry for entry in entries.values() if current - entry.touched_at > ttl_sec]


def create_directory(room_code_length: int = ROOM_CODE_LENGTH) -> SessionDirectory:
    return InMemorySessionDirectory(code_length=room_code_length)
