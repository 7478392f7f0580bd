"""Domain models shared by the recommender, game handlers and dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Team(str, Enum):
    RED = "red"
    BLUE = "blue"

    @property
    def opponent(self) -> "Team":
        return Team.BLUE if self is Team.RED else Team.RED


class RoomState(str, Enum):
    WAITING = "waiting"
    CHOOSING = "choosing"
    ROLLING = "rolling"
    PLAYING = "playing"
    GAMEOVER = "gameover"


class IntentKind(str, Enum):
    START_SOLO = "START_SOLO"
    START_ROOM = "START_ROOM"
    JOIN_ROOM = "JOIN_ROOM"
    SET_SECRET = "SET_SECRET"
    ROLL = "ROLL"
    REQUEST_HINT = "REQUEST_HINT"
    ANSWER = "ANSWER"
    GUESS = "GUESS"
    CHECK = "CHECK"
    FREEFORM_ASK = "FREEFORM_ASK"
    END_GAME = "END_GAME"
    INFO = "INFO"
    RULES = "RULES"
    HOME = "HOME"


@dataclass(frozen=True)
class Question:
    attribute: str
    expected: str


@dataclass(frozen=True)
class Intent:
    """A pre-parsed command from one participant."""

    participant_id: str
    kind: IntentKind
    argument: str | None = None
    answer: bool | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class Message:
    text: str
    quick_replies: tuple[str, ...] = ()


@dataclass(frozen=True)
class Outbound:
    direct_reply: Message
    broadcasts: list[tuple[str, Message]] = field(default_factory=list)
