"""Two-team match room state machine."""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field

from biobuddy.backend.attributes import AttributeStore
from biobuddy.backend.errors import StateError, ValidationError
from biobuddy.backend.models import Question, RoomState, Team
from biobuddy.backend.recommender import eliminate, recommend

DIE_FACES = 6
NOT_YOUR_TURN = "It's not your turn yet. Please wait for your opponent."


@dataclass
class Player:
    participant_id: str
    display_name: str
    team: Team
    remaining_animals: frozenset[str]
    secret_animal: str | None = None
    has_rolled: bool = False
    dice_score: int = 0


@dataclass(frozen=True)
class SecretResult:
    animal: str
    both_ready: bool


@dataclass(frozen=True)
class RollResult:
    team: Team
    value: int
    starting_team: Team | None


@dataclass(frozen=True)
class HintResult:
    question: Question | None
    remaining: frozenset[str]


@dataclass(frozen=True)
class AnswerResult:
    question: Question
    is_yes: bool
    eliminated: frozenset[str]
    remaining: frozenset[str]
    next_turn: Team
    bonus_used: bool


@dataclass(frozen=True)
class MatchGuessResult:
    correct: bool
    guessed: str
    next_turn: Team | None


@dataclass
class MatchRoom:
    code: str
    players: dict[Team, Player] = field(default_factory=dict)
    state: RoomState = RoomState.WAITING
    current_turn: Team | None = None
    last_question: Question | None = None
    turn_bonus: int = 0
    closed: bool = False
    touched_at: float = field(default_factory=time.monotonic, compare=False)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @classmethod
    def create(cls, code: str, owner_id: str, display_name: str, store: AttributeStore) -> "MatchRoom":
        room = cls(code=code)
        room.players[Team.RED] = Player(
            participant_id=owner_id,
            display_name=display_name,
            team=Team.RED,
            remaining_animals=store.all_animals(),
        )
        return room

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def team_of(self, participant_id: str) -> Team:
        for team, player in self.players.items():
            if player.participant_id == participant_id:
                return team
        raise StateError(f"You are not a player in room {self.code}")

    def player_for(self, participant_id: str) -> Player:
        return self.players[self.team_of(participant_id)]

    def opponent_of(self, participant_id: str) -> Player | None:
        return self.players.get(self.team_of(participant_id).opponent)

    def participant_ids(self) -> list[str]:
        return [player.participant_id for player in self.players.values()]

    def is_full(self) -> bool:
        return len(self.players) >= 2

    def join(self, participant_id: str, display_name: str, store: AttributeStore) -> Player:
        self._require_open()
        if self.is_full() or self.state is not RoomState.WAITING:
            raise ValidationError(f"Room {self.code} is already full")
        player = Player(
            participant_id=participant_id,
            display_name=display_name,
            team=Team.BLUE,
            remaining_animals=store.all_animals(),
        )
        self.players[Team.BLUE] = player
        self.state = RoomState.CHOOSING
        return player

    def close(self) -> None:
        self.closed = True
        self.state = RoomState.GAMEOVER
        self.current_turn = None
        self.last_question = None

    # ------------------------------------------------------------------
    # Setup: secrets and the starting roll
    # ------------------------------------------------------------------

    def set_secret(self, participant_id: str, name: str | None, store: AttributeStore) -> SecretResult:
        self._require_open()
        player = self.player_for(participant_id)
        if self.state is RoomState.WAITING:
            raise StateError("Wait for your opponent to join before choosing an animal")
        if self.state is not RoomState.CHOOSING:
            raise StateError("Secret animals are already locked in")
        animal = store.resolve(name)
        if animal is None:
            raise ValidationError(f"I don't know an animal called '{name or ''}'")
        player.secret_animal = animal
        both_ready = all(p.secret_animal is not None for p in self.players.values())
        if both_ready:
            self.state = RoomState.ROLLING
        return SecretResult(animal=animal, both_ready=both_ready)

    def roll(self, participant_id: str, rng: random.Random | None = None) -> RollResult:
        self._require_open()
        player = self.player_for(participant_id)
        if self.state is not RoomState.ROLLING:
            raise StateError("Dice can only be rolled once both animals are chosen")
        if player.has_rolled:
            raise StateError("You have already rolled")
        roller = rng if rng is not None else random.Random()
        player.dice_score = roller.randint(1, DIE_FACES)
        player.has_rolled = True

        starting_team: Team | None = None
        if all(p.has_rolled for p in self.players.values()):
            red, blue = self.players[Team.RED], self.players[Team.BLUE]
            starting_team = Team.BLUE if blue.dice_score > red.dice_score else Team.RED
            self.current_turn = starting_team
            self.state = RoomState.PLAYING
        return RollResult(team=player.team, value=player.dice_score, starting_team=starting_team)

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    def request_hint(self, participant_id: str, store: AttributeStore) -> HintResult:
        player = self._require_turn(participant_id)
        question = recommend(player.remaining_animals, store)
        self.last_question = question
        return HintResult(question=question, remaining=player.remaining_animals)

    def answer(self, participant_id: str, is_yes: bool, store: AttributeStore) -> AnswerResult:
        player = self._require_turn(participant_id)
        question = self.last_question
        if question is None:
            raise StateError("There is no pending question. Ask for a hint first")

        before = player.remaining_animals
        after = eliminate(before, question, is_yes, store)
        player.remaining_animals = after

        bonus_used = self.turn_bonus > 0
        if bonus_used:
            self.turn_bonus -= 1
        else:
            self.current_turn = player.team.opponent
        self.last_question = None
        return AnswerResult(
            question=question,
            is_yes=is_yes,
            eliminated=before - after,
            remaining=after,
            next_turn=self.current_turn,
            bonus_used=bonus_used,
        )

    def guess(self, participant_id: str, name: str | None, store: AttributeStore) -> MatchGuessResult:
        player = self._require_turn(participant_id)
        animal = store.resolve(name)
        if animal is None:
            raise ValidationError(f"I don't know an animal called '{name or ''}'")
        opponent = self.players[player.team.opponent]
        if animal == opponent.secret_animal:
            self.close()
            return MatchGuessResult(correct=True, guessed=animal, next_turn=None)
        self.turn_bonus = 1
        self.current_turn = player.team.opponent
        self.last_question = None
        return MatchGuessResult(correct=False, guessed=animal, next_turn=self.current_turn)

    def check(self, participant_id: str, substring: str | None, store: AttributeStore) -> str | None:
        """Look up a trait of the caller's own secret. Does not touch room state."""
        self._require_open()
        player = self.player_for(participant_id)
        if player.secret_animal is None:
            raise StateError("Choose your secret animal before checking its traits")
        if substring is None or not substring.strip():
            raise ValidationError("Tell me which trait to check, for example 'fur'")
        return store.find_yes_attribute(player.secret_animal, substring)

    def _require_open(self) -> None:
        if self.closed:
            raise StateError(f"Room {self.code} has already ended")

    def _require_turn(self, participant_id: str) -> Player:
        self._require_open()
        player = self.player_for(participant_id)
        if self.state is not RoomState.PLAYING:
            raise StateError("The match hasn't started yet")
        if self.current_turn is not player.team:
            raise StateError(NOT_YOUR_TURN)
        return player
