"""Intent dispatcher routing typed commands to solo sessions and match rooms."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field

from biobuddy.backend.attributes import AttributeStore
from biobuddy.backend.errors import GameError, NotFoundError, StateError, ValidationError
from biobuddy.backend.match import MatchRoom
from biobuddy.backend.models import Intent, IntentKind, Message, Outbound, Team
from biobuddy.backend.replies import (
    ANSWER_ACTIONS,
    HOME_ACTIONS,
    ROLL_ACTIONS,
    SOLO_ACTIONS,
    TURN_ACTIONS,
    animal_list,
    error_message,
    home_message,
    info_message,
    question_text,
    rules_message,
    team_label,
)
from biobuddy.backend.security import normalize_room_code
from biobuddy.backend.solo import SoloSession
from biobuddy.backend.store import SessionDirectory

logger = logging.getLogger(__name__)


def _reply(text: str, quick_replies: tuple[str, ...] = ()) -> Outbound:
    return Outbound(direct_reply=Message(text=text, quick_replies=quick_replies))


@dataclass
class GameEngine:
    store: AttributeStore
    directory: SessionDirectory
    rng: random.Random = field(default_factory=random.Random)
    idle_ttl_sec: int = 0

    def dispatch(self, intent: Intent) -> Outbound:
        """Handle one intent. Rejections become direct replies, never exceptions."""
        if self.idle_ttl_sec > 0:
            self.reap_idle()
        try:
            return self._route(intent)
        except NotFoundError:
            return Outbound(direct_reply=home_message())
        except GameError as exc:
            logger.info("Rejected %s from %s: %s", intent.kind.value, intent.participant_id, exc.message)
            return Outbound(direct_reply=error_message(exc.message))

    def reap_idle(self, now: float | None = None) -> int:
        current = time.monotonic() if now is None else now
        reaped = 0
        for entry in self.directory.idle_entries(self.idle_ttl_sec, now=current):
            with entry.lock:
                # touched or finished since the idle listing was taken
                if entry.closed or current - entry.touched_at <= self.idle_ttl_sec:
                    continue
                if isinstance(entry, MatchRoom):
                    entry.close()
                    self.directory.remove_room(entry)
                else:
                    entry.status = "abandoned"
                    self.directory.release(entry.owner_id, entry)
            reaped += 1
        if reaped:
            logger.info("Reaped %d idle games", reaped)
        return reaped

    def _route(self, intent: Intent) -> Outbound:
        kind = intent.kind
        if kind is IntentKind.RULES:
            return Outbound(direct_reply=rules_message())
        if kind is IntentKind.HOME:
            in_game = self.directory.lookup(intent.participant_id) is not None
            return Outbound(direct_reply=home_message(in_game=in_game))
        if kind is IntentKind.INFO:
            return self._info(intent)
        if kind is IntentKind.START_SOLO:
            return self._start_solo(intent)
        if kind is IntentKind.START_ROOM:
            return self._start_room(intent)
        if kind is IntentKind.JOIN_ROOM:
            return self._join_room(intent)

        entry = self.directory.lookup(intent.participant_id)
        if entry is None:
            raise NotFoundError("No active game")
        with entry.lock:
            if entry.closed:
                raise StateError("This game has already ended")
            entry.touched_at = time.monotonic()
            if isinstance(entry, SoloSession):
                return self._handle_solo(entry, intent)
            return self._handle_match(entry, intent)

    # ------------------------------------------------------------------
    # Menu and lobby
    # ------------------------------------------------------------------

    def _info(self, intent: Intent) -> Outbound:
        animal = self.store.resolve(intent.argument)
        if animal is None:
            raise ValidationError(f"I don't know an animal called '{intent.argument or ''}'")
        return Outbound(direct_reply=info_message(self.store, animal))

    def _start_solo(self, intent: Intent) -> Outbound:
        session = SoloSession.start(intent.participant_id, self.store, rng=self.rng)
        self.directory.add_solo(session)
        return _reply(
            f"I'm thinking of one of {len(self.store)} animals. Ask about a trait, ask for a hint, or guess!",
            SOLO_ACTIONS,
        )

    def _start_room(self, intent: Intent) -> Outbound:
        name = intent.display_name or intent.participant_id
        room = self.directory.create_room(intent.participant_id, name, self.store)
        return _reply(
            f"Room {room.code} created. You are the {team_label(Team.RED)}. "
            f"Share the code with your opponent and wait for them to join.",
            ("End game",),
        )

    def _join_room(self, intent: Intent) -> Outbound:
        code = normalize_room_code(intent.argument)
        room = self.directory.get_room(code)
        if room is None:
            raise ValidationError(f"Room {code} was not found")
        name = intent.display_name or intent.participant_id
        with room.lock:
            if room.closed:
                raise ValidationError(f"Room {code} was not found")
            self.directory.claim(intent.participant_id, room)
            try:
                player = room.join(intent.participant_id, name, self.store)
            except GameError:
                self.directory.release(intent.participant_id, room)
                raise
            room.touched_at = time.monotonic()
            host = room.players[Team.RED]
        logger.info("%s joined room %s", intent.participant_id, code)
        return Outbound(
            direct_reply=Message(
                text=f"You joined room {code} as the {team_label(player.team)}. Choose your secret animal.",
            ),
            broadcasts=[
                (host.participant_id, Message(text=f"{player.display_name} joined! Choose your secret animal.")),
            ],
        )

    # ------------------------------------------------------------------
    # Solo
    # ------------------------------------------------------------------

    def _handle_solo(self, session: SoloSession, intent: Intent) -> Outbound:
        kind = intent.kind
        if kind is IntentKind.FREEFORM_ASK:
            result = session.ask(intent.argument, self.store)
            if result.is_yes:
                text = f"Yes! It has '{result.attribute}'."
            else:
                text = "No."
            return _reply(f"{text} Questions asked: {result.questions_asked}", SOLO_ACTIONS)
        if kind is IntentKind.REQUEST_HINT:
            question = session.hint(self.store)
            if question is None:
                return _reply("I have no hint right now. Try a guess!", SOLO_ACTIONS)
            return _reply(f"Try asking about '{question.attribute}'.", SOLO_ACTIONS)
        if kind is IntentKind.GUESS:
            guess = session.guess(intent.argument, self.store)
            if guess.correct:
                self.directory.release(session.owner_id, session)
                logger.info("Solo session for %s won with score %s", session.owner_id, guess.score)
                return _reply(
                    f"Correct, it's the {guess.guessed}! You asked {guess.questions_asked} questions "
                    f"and scored {guess.score} points.",
                    HOME_ACTIONS,
                )
            return _reply(
                f"Nope, it isn't the {guess.guessed}. Questions asked: {guess.questions_asked}",
                SOLO_ACTIONS,
            )
        if kind is IntentKind.END_GAME:
            secret = session.abandon()
            self.directory.release(session.owner_id, session)
            logger.info("Solo session for %s abandoned", session.owner_id)
            return _reply(f"Game over. I was thinking of the {secret}.", HOME_ACTIONS)
        raise StateError("That only works in a match. Ask about a trait, ask for a hint, or guess.")

    # ------------------------------------------------------------------
    # Match
    # ------------------------------------------------------------------

    def _handle_match(self, room: MatchRoom, intent: Intent) -> Outbound:
        kind = intent.kind
        if kind is IntentKind.SET_SECRET:
            return self._set_secret(room, intent)
        if kind is IntentKind.ROLL:
            return self._roll(room, intent)
        if kind is IntentKind.REQUEST_HINT:
            return self._hint(room, intent)
        if kind is IntentKind.ANSWER:
            return self._answer(room, intent)
        if kind is IntentKind.GUESS:
            return self._guess(room, intent)
        if kind is IntentKind.CHECK:
            return self._check(room, intent)
        if kind is IntentKind.END_GAME:
            return self._end_match(room, intent)
        raise StateError("That only works in practice mode.")

    def _to_opponent(self, room: MatchRoom, participant_id: str, message: Message) -> list[tuple[str, Message]]:
        opponent = room.opponent_of(participant_id)
        if opponent is None:
            return []
        return [(opponent.participant_id, message)]

    def _set_secret(self, room: MatchRoom, intent: Intent) -> Outbound:
        result = room.set_secret(intent.participant_id, intent.argument, self.store)
        if result.both_ready:
            logger.info("Room %s: both secrets chosen", room.code)
            ready = "Both animals are chosen. Roll the die to see who starts!"
            return Outbound(
                direct_reply=Message(text=f"Your secret animal is the {result.animal}. {ready}", quick_replies=ROLL_ACTIONS),
                broadcasts=self._to_opponent(room, intent.participant_id, Message(text=ready, quick_replies=ROLL_ACTIONS)),
            )
        return Outbound(
            direct_reply=Message(text=f"Your secret animal is the {result.animal}. Waiting for your opponent."),
            broadcasts=self._to_opponent(
                room, intent.participant_id, Message(text="Your opponent has chosen their animal.")
            ),
        )

    def _roll(self, room: MatchRoom, intent: Intent) -> Outbound:
        result = room.roll(intent.participant_id, rng=self.rng)
        if result.starting_team is None:
            return Outbound(
                direct_reply=Message(text=f"You rolled {result.value}. Waiting for your opponent to roll."),
                broadcasts=self._to_opponent(
                    room, intent.participant_id, Message(text=f"Your opponent rolled {result.value}.", quick_replies=ROLL_ACTIONS)
                ),
            )

        red, blue = room.players[Team.RED], room.players[Team.BLUE]
        logger.info("Room %s: red rolled %d, blue rolled %d", room.code, red.dice_score, blue.dice_score)
        summary = (
            f"{team_label(Team.RED)} rolled {red.dice_score}, {team_label(Team.BLUE)} rolled {blue.dice_score}. "
            f"{team_label(result.starting_team)} goes first!"
        )

        def actions_for(team: Team) -> tuple[str, ...]:
            return TURN_ACTIONS if team is result.starting_team else ()

        actor = room.player_for(intent.participant_id)
        return Outbound(
            direct_reply=Message(text=summary, quick_replies=actions_for(actor.team)),
            broadcasts=self._to_opponent(
                room, intent.participant_id, Message(text=summary, quick_replies=actions_for(actor.team.opponent))
            ),
        )

    def _hint(self, room: MatchRoom, intent: Intent) -> Outbound:
        result = room.request_hint(intent.participant_id, self.store)
        if result.question is None:
            return _reply(
                f"No question can narrow it down further. Remaining: {animal_list(result.remaining)}. Time to guess!",
                ("Guess",),
            )
        actor = room.player_for(intent.participant_id)
        text = question_text(result.question)
        return Outbound(
            direct_reply=Message(
                text=f"Ask your opponent: {text} Then enter their answer.",
                quick_replies=ANSWER_ACTIONS,
            ),
            broadcasts=self._to_opponent(
                room, intent.participant_id, Message(text=f"{actor.display_name} asks: {text}")
            ),
        )

    def _answer(self, room: MatchRoom, intent: Intent) -> Outbound:
        if intent.answer is None:
            raise ValidationError("Please answer yes or no.")
        result = room.answer(intent.participant_id, intent.answer, self.store)
        lines = [
            f"Eliminated {len(result.eliminated)} animals, {len(result.remaining)} remain: "
            f"{animal_list(result.remaining)}."
        ]
        if result.bonus_used:
            lines.append("Bonus turn used, you go again!")
            return _reply(" ".join(lines), TURN_ACTIONS)

        lines.append(f"Now it's the {team_label(result.next_turn)}'s turn.")
        actor = room.player_for(intent.participant_id)
        return Outbound(
            direct_reply=Message(text=" ".join(lines)),
            broadcasts=self._to_opponent(
                room,
                intent.participant_id,
                Message(
                    text=f"{actor.display_name} now has {len(result.remaining)} candidates left. Your turn!",
                    quick_replies=TURN_ACTIONS,
                ),
            ),
        )

    def _guess(self, room: MatchRoom, intent: Intent) -> Outbound:
        actor = room.player_for(intent.participant_id)
        result = room.guess(intent.participant_id, intent.argument, self.store)
        if result.correct:
            self.directory.remove_room(room)
            logger.info("Room %s won by %s", room.code, actor.team.value)
            return Outbound(
                direct_reply=Message(
                    text=f"Correct, it's the {result.guessed}! The {team_label(actor.team)} wins!",
                    quick_replies=HOME_ACTIONS,
                ),
                broadcasts=self._to_opponent(
                    room,
                    intent.participant_id,
                    Message(
                        text=f"{actor.display_name} guessed your {result.guessed}. The {team_label(actor.team)} wins!",
                        quick_replies=HOME_ACTIONS,
                    ),
                ),
            )
        return Outbound(
            direct_reply=Message(
                text=f"Wrong, it isn't the {result.guessed}. Your opponent takes the turn with one bonus turn."
            ),
            broadcasts=self._to_opponent(
                room,
                intent.participant_id,
                Message(
                    text=f"{actor.display_name} guessed the {result.guessed} and missed. "
                    f"Your turn, and you get one bonus turn!",
                    quick_replies=TURN_ACTIONS,
                ),
            ),
        )

    def _check(self, room: MatchRoom, intent: Intent) -> Outbound:
        attribute = room.check(intent.participant_id, intent.argument, self.store)
        secret = room.player_for(intent.participant_id).secret_animal
        if attribute is None:
            return _reply(f"No, your {secret} has no trait matching '{intent.argument}'.")
        return _reply(f"Yes, your {secret} has '{attribute}'.")

    def _end_match(self, room: MatchRoom, intent: Intent) -> Outbound:
        actor = room.player_for(intent.participant_id)
        room.close()
        self.directory.remove_room(room)
        logger.info("Room %s ended by %s", room.code, intent.participant_id)
        return Outbound(
            direct_reply=Message(text=f"Room {room.code} has been closed.", quick_replies=HOME_ACTIONS),
            broadcasts=self._to_opponent(
                room,
                intent.participant_id,
                Message(text=f"{actor.display_name} ended the game.", quick_replies=HOME_ACTIONS),
            ),
        )
