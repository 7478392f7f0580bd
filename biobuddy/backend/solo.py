"""Single-player practice session against the bot's secret animal."""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field

from biobuddy.backend.attributes import AttributeStore
from biobuddy.backend.errors import StateError, ValidationError
from biobuddy.backend.models import Question
from biobuddy.backend.recommender import recommend

MAX_SCORE = 100
POINTS_PER_QUESTION = 5


def solo_score(questions_asked: int) -> int:
    return max(0, MAX_SCORE - POINTS_PER_QUESTION * questions_asked)


@dataclass(frozen=True)
class AskResult:
    is_yes: bool
    attribute: str | None
    questions_asked: int


@dataclass(frozen=True)
class GuessResult:
    correct: bool
    guessed: str
    questions_asked: int
    score: int | None = None


@dataclass
class SoloSession:
    owner_id: str
    secret_animal: str
    questions_asked: int = 0
    status: str = "active"
    touched_at: float = field(default_factory=time.monotonic, compare=False)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @classmethod
    def start(cls, owner_id: str, store: AttributeStore, rng: random.Random | None = None) -> "SoloSession":
        chooser = rng if rng is not None else random.Random()
        return cls(owner_id=owner_id, secret_animal=chooser.choice(store.names))

    @property
    def closed(self) -> bool:
        return self.status != "active"

    def _require_active(self) -> None:
        if self.closed:
            raise StateError("This practice game has already ended")

    def ask(self, substring: str | None, store: AttributeStore) -> AskResult:
        self._require_active()
        if substring is None or not substring.strip():
            raise ValidationError("Ask about a trait, for example 'wings'")
        self.questions_asked += 1
        attribute = store.find_yes_attribute(self.secret_animal, substring)
        return AskResult(is_yes=attribute is not None, attribute=attribute, questions_asked=self.questions_asked)

    def hint(self, store: AttributeStore) -> Question | None:
        self._require_active()
        return recommend(store.all_animals(), store)

    def guess(self, name: str | None, store: AttributeStore) -> GuessResult:
        self._require_active()
        animal = store.resolve(name)
        if animal is None:
            raise ValidationError(f"I don't know an animal called '{name or ''}'")
        if animal == self.secret_animal:
            self.status = "won"
            return GuessResult(
                correct=True,
                guessed=animal,
                questions_asked=self.questions_asked,
                score=solo_score(self.questions_asked),
            )
        self.questions_asked += 1
        return GuessResult(correct=False, guessed=animal, questions_asked=self.questions_asked)

    def abandon(self) -> str:
        self._require_active()
        self.status = "abandoned"
        return self.secret_animal
