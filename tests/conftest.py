import pytest

from biobuddy.backend.attributes import AttributeStore
from biobuddy.backend.engine import GameEngine
from biobuddy.backend.store import InMemorySessionDirectory

ANIMALS = {
    "Lion": {
        "fur": "yes",
        "feathers": "no",
        "can fly": "no",
        "lives in water": "no",
        "Phylum": "Chordata",
        "Description": "A large cat of the savanna.",
        "Trivia": "Its roar carries for kilometres.",
    },
    "Owl": {
        "fur": "no",
        "feathers": "yes",
        "can fly": "yes",
        "lives in water": "no",
        "nocturnal": "yes",
        "Phylum": "Chordata",
    },
    "Shark": {
        "fur": "no",
        "feathers": "no",
        "can fly": "no",
        "lives in water": "yes",
        "Phylum": "Chordata",
    },
    "Bat": {
        "fur": "yes",
        "feathers": "no",
        "can fly": "yes",
        "lives in water": "no",
        "nocturnal": "yes",
        "Phylum": "Chordata",
    },
}


class FixedRandom:
    """Stand-in for random.Random with scripted dice and picks."""

    def __init__(self, rolls=None, pick_index=0):
        self._rolls = list(rolls or [])
        self._pick_index = pick_index

    def randint(self, low, high):
        value = self._rolls.pop(0)
        assert low <= value <= high
        return value

    def choice(self, seq):
        return seq[self._pick_index]


class CodeSequence:
    def __init__(self, *codes):
        self._codes = list(codes)

    def __call__(self, length):
        if len(self._codes) > 1:
            return self._codes.pop(0)
        return self._codes[0]


@pytest.fixture
def store() -> AttributeStore:
    return AttributeStore(ANIMALS)


@pytest.fixture
def directory() -> InMemorySessionDirectory:
    return InMemorySessionDirectory(code_factory=CodeSequence("B123"))


@pytest.fixture
def engine(store, directory) -> GameEngine:
    return GameEngine(store=store, directory=directory, rng=FixedRandom(rolls=[5, 2], pick_index=1))


@pytest.fixture
def make_rng():
    return FixedRandom


@pytest.fixture
def make_codes():
    return CodeSequence
