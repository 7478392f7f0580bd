"""Backend package for the BioBuddy animal guessing game."""

from .attributes import AttributeStore, load_attribute_store
from .config import BackendSettings, load_settings
from .engine import GameEngine
from .match import MatchRoom
from .recommender import eliminate, recommend
from .solo import SoloSession, solo_score
from .store import InMemorySessionDirectory, SessionDirectory, create_directory

__all__ = [
    "AttributeStore",
    "BackendSettings",
    "create_directory",
    "eliminate",
    "GameEngine",
    "InMemorySessionDirectory",
    "load_attribute_store",
    "load_settings",
    "MatchRoom",
    "recommend",
    "SessionDirectory",
    "solo_score",
    "SoloSession",
]
