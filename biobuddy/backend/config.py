"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from biobuddy.backend.attributes import DESCRIPTION_ATTRIBUTE, GROUP_ATTRIBUTE, TRIVIA_ATTRIBUTE
from biobuddy.backend.security import check_room_code_length

SAMPLE_ANIMAL_DATA = Path(__file__).resolve().parents[1] / "data" / "animalData.json"


@dataclass(frozen=True)
class BackendSettings:
    animal_data_path: str
    host: str
    port: int
    log_level: str
    room_code_length: int
    idle_ttl_sec: int
    yes_marker: str
    description_attribute: str = DESCRIPTION_ATTRIBUTE
    trivia_attribute: str = TRIVIA_ATTRIBUTE
    group_attribute: str = GROUP_ATTRIBUTE


def load_settings() -> BackendSettings:
    port_raw = os.getenv("BIOBUDDY_PORT", "8000")
    return BackendSettings(
        animal_data_path=os.getenv("BIOBUDDY_ANIMAL_DATA", str(SAMPLE_ANIMAL_DATA)),
        host=os.getenv("BIOBUDDY_HOST", "127.0.0.1"),
        port=int(port_raw),
        log_level=os.getenv("BIOBUDDY_LOG_LEVEL", "INFO").upper(),
        room_code_length=check_room_code_length(int(os.getenv("BIOBUDDY_ROOM_CODE_LENGTH", "4"))),
        idle_ttl_sec=int(os.getenv("BIOBUDDY_IDLE_TTL_SEC", "0")),
        yes_marker=os.getenv("BIOBUDDY_YES_MARKER", "yes"),
        description_attribute=os.getenv("BIOBUDDY_DESCRIPTION_ATTRIBUTE", DESCRIPTION_ATTRIBUTE),
        trivia_attribute=os.getenv("BIOBUDDY_TRIVIA_ATTRIBUTE", TRIVIA_ATTRIBUTE),
        group_attribute=os.getenv("BIOBUDDY_GROUP_ATTRIBUTE", GROUP_ATTRIBUTE),
    )
