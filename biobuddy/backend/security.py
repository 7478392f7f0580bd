"""Room code helpers."""

from __future__ import annotations

import re
import secrets
import string

from biobuddy.backend.errors import ValidationError


ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 4
MIN_ROOM_CODE_LENGTH = 4
MAX_ROOM_CODE_LENGTH = 8
_ROOM_CODE_RE = re.compile(rf"^[A-Z0-9]{{{MIN_ROOM_CODE_LENGTH},{MAX_ROOM_CODE_LENGTH}}}$")


def check_room_code_length(length: int) -> int:
    """Reject code lengths that joining players could not type back in."""
    if not MIN_ROOM_CODE_LENGTH <= length <= MAX_ROOM_CODE_LENGTH:
        raise ValueError(
            f"Room code length must be between {MIN_ROOM_CODE_LENGTH} and {MAX_ROOM_CODE_LENGTH}, got {length}"
        )
    return length


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """Generate a short uppercase alphanumeric room code."""
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def normalize_room_code(raw_code: str | None) -> str:
    """Trim and uppercase a typed room code, rejecting malformed input."""
    code = (raw_code or "").strip().upper()
    if not _ROOM_CODE_RE.match(code):
        raise ValidationError(f"'{raw_code or ''}' is not a valid room code")
    return code
