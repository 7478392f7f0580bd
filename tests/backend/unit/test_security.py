import pytest

from biobuddy.backend.errors import ValidationError
from biobuddy.backend.security import (
    MAX_ROOM_CODE_LENGTH,
    ROOM_CODE_ALPHABET,
    check_room_code_length,
    generate_room_code,
    normalize_room_code,
)


def test_generate_room_code_uses_uppercase_alphanumerics() -> None:
    code = generate_room_code()

    assert len(code) == 4
    assert all(char in ROOM_CODE_ALPHABET for char in code)


def test_generate_room_code_honours_length() -> None:
    assert len(generate_room_code(6)) == 6


def test_normalize_room_code_trims_and_uppercases() -> None:
    assert normalize_room_code("  b123 ") == "B123"


@pytest.mark.parametrize("raw", [None, "", "ab", "B12-", "TOOLONGCODE"])
def test_normalize_room_code_rejects_malformed(raw) -> None:
    with pytest.raises(ValidationError):
        normalize_room_code(raw)


@pytest.mark.parametrize("length", [4, MAX_ROOM_CODE_LENGTH])
def test_generated_codes_at_length_bounds_are_joinable(length) -> None:
    code = generate_room_code(check_room_code_length(length))

    assert normalize_room_code(code.lower()) == code


@pytest.mark.parametrize("length", [0, 3, MAX_ROOM_CODE_LENGTH + 1])
def test_check_room_code_length_rejects_unjoinable_lengths(length) -> None:
    with pytest.raises(ValueError):
        check_room_code_length(length)
