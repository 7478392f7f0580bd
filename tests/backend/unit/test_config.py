import pytest

from biobuddy.backend.config import SAMPLE_ANIMAL_DATA, load_settings


def test_load_settings_reads_expected_env(monkeypatch) -> None:
    monkeypatch.setenv("BIOBUDDY_ANIMAL_DATA", "/data/animals.json")
    monkeypatch.setenv("BIOBUDDY_HOST", "0.0.0.0")
    monkeypatch.setenv("BIOBUDDY_PORT", "9000")
    monkeypatch.setenv("BIOBUDDY_LOG_LEVEL", "debug")
    monkeypatch.setenv("BIOBUDDY_ROOM_CODE_LENGTH", "6")
    monkeypatch.setenv("BIOBUDDY_IDLE_TTL_SEC", "3600")
    monkeypatch.setenv("BIOBUDDY_YES_MARKER", "Y")
    monkeypatch.setenv("BIOBUDDY_DESCRIPTION_ATTRIBUTE", "ลักษณะเด่น")
    monkeypatch.setenv("BIOBUDDY_TRIVIA_ATTRIBUTE", "สาระน่ารู้")
    monkeypatch.setenv("BIOBUDDY_GROUP_ATTRIBUTE", "ไฟลัม")

    settings = load_settings()

    assert settings.animal_data_path == "/data/animals.json"
    assert settings.host == "0.0.0.0"
    assert settings.port == 9000
    assert settings.log_level == "DEBUG"
    assert settings.room_code_length == 6
    assert settings.idle_ttl_sec == 3600
    assert settings.yes_marker == "Y"
    assert settings.description_attribute == "ลักษณะเด่น"
    assert settings.trivia_attribute == "สาระน่ารู้"
    assert settings.group_attribute == "ไฟลัม"


def test_load_settings_applies_defaults(monkeypatch) -> None:
    for name in (
        "BIOBUDDY_ANIMAL_DATA",
        "BIOBUDDY_HOST",
        "BIOBUDDY_PORT",
        "BIOBUDDY_LOG_LEVEL",
        "BIOBUDDY_ROOM_CODE_LENGTH",
        "BIOBUDDY_IDLE_TTL_SEC",
        "BIOBUDDY_YES_MARKER",
        "BIOBUDDY_DESCRIPTION_ATTRIBUTE",
        "BIOBUDDY_TRIVIA_ATTRIBUTE",
        "BIOBUDDY_GROUP_ATTRIBUTE",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.animal_data_path == str(SAMPLE_ANIMAL_DATA)
    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.log_level == "INFO"
    assert settings.room_code_length == 4
    assert settings.idle_ttl_sec == 0
    assert settings.yes_marker == "yes"
    assert settings.description_attribute == "Description"
    assert settings.trivia_attribute == "Trivia"
    assert settings.group_attribute == "Phylum"


@pytest.mark.parametrize("length", ["3", "10"])
def test_load_settings_rejects_room_code_length_outside_join_range(monkeypatch, length) -> None:
    monkeypatch.setenv("BIOBUDDY_ROOM_CODE_LENGTH", length)

    with pytest.raises(ValueError):
        load_settings()
