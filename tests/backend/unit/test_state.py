from biobuddy.backend.match import MatchRoom
from biobuddy.backend.solo import SoloSession
from biobuddy.backend.state import build_room_view, build_solo_view


def _playing_room(store, make_rng) -> MatchRoom:
    room = MatchRoom.create(code="B123", owner_id="red-1", display_name="Red", store=store)
    room.join("blue-1", "Blue", store)
    room.set_secret("red-1", "Lion", store)
    room.set_secret("blue-1", "Owl", store)
    rng = make_rng(rolls=[5, 2])
    room.roll("red-1", rng=rng)
    room.roll("blue-1", rng=rng)
    return room


def test_room_view_hides_opponent_secret(store, make_rng) -> None:
    room = _playing_room(store, make_rng)

    view = build_room_view(room, "red-1")

    assert view["code"] == "B123"
    assert view["state"] == "playing"
    assert view["team"] == "red"
    assert view["currentTurn"] == "red"
    assert view["players"]["red"]["secretAnimal"] == "Lion"
    assert view["players"]["blue"]["secretAnimal"] is None
    assert view["players"]["blue"]["hasSecret"] is True
    assert view["players"]["blue"]["diceScore"] == 2
    assert view["remainingAnimals"] == ["Bat", "Lion", "Owl", "Shark"]


def test_room_view_reveals_secrets_after_game_over(store, make_rng) -> None:
    room = _playing_room(store, make_rng)
    room.guess("red-1", "Owl", store)

    view = build_room_view(room, "red-1")

    assert view["state"] == "gameover"
    assert view["players"]["blue"]["secretAnimal"] == "Owl"


def test_room_view_includes_pending_question(store, make_rng) -> None:
    room = _playing_room(store, make_rng)
    room.request_hint("red-1", store)

    view = build_room_view(room, "blue-1")

    assert view["lastQuestion"] == {"attribute": "can fly", "expected": "yes"}
    assert view["players"]["red"]["secretAnimal"] is None


def test_solo_view_reports_potential_score() -> None:
    session = SoloSession(owner_id="u1", secret_animal="Lion", questions_asked=4)

    view = build_solo_view(session)

    assert view == {"status": "active", "questionsAsked": 4, "potentialScore": 80}
