import pytest

from biobuddy.backend.errors import StateError, ValidationError
from biobuddy.backend.match import NOT_YOUR_TURN, MatchRoom
from biobuddy.backend.models import Question, RoomState, Team


def _room_in_state(store, make_rng, target: RoomState, rolls=(5, 2)) -> MatchRoom:
    room = MatchRoom.create(code="B123", owner_id="red-1", display_name="Red", store=store)
    if target is RoomState.WAITING:
        return room
    room.join("blue-1", "Blue", store)
    if target is RoomState.CHOOSING:
        return room
    room.set_secret("red-1", "Lion", store)
    room.set_secret("blue-1", "Owl", store)
    if target is RoomState.ROLLING:
        return room
    rng = make_rng(rolls=list(rolls))
    room.roll("red-1", rng=rng)
    room.roll("blue-1", rng=rng)
    return room


def test_create_puts_owner_on_red_with_full_candidates(store) -> None:
    room = MatchRoom.create(code="B123", owner_id="red-1", display_name="Red", store=store)

    assert room.state is RoomState.WAITING
    assert room.players[Team.RED].participant_id == "red-1"
    assert room.players[Team.RED].remaining_animals == store.all_animals()
    assert Team.BLUE not in room.players


def test_join_moves_room_to_choosing(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.CHOOSING)

    assert room.state is RoomState.CHOOSING
    assert room.players[Team.BLUE].remaining_animals == store.all_animals()


def test_join_rejects_full_room(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.CHOOSING)

    with pytest.raises(ValidationError):
        room.join("third", "Third", store)


def test_set_secret_requires_known_animal(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.CHOOSING)

    with pytest.raises(ValidationError):
        room.set_secret("red-1", "Unicorn", store)

    assert room.players[Team.RED].secret_animal is None
    assert room.state is RoomState.CHOOSING


def test_set_secret_before_opponent_joins_is_rejected(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.WAITING)

    with pytest.raises(StateError):
        room.set_secret("red-1", "Lion", store)


def test_both_secrets_move_room_to_rolling(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.CHOOSING)

    first = room.set_secret("red-1", "lion", store)
    second = room.set_secret("blue-1", "Owl", store)

    assert first.both_ready is False
    assert second.both_ready is True
    assert room.state is RoomState.ROLLING
    assert room.players[Team.RED].secret_animal == "Lion"


def test_roll_higher_score_starts(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.ROLLING)
    rng = make_rng(rolls=[2, 6])

    first = room.roll("red-1", rng=rng)
    second = room.roll("blue-1", rng=rng)

    assert first.starting_team is None
    assert second.starting_team is Team.BLUE
    assert room.current_turn is Team.BLUE
    assert room.state is RoomState.PLAYING


def test_roll_tie_goes_to_red(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING, rolls=(3, 3))

    assert room.current_turn is Team.RED


def test_roll_twice_is_rejected(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.ROLLING)
    rng = make_rng(rolls=[4, 1])
    room.roll("red-1", rng=rng)

    with pytest.raises(StateError):
        room.roll("red-1", rng=rng)

    assert room.players[Team.RED].dice_score == 4
    assert room.state is RoomState.ROLLING


def test_out_of_turn_actions_are_rejected_without_mutation(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)

    for action in (
        lambda: room.request_hint("blue-1", store),
        lambda: room.answer("blue-1", True, store),
        lambda: room.guess("blue-1", "Lion", store),
    ):
        with pytest.raises(StateError) as excinfo:
            action()
        assert excinfo.value.message == NOT_YOUR_TURN

    assert room.current_turn is Team.RED
    assert room.last_question is None
    assert room.state is RoomState.PLAYING


def test_answer_without_pending_question_is_rejected(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)

    with pytest.raises(StateError):
        room.answer("red-1", True, store)


def test_hint_uses_own_candidates_and_overwrites_pending(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)
    room.players[Team.RED].remaining_animals = frozenset({"Lion", "Shark"})
    room.last_question = Question(attribute="nocturnal", expected="yes")

    result = room.request_hint("red-1", store)

    assert result.question == Question(attribute="fur", expected="yes")
    assert room.last_question == result.question


def test_answer_filters_actor_candidates_and_flips_turn(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)
    room.request_hint("red-1", store)

    result = room.answer("red-1", True, store)

    assert result.remaining == {"Owl", "Bat"}
    assert result.eliminated == {"Lion", "Shark"}
    assert room.players[Team.RED].remaining_animals == {"Owl", "Bat"}
    assert room.players[Team.BLUE].remaining_animals == store.all_animals()
    assert room.current_turn is Team.BLUE
    assert room.last_question is None


def test_correct_guess_ends_match(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)

    result = room.guess("red-1", "owl", store)

    assert result.correct is True
    assert room.state is RoomState.GAMEOVER
    assert room.closed is True
    with pytest.raises(StateError):
        room.check("blue-1", "fur", store)


def test_wrong_guess_grants_opponent_one_bonus_turn(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)

    result = room.guess("red-1", "Shark", store)

    assert result.correct is False
    assert room.turn_bonus == 1
    assert room.current_turn is Team.BLUE

    room.request_hint("blue-1", store)
    first = room.answer("blue-1", False, store)

    assert first.bonus_used is True
    assert room.turn_bonus == 0
    assert room.current_turn is Team.BLUE

    room.request_hint("blue-1", store)
    second = room.answer("blue-1", True, store)

    assert second.bonus_used is False
    assert room.current_turn is Team.RED


def test_unknown_guess_is_rejected_without_penalty(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)

    with pytest.raises(ValidationError):
        room.guess("red-1", "Unicorn", store)

    assert room.turn_bonus == 0
    assert room.current_turn is Team.RED


def test_check_queries_own_secret_in_any_state(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.CHOOSING)
    with pytest.raises(StateError):
        room.check("blue-1", "fly", store)

    room.set_secret("blue-1", "Owl", store)

    assert room.check("blue-1", "fly", store) == "can fly"
    assert room.check("blue-1", "water", store) is None
    assert room.state is RoomState.CHOOSING


def test_check_is_allowed_out_of_turn(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)

    assert room.check("blue-1", "feather", store) == "feathers"
    assert room.current_turn is Team.RED


def test_non_member_is_rejected(store, make_rng) -> None:
    room = _room_in_state(store, make_rng, RoomState.PLAYING)

    with pytest.raises(StateError):
        room.request_hint("stranger", store)
