"""Snapshot builders for what one participant may see of a game."""

from __future__ import annotations

from typing import Any

from biobuddy.backend.match import MatchRoom, Player
from biobuddy.backend.models import RoomState
from biobuddy.backend.solo import SoloSession, solo_score


def _player_view(player: Player, reveal_secret: bool) -> dict[str, Any]:
    return {
        "displayName": player.display_name,
        "team": player.team.value,
        "hasSecret": player.secret_animal is not None,
        "secretAnimal": player.secret_animal if reveal_secret else None,
        "remainingCount": len(player.remaining_animals),
        "hasRolled": player.has_rolled,
        "diceScore": player.dice_score if player.has_rolled else None,
    }


def build_room_view(room: MatchRoom, participant_id: str) -> dict[str, Any]:
    """Return the room as seen by ``participant_id``.

    The opponent's secret stays hidden until the game is over; only the
    viewer's own candidate list is included.
    """
    viewer = room.player_for(participant_id)
    game_over = room.state is RoomState.GAMEOVER
    players = {
        team.value: _player_view(player, reveal_secret=game_over or player is viewer)
        for team, player in room.players.items()
    }
    question = room.last_question
    return {
        "code": room.code,
        "state": room.state.value,
        "team": viewer.team.value,
        "currentTurn": room.current_turn.value if room.current_turn else None,
        "turnBonus": room.turn_bonus,
        "lastQuestion": {"attribute": question.attribute, "expected": question.expected} if question else None,
        "players": players,
        "remainingAnimals": sorted(viewer.remaining_animals),
    }


def build_solo_view(session: SoloSession) -> dict[str, Any]:
    return {
        "status": session.status,
        "questionsAsked": session.questions_asked,
        "potentialScore": solo_score(session.questions_asked),
    }
