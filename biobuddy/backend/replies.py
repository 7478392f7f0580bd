"""Reply text and suggested actions for the dispatcher."""

from __future__ import annotations

from typing import Iterable

from biobuddy.backend.attributes import AttributeStore
from biobuddy.backend.models import Message, Question, Team

HOME_ACTIONS = ("Practice", "Create room", "Join room", "Rules")
SOLO_ACTIONS = ("Hint", "Guess", "End game")
ANSWER_ACTIONS = ("Yes", "No")
TURN_ACTIONS = ("Hint", "Guess")
ROLL_ACTIONS = ("Roll",)
MAX_LISTED_ANIMALS = 10

RULES_TEXT = "\n".join(
    [
        "BioBuddy rules",
        "Practice: I pick a secret animal. Ask about traits or ask for a hint,",
        "then guess. You start with 100 points and lose 5 for every question",
        "or wrong guess.",
        "Match: two teams each pick a secret animal and roll a die; the higher",
        "roll starts (red wins ties). On your turn ask for a hint, put the",
        "question to your opponent and enter their yes/no answer to narrow",
        "your candidates, or guess their animal.",
        "A wrong guess hands the turn over and gives your opponent one extra",
        "turn. First correct guess wins.",
    ]
)


def _format_lines(lines: Iterable[str | None]) -> str:
    return "\n".join(line.rstrip() for line in lines if line is not None)


def team_label(team: Team) -> str:
    return f"{team.value.capitalize()} team"


def question_text(question: Question) -> str:
    return f"Does your animal have the trait '{question.attribute}'?"


def animal_list(animals: Iterable[str]) -> str:
    names = sorted(animals)
    if len(names) > MAX_LISTED_ANIMALS:
        shown = ", ".join(names[:MAX_LISTED_ANIMALS])
        return f"{shown} and {len(names) - MAX_LISTED_ANIMALS} more"
    return ", ".join(names)


def rules_message() -> Message:
    return Message(text=RULES_TEXT, quick_replies=HOME_ACTIONS)


def home_message(in_game: bool = False) -> Message:
    if in_game:
        return Message(
            text="You have a game in progress. Carry on, or end it to go back to the menu.",
            quick_replies=("End game", "Rules"),
        )
    return Message(
        text="Welcome to BioBuddy! Practice against me or challenge a friend.",
        quick_replies=HOME_ACTIONS,
    )


def info_message(store: AttributeStore, animal: str) -> Message:
    attributes = store.attributes(animal)
    group = attributes.get(store.group_attribute)
    trivia = attributes.get(store.trivia_attribute)
    return Message(
        text=_format_lines(
            [
                animal,
                f"Group: {group}" if group is not None else None,
                attributes.get(store.description_attribute),
                f"Did you know? {trivia}" if trivia is not None else None,
            ]
        )
    )


def error_message(text: str) -> Message:
    return Message(text=text)
