"""
Game error types.

Every rejection raised by the solo and match handlers derives from GameError
so the dispatcher can turn it into a direct reply without mutating state.
"""


class GameError(Exception):
    """Base class for rejections surfaced to the acting participant."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Unknown animal, malformed room code, room not found or full."""
    pass


class StateError(GameError):
    """Action is not valid for the current session or room state."""
    pass


class NotFoundError(GameError):
    """Participant has no active session or room where one is required."""
    pass


class DatasetError(Exception):
    """Animal dataset could not be loaded. Raised at startup only."""
    pass
