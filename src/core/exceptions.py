"""
Custom exceptions.

Every rejection a participant can trigger derives from GameError, so the protocol layer can turn any of them into
a direct reply without crashing the session.
"""


class GameError(Exception):
    """Top-level exception for anything going wrong while playing."""


class InvalidMoveError(GameError):
    """The move does not follow the movement rules of the piece."""


class CooldownActiveError(InvalidMoveError):
    """The piece on the source square is still cooling down."""


class WrongSeatError(GameError):
    """The participant tried to move a piece of the other color (or is not seated at all)."""


# There are no turns with cooldowns, moving a piece of the other color is what "not your turn" means here
NotYourTurnError = WrongSeatError


class GameStateError(GameError):
    """The session is in a state that does not allow the request (not started yet, already ended, ...)."""


class UnknownSessionError(GameError):
    """The participant is not associated with any session."""


class InvalidPositionError(GameError):
    """A board snapshot could not be parsed."""


class InvalidRequestError(GameError):
    """A message from a participant is malformed."""
