"""
Domain events: what the session wants the outside world to know after handling a request.

The session does no I/O itself. It returns these, and the service layer delivers them.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional


class EventType(StrEnum):
    GAME_JOINED = "gameJoined"
    SPECTATOR_JOINED = "spectatorJoined"
    GAME_START = "gameStart"
    MOVE_MADE = "moveMade"
    GAME_OVER = "gameOver"
    BOARD_RESET = "boardReset"
    BOARD_CLEARED = "boardCleared"
    PLAYER_DISCONNECTED = "playerDisconnected"


@dataclass(frozen=True)
class SessionEvent:
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    # None means: everyone in the session (players and spectators)
    recipient: Optional[str] = None

    @property
    def is_broadcast(self) -> bool:
        return self.recipient is None
