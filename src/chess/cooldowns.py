"""
Cooldowns: after a piece moves it has to rest on its new square for a while before it may move again.

Instants are epoch milliseconds (ints), as that is what clients receive on the wire.
"""

import time
from typing import Callable

from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import PieceType

Clock = Callable[[], int]

COOLDOWN_MS: dict[PieceType, int] = {
    PieceType.PAWN: 2000,
    PieceType.KNIGHT: 3000,
    PieceType.BISHOP: 3000,
    PieceType.ROOK: 3000,
    PieceType.KING: 4000,
    PieceType.QUEEN: 5000,
}


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def cooldown_duration(piece: Piece) -> int:
    return COOLDOWN_MS[piece.type]


class CooldownTable:
    """
    Square -> instant at which the piece standing there may move again.

    Entries are never evicted in the background. A square is locked while its expiry lies in the future;
    anything older is inert and gets dropped whenever the table is read.
    """

    def __init__(self) -> None:
        self._expiries: dict[Square, int] = {}

    def is_locked(self, square: Square, now: int) -> bool:
        expiry = self._expiries.get(square)
        return expiry is not None and now < expiry

    def expiry(self, square: Square) -> int | None:
        return self._expiries.get(square)

    def lock(self, square: Square, piece: Piece, now: int) -> int:
        """Lock the square for the duration belonging to the piece that just landed on it. Overwrites any previous lock."""
        expiry = now + cooldown_duration(piece)
        self._expiries[square] = expiry
        return expiry

    def release(self, square: Square) -> None:
        """The piece left the square: whatever lock it had no longer applies to anything"""
        self._expiries.pop(square, None)

    def entries(self, now: int) -> list[tuple[Square, int]]:
        """Active locks, in the order they were set. Expired entries are dropped on the way."""
        self._drop_expired(now)
        return list(self._expiries.items())

    def clear(self) -> None:
        self._expiries.clear()

    def _drop_expired(self, now: int) -> None:
        expired = [square for square, expiry in self._expiries.items() if expiry <= now]
        for square in expired:
            del self._expiries[square]

    def __len__(self) -> int:
        return len(self._expiries)
