"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Self

from src.chess.square import BOARD_DIMENSIONS, Square


class CastlingDirection(Enum):
    """Direction the king travels in. Values are the files on which the rook must be waiting."""

    KING_SIDE = BOARD_DIMENSIONS[0]
    QUEEN_SIDE = 1


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: The king jumps two files towards the rook, and the rook lands on the square the king jumped over.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: makes tests and constants more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)


def is_castling_shape(king_from: Square, king_to: Square) -> bool:
    """Exactly two files sideways, staying on the same rank"""
    return king_from.rank == king_to.rank and abs(king_to.file - king_from.file) == 2


def castling_squares(king_from: Square, king_to: Square) -> Optional[CastlingSquares]:
    """
    Work out which rook takes part in a castling move of the king (None if the king move does not have the castling shape).

    NOTE: The king does not need to stand on the e-file; the rook is always the one in the corner the king travels towards.
    """
    if not is_castling_shape(king_from, king_to):
        return None
    step = 1 if king_to.file > king_from.file else -1
    corner_file = (
        CastlingDirection.KING_SIDE.value if step > 0 else CastlingDirection.QUEEN_SIDE.value
    )
    return CastlingSquares(
        king_from=king_from,
        king_to=king_to,
        rook_from=Square(corner_file, king_from.rank),
        rook_to=king_from.offset(step, 0),
    )


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same rank (both ends excluded)

    Needed for checking if you can still castle (the Board will check which of those are empty etc.)
    """
    if from_square.rank != to_square.rank:
        raise ValueError(
            f"squares_between_on_rank requires both squares to lie on the same rank. \n from: {from_square}\n to:{to_square}"
        )
    low, high = sorted((from_square.file, to_square.file))
    return [Square(file, from_square.rank) for file in range(low + 1, high)]
