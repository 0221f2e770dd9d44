"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import InvalidPositionError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)


def sign(value: int) -> int:
    return (value > 0) - (value < 0)


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        # ASCII only: isdigit() also accepts "²", which int() cannot parse
        if len(sq) != 2 or not sq.isascii() or not sq[0].isalpha() or not sq[1].isdigit():
            raise InvalidPositionError(f"Cannot interpret {sq!r} as a square name.")
        square = cls(ord(sq[0].lower()) - ord("a") + 1, int(sq[1]))
        if not square.is_within_bounds():
            raise InvalidPositionError(f"Square {sq!r} is not on the board.")
        return square

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        return Square(self.file + df, self.rank + dr)

    def step_toward(self, other: Square) -> tuple[int, int]:
        """Unit step (sign of the file and rank difference) that leads from this square towards the other one."""
        return sign(other.file - self.file), sign(other.rank - self.rank)

    def __str__(self) -> str:
        return self.to_algebraic()
