"""Defines the types of chess pieces, and how they are written down on the wire (ex. 'wK' for the white king)"""

from dataclasses import dataclass
from typing import Self

from src.core.exceptions import InvalidPositionError
from src.core.shared_types import Color, PieceType

CODE_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_CODE: dict[PieceType, str] = {value: key for key, value in CODE_TO_PIECE.items()}

CODE_TO_COLOR: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
COLOR_TO_CODE: dict[Color, str] = {value: key for key, value in CODE_TO_COLOR.items()}


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @classmethod
    def from_code(cls, code: str) -> Self:
        """
        Two characters: first the color ('w'/'b'), then the piece letter.
        The letter is accepted in either case, as the UI layer is not consistent about it.
        """
        if len(code) != 2:
            raise InvalidPositionError(f"Cannot interpret {code!r} as a piece.")
        color_char, type_char = code[0], code[1].lower()
        if color_char not in CODE_TO_COLOR or type_char not in CODE_TO_PIECE:
            raise InvalidPositionError(f"Cannot interpret {code!r} as a piece.")
        return cls(CODE_TO_PIECE[type_char], CODE_TO_COLOR[color_char])

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        return cls(CODE_TO_PIECE[character.lower()], color)

    def to_code(self) -> str:
        return f"{COLOR_TO_CODE[self.color]}{PIECE_TO_CODE[self.type].upper()}"

    def promote_to(self, new_type: PieceType) -> "Piece":
        """Pieces are immutable, so promotion hands back a new piece of the same color"""
        return Piece(new_type, self.color)

    def __str__(self) -> str:
        return self.to_code()
