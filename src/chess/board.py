"""The Board is an immutable snapshot of the `position` (in chess: the configuration of pieces on the board)"""

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional, Self

from src.chess.pieces import Piece
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidPositionError

# Wire shorthands for the two special positions
START = "start"
EMPTY = "empty"

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

WirePosition = str | Mapping[str, str]


@dataclass(frozen=True)
class Board:
    """
    Partial mapping from square to piece: empty squares are simply absent.

    NOTE: Never mutated. Every change produces a new Board, so a snapshot handed out can never change underneath the reader.
    """

    position: Mapping[Square, Piece] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> Self:
        return cls({})

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the board part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        """
        position: dict[Square, Piece] = {}
        for rank_idx, fen_one_rank in enumerate(fen_str.split("/")):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 1
            for character in fen_one_rank:
                if character.isalpha():
                    position[Square(file, rank)] = Piece.from_fen(character)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return cls(position)

    @classmethod
    def from_wire(cls, wire: WirePosition) -> Self:
        """
        Parse the position as sent by clients: either one of the shorthands 'start' / 'empty',
        or a mapping like {"e4": "wP", "e8": "bK"}.
        """
        if isinstance(wire, str):
            if wire == START:
                return cls.starting_position()
            if wire == EMPTY:
                return cls.empty()
            raise InvalidPositionError(f"Unknown position shorthand: {wire!r}")

        if not isinstance(wire, Mapping):
            raise InvalidPositionError(f"Cannot interpret {wire!r} as a position.")
        position: dict[Square, Piece] = {}
        for square_name, code in wire.items():
            if not isinstance(square_name, str) or not isinstance(code, str):
                raise InvalidPositionError(
                    f"Cannot interpret {square_name!r}: {code!r} as a square/piece pair."
                )
            position[Square.from_algebraic(square_name)] = Piece.from_code(code)
        return cls(position)

    def to_wire(self) -> dict[str, str]:
        return {
            square.to_algebraic(): piece.to_code()
            for square, piece in sorted(
                self.position.items(), key=lambda item: (item[0].rank, item[0].file)
            )
        }

    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def is_occupied(self, square: Square) -> bool:
        return square in self.position

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(self.is_occupied(square) for square in squares)

    def move_piece(
        self, from_square: Square, to_square: Square, placed: Optional[Piece] = None
    ) -> Self:
        """
        New board with the piece on from_square moved onto to_square (capturing whatever stood there).
        `placed` replaces the piece that lands, which is how a promotion ends up on the board.
        """
        position = dict(self.position)
        moving = position.pop(from_square, None)
        if moving is None:
            raise InvalidPositionError(f"No piece on {from_square} to move.")
        position[to_square] = placed if placed is not None else moving
        return type(self)(position)

    def __iter__(self) -> Iterator[tuple[Square, Piece]]:
        return iter(self.position.items())

    def __len__(self) -> int:
        return len(self.position)
