"""
Move history, as far as castling is concerned: has the piece standing on a square ever moved?

Every piece on the board when the game (re)starts gets a stable identity, and the table follows that identity
from square to square as moves are accepted. This way two rooks passing through the same square cannot be confused.
"""

from dataclasses import dataclass
from itertools import count

from src.chess.board import Board
from src.chess.pieces import Piece
from src.chess.square import Square


@dataclass
class TrackedPiece:
    identity: int
    piece: Piece
    has_moved: bool = False


class MoveHistory:
    def __init__(self, board: Board) -> None:
        self._ids = count(1)
        self._occupants: dict[Square, TrackedPiece] = {}
        self.reset(board)

    def reset(self, board: Board) -> None:
        """Forget everything: each piece on the board starts out as never having moved."""
        self._occupants = {
            square: TrackedPiece(next(self._ids), piece) for square, piece in board
        }

    def tracked(self, square: Square) -> TrackedPiece | None:
        return self._occupants.get(square)

    def record_move(self, piece: Piece, from_square: Square, to_square: Square) -> None:
        """
        The piece on from_square went to to_square.
        Whatever was standing on to_square got captured, so its identity disappears.
        """
        self._occupants.pop(to_square, None)
        moving = self._occupants.pop(from_square, None)
        if moving is None:
            # Not seen before (ex. placed by a client on a cleared board): it enters the table now
            moving = TrackedPiece(next(self._ids), piece)
        moving.has_moved = True
        # a promoted pawn keeps its identity
        moving.piece = piece
        self._occupants[to_square] = moving

    def record_moved(self, piece: Piece, square: Square) -> None:
        """Mark the piece on the square as moved (no relocation), ex. a rook about to take part in castling."""
        tracked = self._occupants.get(square)
        if tracked is None:
            self._occupants[square] = TrackedPiece(next(self._ids), piece, has_moved=True)
        elif tracked.piece == piece:
            tracked.has_moved = True

    def has_moved(self, square: Square, board: Board) -> bool:
        """
        Has the piece the board reports on this square moved before?

        * nothing tracked on that square -> a piece we have never seen move: False
        * the tracked piece matches the board -> its flag
        * the board shows a different piece than we tracked -> we cannot vouch for it: True
        """
        tracked = self._occupants.get(square)
        if tracked is None:
            return False
        if tracked.piece != board.piece(square):
            return True
        return tracked.has_moved
