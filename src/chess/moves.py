"""
Movement rules: can the piece on one square go to another square, given a snapshot of the board?

Everything in here is a pure function of its arguments. There is no notion of time, turns or players;
cooldowns and seats are enforced by the session.

There is no check detection in this variant: the game ends when a king actually gets taken.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.chess.board import Board
from src.chess.castling import (
    CastlingSquares,
    castling_squares,
    squares_between_on_rank,
)
from src.chess.pieces import Piece
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.shared_types import Color, PieceType

# Type alias for moving across the board: (delta_file, delta_rank)
Vector = tuple[int, int]


@dataclass(frozen=True)
class Move:
    from_square: Square
    to_square: Square

    @property
    def delta(self) -> Vector:
        return (
            self.to_square.file - self.from_square.file,
            self.to_square.rank - self.from_square.rank,
        )


class CastlingRights(Protocol):
    """Anything that can tell whether the piece on a square has moved before (see src/chess/history.py)"""

    def has_moved(self, square: Square, board: Board) -> bool: ...


class _NothingMoved:
    """Used when no history is supplied: every piece is assumed to still be on its original square."""

    def has_moved(self, square: Square, board: Board) -> bool:
        return False


NO_HISTORY: CastlingRights = _NothingMoved()


# --- PATH TRACING ---
def squares_between(from_square: Square, to_square: Square) -> list[Square]:
    """
    Walk from one square to the other, one step at a time, and collect the squares passed on the way (both ends excluded).
    Only defined for squares on a common rank, file or diagonal.
    """
    df, dr = Move(from_square, to_square).delta
    if not (df == 0 or dr == 0 or abs(df) == abs(dr)):
        raise ValueError(
            f"No straight path between {from_square} and {to_square}: not on the same rank, file or diagonal."
        )
    step_file, step_rank = from_square.step_toward(to_square)
    squares: list[Square] = []
    square = from_square.offset(step_file, step_rank)
    while square != to_square:
        squares.append(square)
        square = square.offset(step_file, step_rank)
    return squares


def is_path_blocked(board: Board, from_square: Square, to_square: Square) -> bool:
    """True if any square strictly in between the two squares holds a piece"""
    return board.is_any_occupied(squares_between(from_square, to_square))


# --- MOVEMENT RULES (geometry + occupancy per piece type) ---
def is_straight(move: Move) -> bool:
    df, dr = move.delta
    return df == 0 or dr == 0


def is_diagonal(move: Move) -> bool:
    df, dr = move.delta
    return abs(df) == abs(dr)


def pawn_direction(color: Color) -> int:
    """white moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_home_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def is_legal_pawn_move(
    move: Move, piece: Piece, board: Board, history: CastlingRights
) -> bool:
    """
    Pawns
    ----
    * push one square forward onto an empty square
    * push two squares forward from their home rank, if both squares are empty
    * take diagonally forward, but only when there is something to take (pawns never take straight ahead)
    """
    df, dr = move.delta
    forward = pawn_direction(piece.color)
    target_occupied = board.is_occupied(move.to_square)

    if abs(df) == 1 and dr == forward:
        return target_occupied

    if df != 0 or target_occupied:
        return False
    if dr == forward:
        return True
    if dr == 2 * forward and move.from_square.rank == pawn_home_rank(piece.color):
        return not is_path_blocked(board, move.from_square, move.to_square)
    return False


def is_legal_knight_move(
    move: Move, piece: Piece, board: Board, history: CastlingRights
) -> bool:
    """Knights always move such that |delta_rank| + |delta_file| = 3 (and jump over anything in between)"""
    df, dr = move.delta
    return {abs(df), abs(dr)} == {1, 2}


def is_legal_bishop_move(
    move: Move, piece: Piece, board: Board, history: CastlingRights
) -> bool:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return is_diagonal(move) and not is_path_blocked(
        board, move.from_square, move.to_square
    )


def is_legal_rook_move(
    move: Move, piece: Piece, board: Board, history: CastlingRights
) -> bool:
    """Rooks move either horizontally or vertically"""
    return is_straight(move) and not is_path_blocked(
        board, move.from_square, move.to_square
    )


def is_legal_queen_move(
    move: Move, piece: Piece, board: Board, history: CastlingRights
) -> bool:
    """The Queen combines the rook moves and the bishop moves"""
    return (is_straight(move) or is_diagonal(move)) and not is_path_blocked(
        board, move.from_square, move.to_square
    )


def is_legal_king_move(
    move: Move, piece: Piece, board: Board, history: CastlingRights
) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move: two files sideways.
    """
    df, dr = move.delta
    if abs(df) <= 1 and abs(dr) <= 1:
        return True
    return is_legal_castling_move(move, piece, board, history)


def is_legal_castling_move(
    move: Move, piece: Piece, board: Board, history: CastlingRights
) -> bool:
    """
    **you are allowed to castle if**

    * the king has never moved
    * your own rook stands in the corner the king is travelling towards, and it has never moved either
    * every square in between the king and that rook is empty

    NOTE: In this variant there is no check, so squares being attacked do not matter.
    """
    squares = castling_squares(move.from_square, move.to_square)
    if squares is None:
        return False
    if history.has_moved(squares.king_from, board):
        return False
    if board.piece(squares.rook_from) != Piece(PieceType.ROOK, piece.color):
        return False
    if history.has_moved(squares.rook_from, board):
        return False
    path = squares_between_on_rank(squares.king_from, squares.rook_from)
    return not board.is_any_occupied(path)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
IsLegalMoveFn = Callable[[Move, Piece, Board, CastlingRights], bool]
MOVEMENT_RULES: dict[PieceType, IsLegalMoveFn] = {
    PieceType.PAWN: is_legal_pawn_move,
    PieceType.KNIGHT: is_legal_knight_move,
    PieceType.BISHOP: is_legal_bishop_move,
    PieceType.ROOK: is_legal_rook_move,
    PieceType.QUEEN: is_legal_queen_move,
    PieceType.KING: is_legal_king_move,
}


def is_legal(
    board: Board,
    source: Square,
    target: Square,
    piece: Piece,
    history: Optional[CastlingRights] = None,
) -> bool:
    """
    Can `piece`, standing on `source`, go to `target` on this board?
    ----

    1. Staying put, or leaving the board, is never a move.
    2. You cannot land on your own pieces.
    3. The piece's own movement rule decides the rest.

    Landing on the opponent's king is just a capture as far as the geometry is concerned (a pawn still has to take it diagonally),
    but it ends the game. See `is_king_capture()`.
    """
    if source == target:
        return False
    if not (source.is_within_bounds() and target.is_within_bounds()):
        return False

    target_piece = board.piece(target)
    if target_piece is not None and target_piece.color == piece.color:
        return False

    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(Move(source, target), piece, board, history or NO_HISTORY)


def is_king_capture(board: Board, target: Square, piece: Piece) -> bool:
    """Does moving `piece` onto `target` take the opponent's king? (board is the snapshot BEFORE the move)"""
    return board.piece(target) == Piece(PieceType.KING, piece.color.opponent)


# -- PAWN PROMOTION --
def promotes(piece: Piece, to_square: Square) -> bool:
    """A pawn reaching the final rank (as seen from its own side)"""
    last_rank = BOARD_DIMENSIONS[1] if piece.color == Color.WHITE else 1
    return piece.type == PieceType.PAWN and to_square.rank == last_rank


# -- RESULTING POSITION --
def apply_move(board: Board, move: Move) -> Board:
    """
    The board after the move has been played
    ----

    * the moving piece lands on the target square (taking whatever was there)
    * a pawn reaching the final rank turns into a queen
    * a castling king brings its rook along to the square it jumped over

    NOTE: Does not check legality. Call `is_legal()` first.
    """
    moving = board.piece(move.from_square)
    if moving is None:
        return board.move_piece(move.from_square, move.to_square)

    placed = (
        moving.promote_to(PieceType.QUEEN)
        if promotes(moving, move.to_square)
        else None
    )
    new_board = board.move_piece(move.from_square, move.to_square, placed)

    castle = castling_move_squares(board, move)
    if castle is not None:
        new_board = new_board.move_piece(castle.rook_from, castle.rook_to)
    return new_board


def castling_move_squares(board: Board, move: Move) -> Optional[CastlingSquares]:
    """The castling squares if this move (on the board BEFORE it is played) is a king castling with its rook, else None"""
    moving = board.piece(move.from_square)
    if moving is None or moving.type != PieceType.KING:
        return None
    squares = castling_squares(move.from_square, move.to_square)
    if squares is None:
        return None
    if board.piece(squares.rook_from) != Piece(PieceType.ROOK, moving.color):
        return None
    return squares
