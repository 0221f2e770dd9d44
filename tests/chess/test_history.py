"""Unit tests for /src/chess/history.py"""

from src.chess.board import Board
from src.chess.history import MoveHistory
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import Color, PieceType

WHITE_ROOK = Piece(PieceType.ROOK, Color.WHITE)
WHITE_KING = Piece(PieceType.KING, Color.WHITE)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def test_nothing_moved_at_start() -> None:
    board = Board.starting_position()
    history = MoveHistory(board)
    assert all(not history.has_moved(square, board) for square, _ in board)


def test_every_piece_gets_its_own_identity() -> None:
    board = Board.starting_position()
    history = MoveHistory(board)
    identities = {history.tracked(square).identity for square, _ in board}
    assert len(identities) == len(board)


def test_record_move_follows_the_piece(make_board) -> None:
    board = make_board(a1="wR", e1="wK")
    history = MoveHistory(board)
    identity = history.tracked(sq("a1")).identity

    history.record_move(WHITE_ROOK, sq("a1"), sq("a4"))

    assert history.tracked(sq("a1")) is None
    assert history.tracked(sq("a4")).identity == identity
    assert history.tracked(sq("a4")).has_moved
    assert not history.tracked(sq("e1")).has_moved


def test_piece_returning_home_counts_as_moved(make_board) -> None:
    board = make_board(h1="wR")
    history = MoveHistory(board)
    history.record_move(WHITE_ROOK, sq("h1"), sq("h3"))
    history.record_move(WHITE_ROOK, sq("h3"), sq("h1"))
    assert history.has_moved(sq("h1"), board)


def test_other_rook_passing_through_does_not_taint_square(make_board) -> None:
    """
    Two rooks of the same color: the a-rook travels over h1's neighbour squares and back,
    but the h-rook itself never moves, so it keeps its castling rights.
    """
    board = make_board(a1="wR", h1="wR")
    history = MoveHistory(board)
    history.record_move(WHITE_ROOK, sq("a1"), sq("a2"))
    history.record_move(WHITE_ROOK, sq("a2"), sq("h2"))
    assert not history.has_moved(sq("h1"), board)


def test_capture_removes_identity(make_board) -> None:
    board = make_board(a1="wR", a8="bR")
    history = MoveHistory(board)
    white_identity = history.tracked(sq("a1")).identity
    history.record_move(WHITE_ROOK, sq("a1"), sq("a8"))
    assert history.tracked(sq("a8")).identity == white_identity
    assert history.tracked(sq("a8")).piece == WHITE_ROOK


def test_untracked_piece(make_board) -> None:
    """A piece that appeared without the table knowing (ex. placed on a cleared board) has never moved"""
    history = MoveHistory(Board.empty())
    board = make_board(e1="wK")
    assert not history.has_moved(sq("e1"), board)

    history.record_move(WHITE_KING, sq("e1"), sq("e2"))
    assert history.has_moved(sq("e2"), make_board(e2="wK"))


def test_different_piece_than_tracked_counts_as_moved(make_board) -> None:
    """If the board shows something else than what we followed there, we cannot vouch for it"""
    history = MoveHistory(make_board(e1="wK"))
    assert history.has_moved(sq("e1"), make_board(e1="wQ"))


def test_record_moved(make_board) -> None:
    board = make_board(h1="wR", a1="wR")
    history = MoveHistory(board)
    history.record_moved(WHITE_ROOK, sq("h1"))
    assert history.has_moved(sq("h1"), board)
    assert not history.has_moved(sq("a1"), board)
    # a different piece than tracked is left alone
    history.record_moved(WHITE_KING, sq("a1"))
    assert not history.has_moved(sq("a1"), board)


def test_reset_forgets_everything(make_board) -> None:
    board = make_board(e1="wK")
    history = MoveHistory(board)
    history.record_move(WHITE_KING, sq("e1"), sq("e2"))
    history.reset(board)
    assert not history.has_moved(sq("e1"), board)
    assert history.tracked(sq("e2")) is None
