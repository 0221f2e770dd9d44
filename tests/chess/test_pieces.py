"""Unit tests for /src/chess/pieces.py"""

import pytest

from src.chess.pieces import CODE_TO_PIECE, PIECE_TO_CODE, Color, Piece, PieceType
from src.core.exceptions import InvalidPositionError


@pytest.mark.parametrize("char", [char.upper() for char in CODE_TO_PIECE.keys()])
def test_creating_white_piece_from_code(char: str) -> None:
    """'w' followed by the piece letter"""
    piece = Piece.from_code(f"w{char}")
    assert piece.type == CODE_TO_PIECE[char.lower()]
    assert piece.color == Color.WHITE


@pytest.mark.parametrize("char", CODE_TO_PIECE.keys())
def test_piece_letter_case_does_not_matter(char: str) -> None:
    """The UI layer is not consistent about the case of the piece letter"""
    assert Piece.from_code(f"b{char}") == Piece.from_code(f"b{char.upper()}")


@pytest.mark.parametrize("piece_type", list(PieceType))
def test_pieces_to_code(piece_type: PieceType) -> None:
    """Codes are written with an upper case piece letter"""
    assert Piece(piece_type, Color.BLACK).to_code() == f"b{PIECE_TO_CODE[piece_type].upper()}"
    assert Piece(piece_type, Color.WHITE).to_code() == f"w{PIECE_TO_CODE[piece_type].upper()}"


@pytest.mark.parametrize("code", ["", "w", "wKK", "xK", "wX", "KW"])
def test_invalid_codes(code: str) -> None:
    with pytest.raises(InvalidPositionError):
        _ = Piece.from_code(code)


def test_creating_pieces_from_fen() -> None:
    """Capital letters are used for white pieces, lower case letters for black pieces"""
    assert Piece.from_fen("Q") == Piece(PieceType.QUEEN, Color.WHITE)
    assert Piece.from_fen("n") == Piece(PieceType.KNIGHT, Color.BLACK)


@pytest.mark.parametrize("color", list(Color))
def test_promotion_to_queen(color: Color) -> None:
    """Pieces are immutable: promotion hands back a new piece, and does not by accident change the color"""
    pawn = Piece(PieceType.PAWN, color)
    queen = pawn.promote_to(PieceType.QUEEN)
    assert queen == Piece(PieceType.QUEEN, color)
    assert pawn.type == PieceType.PAWN
