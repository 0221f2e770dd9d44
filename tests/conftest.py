"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.chess.board import Board


class FakeClock:
    """Epoch milliseconds that only move when the test says so."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


BoardFactory = Callable[..., Board]


@pytest.fixture
def make_board() -> BoardFactory:
    """Build a board from keyword placements, ex. make_board(e1="wK", e8="bK")"""

    def _make_board(**placements: str) -> Board:
        return Board.from_wire(placements)

    return _make_board
