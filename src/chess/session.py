"""
The GameSession is the unit of authority for a single match.
It owns the board, the cooldowns and the move history, and knows who is sitting where.

It is responsible for orchestrating all the rules required to accept or reject a move, and returns the
events the service layer should deliver. It performs no I/O and is not thread-safe: the service layer
makes sure requests for one session are handled one at a time.

State machine
----
WAITING_FOR_PLAYERS (0 or 1 seated) -> ACTIVE (2 seated) -> ENDED (a king got captured)

* a player leaving an ACTIVE game sends it back to WAITING_FOR_PLAYERS
* ENDED only ends through reset/clear
* spectators come and go without affecting any of this
"""

import logging
from typing import Any, Optional

from src.chess.board import START, Board, WirePosition
from src.chess.cooldowns import Clock, CooldownTable, now_ms
from src.chess.events import EventType, SessionEvent
from src.chess.history import MoveHistory
from src.chess.moves import (
    Move,
    apply_move,
    castling_move_squares,
    is_king_capture,
    is_legal,
)
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.exceptions import (
    CooldownActiveError,
    GameStateError,
    InvalidMoveError,
    WrongSeatError,
)
from src.core.shared_types import Color, PieceType, Status

logger = logging.getLogger(__name__)

# seats fill up in this order
SEAT_ORDER: tuple[Color, ...] = (Color.WHITE, Color.BLACK)


class GameSession:
    def __init__(
        self,
        key: str,
        clock: Clock = now_ms,
        trust_client_position: bool = False,
    ) -> None:
        self.key = key
        self.board = Board.starting_position()
        self.cooldowns = CooldownTable()
        self.history = MoveHistory(self.board)
        self.seats: dict[Color, Optional[str]] = {color: None for color in SEAT_ORDER}
        self.spectators: set[str] = set()
        self.status = Status.WAITING_FOR_PLAYERS
        self.winner: Optional[Color] = None
        self.trust_client_position = trust_client_position
        self._clock = clock

    # --- MEMBERSHIP ---
    @property
    def participants(self) -> list[str]:
        """Everyone who should receive a broadcast: players first (white, black), then spectators"""
        players = [p for p in self.seats.values() if p is not None]
        return players + sorted(self.spectators)

    @property
    def seated_count(self) -> int:
        return sum(1 for p in self.seats.values() if p is not None)

    @property
    def is_empty(self) -> bool:
        return self.seated_count == 0 and not self.spectators

    def seat_of(self, participant: str) -> Optional[Color]:
        return next(
            (color for color, p in self.seats.items() if p == participant), None
        )

    def is_member(self, participant: str) -> bool:
        return self.seat_of(participant) is not None or participant in self.spectators

    # --- REQUESTS ---
    def join(self, participant: str) -> list[SessionEvent]:
        """
        Take the first free seat (white, then black). When both seats are taken, watch as a spectator.
        The second player sitting down starts the game for everyone.
        """
        if self.is_member(participant):
            return [self._welcome(participant)]

        free_seat = next((c for c in SEAT_ORDER if self.seats[c] is None), None)
        if free_seat is None:
            self.spectators.add(participant)
            logger.info("session %s: %s joined as spectator", self.key, participant)
            return [self._welcome(participant)]

        self.seats[free_seat] = participant
        logger.info("session %s: %s took the %s seat", self.key, participant, free_seat)
        events = [self._welcome(participant)]
        if self.seated_count == len(SEAT_ORDER) and self.status == Status.WAITING_FOR_PLAYERS:
            self._change_status(Status.ACTIVE)
            events.append(
                SessionEvent(EventType.GAME_START, self._snapshot(self._clock()))
            )
        return events

    def propose_move(
        self,
        participant: str,
        source: Square,
        target: Square,
        piece: Piece,
        new_position: Optional[WirePosition] = None,
    ) -> list[SessionEvent]:
        """
        Attempt to make a move
        -----

        Rejected (raises, nothing changes) unless:
        1. the game is in progress
        2. the piece belongs to the seat of the participant
        3. the piece actually stands on the source square
        4. that square is not cooling down
        5. the movement rules allow it

        Once accepted:
        6. replace the board
        7. lock the target square
        8. update the move history
        9. end the game if a king was taken
        """
        self._assert_in_progress()
        self._assert_your_piece(participant, piece)

        if self.board.piece(source) != piece:
            raise InvalidMoveError(f"There is no {piece} on {source}.")

        now = self._clock()
        if self.cooldowns.is_locked(source, now):
            raise CooldownActiveError(
                f"{piece} on {source} is cooling down until {self.cooldowns.expiry(source)}."
            )

        if not is_legal(self.board, source, target, piece, self.history):
            raise InvalidMoveError(f"Move not allowed: {piece} {source}-{target}")

        move = Move(source, target)
        derived = apply_move(self.board, move)
        new_board = self._resulting_board(derived, new_position)

        # Store move info before update
        king_captured = is_king_capture(self.board, target, piece)
        castle = castling_move_squares(self.board, move)
        landed = derived.piece(target) or piece

        if castle is not None:
            rook = Piece(PieceType.ROOK, piece.color)
            self.history.record_move(rook, castle.rook_from, castle.rook_to)
            self.cooldowns.release(castle.rook_from)
        self.history.record_move(landed, source, target)
        self.cooldowns.release(source)
        expiry = self.cooldowns.lock(target, piece, now)
        self.board = new_board
        logger.debug("session %s: %s %s-%s accepted", self.key, piece, source, target)

        events = [
            SessionEvent(
                EventType.MOVE_MADE,
                {
                    "source": source.to_algebraic(),
                    "target": target.to_algebraic(),
                    "piece": piece.to_code(),
                    "position": self.board.to_wire(),
                    "cooldown": {"square": target.to_algebraic(), "time": expiry},
                },
            )
        ]
        if king_captured:
            self.winner = piece.color
            self._change_status(Status.ENDED)
            logger.info("session %s: %s captured the king", self.key, piece.color)
            events.append(SessionEvent(EventType.GAME_OVER, {"winner": str(piece.color)}))
        return events

    def reset(self, participant: str) -> list[SessionEvent]:
        """Back to the standard starting position"""
        self._restart(participant, Board.starting_position())
        return [SessionEvent(EventType.BOARD_RESET, {"position": START})]

    def clear(self, participant: str) -> list[SessionEvent]:
        """Remove every piece from the board"""
        self._restart(participant, Board.empty())
        return [SessionEvent(EventType.BOARD_CLEARED)]

    def leave(self, participant: str) -> list[SessionEvent]:
        """
        Give up your seat (or stop watching). Only membership changes: the board is never touched,
        so a disconnect racing with a move of the same participant cannot corrupt anything.
        Leaving twice is harmless.
        """
        seat = self.seat_of(participant)
        if seat is not None:
            self.seats[seat] = None
            if self.status == Status.ACTIVE:
                self._change_status(Status.WAITING_FOR_PLAYERS)
        elif participant in self.spectators:
            self.spectators.discard(participant)
        else:
            return []

        logger.info("session %s: %s left", self.key, participant)
        return [
            SessionEvent(
                EventType.PLAYER_DISCONNECTED, {"remainingPlayers": self.seated_count}
            )
        ]

    def snapshot(self) -> dict[str, Any]:
        """Current position and the cooldowns still running"""
        return self._snapshot(self._clock())

    # -- PRIVATE HELPERS ---
    def _snapshot(self, now: int) -> dict[str, Any]:
        return {
            "position": self.board.to_wire(),
            "cooldowns": [
                [square.to_algebraic(), expiry]
                for square, expiry in self.cooldowns.entries(now)
            ],
        }

    def _welcome(self, participant: str) -> SessionEvent:
        """Reply to the participant that just joined: which seat they got (if any) and the state of play"""
        seat = self.seat_of(participant)
        data = self._snapshot(self._clock())
        if seat is None:
            return SessionEvent(EventType.SPECTATOR_JOINED, data, recipient=participant)
        return SessionEvent(
            EventType.GAME_JOINED, {"color": str(seat), **data}, recipient=participant
        )

    def _resulting_board(
        self, derived: Board, new_position: Optional[WirePosition]
    ) -> Board:
        """
        By default the server's own idea of the resulting position wins.
        Only when configured to trust clients is the proposer's position stored instead.
        """
        if not self.trust_client_position or new_position is None:
            return derived
        proposed = Board.from_wire(new_position)
        if proposed != derived:
            logger.debug(
                "session %s: proposed position differs from the derived one", self.key
            )
        return proposed

    def _restart(self, participant: str, board: Board) -> None:
        if self.seat_of(participant) is None:
            raise WrongSeatError("Only seated players can reset or clear the board.")
        self.board = board
        self.cooldowns.clear()
        self.history.reset(board)
        self.winner = None
        self._change_status(
            Status.ACTIVE
            if self.seated_count == len(SEAT_ORDER)
            else Status.WAITING_FOR_PLAYERS
        )
        logger.info("session %s: board restarted by %s", self.key, participant)

    def _assert_in_progress(self) -> None:
        if self.status == Status.ENDED:
            raise GameStateError(f"Game is over. {self.winner} won.")
        if self.status != Status.ACTIVE:
            raise GameStateError(f"Game is not in progress. status: {self.status}")

    def _assert_your_piece(self, participant: str, piece: Piece) -> None:
        seat = self.seat_of(participant)
        if seat is None:
            raise WrongSeatError("Spectators cannot move pieces.")
        if seat != piece.color:
            raise WrongSeatError(
                f"You are playing {seat}, cannot move a {piece.color} piece."
            )

    def _change_status(self, new_status: Status) -> None:
        self.status = new_status
