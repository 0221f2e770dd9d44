"""Inbound and outbound websocket message models"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from src.chess.events import EventType, SessionEvent
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.exceptions import InvalidPositionError, InvalidRequestError

SquareName = str
PieceCode = str
Position = Union[str, dict[SquareName, PieceCode]]


class Message(BaseModel):
    """Wire keys are camelCase (what the browser client speaks), attributes are snake_case"""

    model_config = ConfigDict(populate_by_name=True)


# --- INBOUND MESSAGES ---
class JoinGameMessage(Message):
    type: Literal["joinGame"] = "joinGame"
    game_id: str = Field(alias="gameId", min_length=1, max_length=100)


class MoveMessage(Message):
    type: Literal["move"] = "move"
    source: SquareName
    target: SquareName
    piece: PieceCode
    new_position: Optional[Position] = Field(default=None, alias="newPosition")

    @field_validator(*["source", "target"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        try:
            Square.from_algebraic(value)
        except InvalidPositionError:
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            ) from None
        return value

    @field_validator("piece")
    @classmethod
    def validate_piece(cls, value: str) -> str:
        try:
            Piece.from_code(value)
        except InvalidPositionError:
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a piece code."
            ) from None
        return value


class ResetBoardMessage(Message):
    type: Literal["resetBoard"] = "resetBoard"


class ClearBoardMessage(Message):
    type: Literal["clearBoard"] = "clearBoard"


InboundMessage = Annotated[
    Union[JoinGameMessage, MoveMessage, ResetBoardMessage, ClearBoardMessage],
    Field(discriminator="type"),
]
INBOUND_ADAPTER: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(raw: str | bytes) -> InboundMessage:
    """Parse a JSON text frame into one of the inbound messages."""
    try:
        return INBOUND_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise InvalidRequestError(f"Malformed message: {exc.errors()[0]['msg']}") from exc


# --- OUTBOUND MESSAGES ---
class CooldownInfo(Message):
    square: SquareName
    time: int


class GameJoined(Message):
    type: Literal["gameJoined"] = "gameJoined"
    color: str
    position: Position
    cooldowns: list[tuple[SquareName, int]]


class SpectatorJoined(Message):
    type: Literal["spectatorJoined"] = "spectatorJoined"
    position: Position
    cooldowns: list[tuple[SquareName, int]]


class GameStart(Message):
    type: Literal["gameStart"] = "gameStart"
    position: Position
    cooldowns: list[tuple[SquareName, int]]


class MoveMade(Message):
    type: Literal["moveMade"] = "moveMade"
    source: SquareName
    target: SquareName
    piece: PieceCode
    position: Position
    cooldown: CooldownInfo


class GameOver(Message):
    type: Literal["gameOver"] = "gameOver"
    winner: str


class BoardReset(Message):
    type: Literal["boardReset"] = "boardReset"
    position: Position


class BoardCleared(Message):
    type: Literal["boardCleared"] = "boardCleared"


class PlayerDisconnected(Message):
    type: Literal["playerDisconnected"] = "playerDisconnected"
    remaining_players: int = Field(alias="remainingPlayers")


class MoveRejected(Message):
    """Direct reply to the proposer only, so the client can undo its optimistic update"""

    type: Literal["moveRejected"] = "moveRejected"
    source: SquareName
    target: SquareName
    piece: PieceCode
    reason: str
    position: Optional[Position] = None


class ErrorMessage(Message):
    type: Literal["error"] = "error"
    reason: str


OUTBOUND_MODELS: dict[EventType, type[Message]] = {
    EventType.GAME_JOINED: GameJoined,
    EventType.SPECTATOR_JOINED: SpectatorJoined,
    EventType.GAME_START: GameStart,
    EventType.MOVE_MADE: MoveMade,
    EventType.GAME_OVER: GameOver,
    EventType.BOARD_RESET: BoardReset,
    EventType.BOARD_CLEARED: BoardCleared,
    EventType.PLAYER_DISCONNECTED: PlayerDisconnected,
}


def to_message(event: SessionEvent) -> Message:
    return OUTBOUND_MODELS[event.type].model_validate(event.data)


def to_wire(message: Message) -> dict:
    return message.model_dump(mode="json", by_alias=True)
