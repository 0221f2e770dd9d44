import json

import pytest

from src.api.models import (
    BoardCleared,
    ClearBoardMessage,
    ErrorMessage,
    GameJoined,
    JoinGameMessage,
    MoveMade,
    MoveMessage,
    MoveRejected,
    PlayerDisconnected,
    ResetBoardMessage,
    parse_inbound,
    to_message,
    to_wire,
)
from src.chess.events import EventType, SessionEvent
from src.core.exceptions import InvalidRequestError


# -- PARSING INBOUND MESSAGES --
def test_parse_join() -> None:
    message = parse_inbound(json.dumps({"type": "joinGame", "gameId": "room 42"}))
    assert isinstance(message, JoinGameMessage)
    assert message.game_id == "room 42"


def test_parse_move_with_position() -> None:
    raw = json.dumps(
        {
            "type": "move",
            "source": "e2",
            "target": "e4",
            "piece": "wP",
            "newPosition": {"e4": "wP"},
        }
    )
    message = parse_inbound(raw)
    assert isinstance(message, MoveMessage)
    assert message.source == "e2"
    assert message.target == "e4"
    assert message.piece == "wP"
    assert message.new_position == {"e4": "wP"}


def test_parse_move_position_is_optional() -> None:
    message = parse_inbound(
        json.dumps({"type": "move", "source": "e2", "target": "e4", "piece": "wP"})
    )
    assert isinstance(message, MoveMessage)
    assert message.new_position is None


def test_parse_reset_and_clear() -> None:
    assert isinstance(parse_inbound('{"type": "resetBoard"}'), ResetBoardMessage)
    assert isinstance(parse_inbound(b'{"type": "clearBoard"}'), ClearBoardMessage)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "{not json",
        '{"gameId": "room"}',  # no type at all
        '{"type": "resign"}',
        '{"type": "joinGame"}',
        '{"type": "joinGame", "gameId": ""}',
        '{"type": "move", "source": "e2", "target": "e4"}',
    ],
)
def test_parse_malformed(raw: str) -> None:
    with pytest.raises(InvalidRequestError):
        _ = parse_inbound(raw)


# -- Validation - MoveMessage --
def test_valid_square_names() -> None:
    """Test that MoveMessage accepts correctly written squares in algebraic notation."""
    message = MoveMessage(source="e2", target="e4", piece="wP")
    assert message.source == "e2"
    assert message.target == "e4"


@pytest.mark.parametrize(
    "square",
    [
        "nonsense",  # anything more than two characters.
        "11",  # First character is not a letter
        "aa",  # second character is not a number
        "i1",  # off the board
    ],
)
def test_invalid_source_square(square: str) -> None:
    """Test that an exception is raised when using invalid square name."""
    with pytest.raises(InvalidRequestError):
        _ = MoveMessage(source=square, target="e2", piece="wP")


@pytest.mark.parametrize("square", ["nonsense", "11", "aa", "e0"])
def test_invalid_target_square(square: str) -> None:
    with pytest.raises(InvalidRequestError):
        _ = MoveMessage(source="e2", target=square, piece="wP")


@pytest.mark.parametrize("piece", ["", "w", "wX", "xP", "wPP"])
def test_invalid_piece_code(piece: str) -> None:
    with pytest.raises(InvalidRequestError):
        _ = MoveMessage(source="e2", target="e4", piece=piece)


# -- OUTBOUND MESSAGES --
def test_game_joined_from_event() -> None:
    event = SessionEvent(
        EventType.GAME_JOINED,
        {"color": "black", "position": {"e8": "bK"}, "cooldowns": [["e8", 1234]]},
        recipient="someone",
    )
    message = to_message(event)
    assert isinstance(message, GameJoined)
    assert to_wire(message) == {
        "type": "gameJoined",
        "color": "black",
        "position": {"e8": "bK"},
        "cooldowns": [["e8", 1234]],
    }


def test_move_made_from_event() -> None:
    event = SessionEvent(
        EventType.MOVE_MADE,
        {
            "source": "g1",
            "target": "f3",
            "piece": "wN",
            "position": {"f3": "wN"},
            "cooldown": {"square": "f3", "time": 99},
        },
    )
    message = to_message(event)
    assert isinstance(message, MoveMade)
    assert to_wire(message)["cooldown"] == {"square": "f3", "time": 99}
    assert to_wire(message)["type"] == "moveMade"


def test_wire_keys_are_camel_case() -> None:
    message = to_message(
        SessionEvent(EventType.PLAYER_DISCONNECTED, {"remainingPlayers": 1})
    )
    assert isinstance(message, PlayerDisconnected)
    assert message.remaining_players == 1
    assert to_wire(message) == {"type": "playerDisconnected", "remainingPlayers": 1}


def test_board_cleared_has_only_a_type() -> None:
    message = to_message(SessionEvent(EventType.BOARD_CLEARED))
    assert isinstance(message, BoardCleared)
    assert to_wire(message) == {"type": "boardCleared"}


def test_rejection_replies() -> None:
    rejection = MoveRejected(
        source="e2", target="e5", piece="wP", reason="Move not allowed"
    )
    assert to_wire(rejection)["type"] == "moveRejected"
    assert to_wire(rejection)["position"] is None
    assert to_wire(ErrorMessage(reason="Join a game first.")) == {
        "type": "error",
        "reason": "Join a game first.",
    }
