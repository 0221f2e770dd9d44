"""
Orchestration between the websocket connections and the game sessions.

* inbound messages are translated into GameSession calls
* the events a session returns are delivered to exactly the participants of that session
* a participant can only affect the session it is currently associated with

Every session is driven by a SessionActor: one queue and one worker task that applies the requests
in arrival order. Sessions share nothing, so different sessions proceed independently.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol

from src.api.models import (
    ClearBoardMessage,
    ErrorMessage,
    InboundMessage,
    JoinGameMessage,
    Message,
    MoveMessage,
    MoveRejected,
    ResetBoardMessage,
    parse_inbound,
    to_message,
    to_wire,
)
from src.chess.cooldowns import Clock, now_ms
from src.chess.events import SessionEvent
from src.chess.pieces import Piece
from src.chess.session import GameSession
from src.chess.square import Square
from src.core.config import Settings
from src.core.exceptions import GameError, UnknownSessionError
from src.services.registry import SessionRegistry

logger = logging.getLogger(__name__)

Command = Callable[[GameSession], list[SessionEvent]]


class Connection(Protocol):
    """The part of a websocket the service needs"""

    async def send_json(self, data: Any) -> None: ...


@dataclass
class _Job:
    participant: str
    command: Command
    done: asyncio.Future


class SessionActor:
    """Owns one GameSession and applies commands to it one at a time"""

    def __init__(
        self,
        session: GameSession,
        deliver: Callable[[GameSession, list[SessionEvent]], Awaitable[None]],
        on_empty: Callable[["SessionActor"], None],
    ) -> None:
        self.session = session
        self.closed = False
        self._deliver = deliver
        self._on_empty = on_empty
        self._queue: asyncio.Queue[_Job] = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None

    @property
    def key(self) -> str:
        return self.session.key

    async def submit(self, participant: str, command: Command) -> list[SessionEvent]:
        """Queue the command and wait until it has been applied and its events delivered."""
        if self.closed:
            raise UnknownSessionError(f"Session {self.key!r} no longer exists.")
        if self._worker is None:
            self._worker = asyncio.create_task(self._run(), name=f"session-{self.key}")
        done = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(_Job(participant, command, done))
        return await done

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                events = job.command(self.session)
                await self._deliver(self.session, events)
            except Exception as exc:
                if not job.done.done():
                    job.done.set_exception(exc)
            else:
                if not job.done.done():
                    job.done.set_result(events)

            # NOTE no await between this check and closing, so nothing can be queued in between
            if self.session.is_empty and self._queue.empty():
                self.closed = True
                self._on_empty(self)
                return

    def close(self) -> None:
        """Stop the worker and fail whatever was still queued"""
        self.closed = True
        if self._worker is not None:
            self._worker.cancel()
        while not self._queue.empty():
            job = self._queue.get_nowait()
            job.done.cancel()


class SyncService:
    """Entry point for the websocket layer: connect, handle messages, disconnect."""

    def __init__(
        self,
        registry: SessionRegistry[SessionActor],
        settings: Settings,
        clock: Clock = now_ms,
    ) -> None:
        self.registry = registry
        self.settings = settings
        self._clock = clock
        self._connections: dict[str, Connection] = {}

    # -- WEBSOCKET LAYER API ---
    def connect(self, participant: str, connection: Connection) -> None:
        self._connections[participant] = connection

    async def handle(self, participant: str, raw: str | bytes) -> None:
        """
        Handle a single inbound frame.
        ----
        Rejections never reach the other participants: the sender gets a direct reply explaining why, so it can
        reconcile its local board. Nothing that goes wrong here may take the connection or the session down.
        """
        message: Optional[InboundMessage] = None
        try:
            message = parse_inbound(raw)
            await self._dispatch(participant, message)
        except GameError as exc:
            logger.info("rejected %s from %s: %s", _kind(message), participant, exc)
            await self._reply_rejection(participant, message, exc)
        except Exception:
            logger.exception("failed to handle %s from %s", _kind(message), participant)
            await self._send(participant, ErrorMessage(reason="internal server error"))

    async def disconnect(self, participant: str) -> None:
        """Leave the current session (if any). Safe to call more than once."""
        self._connections.pop(participant, None)
        await self._leave_current(participant)

    async def shutdown(self) -> None:
        for actor in self.registry.sessions():
            actor.close()
            self.registry.remove(actor.key, actor)

    # -- DISPATCH ---
    async def _dispatch(self, participant: str, message: InboundMessage) -> None:
        if isinstance(message, JoinGameMessage):
            await self.join(participant, message.game_id)
        elif isinstance(message, MoveMessage):
            await self.move(participant, message)
        elif isinstance(message, ResetBoardMessage):
            await self._submit_to_current(participant, lambda s: s.reset(participant))
        elif isinstance(message, ClearBoardMessage):
            await self._submit_to_current(participant, lambda s: s.clear(participant))

    async def join(self, participant: str, key: str) -> None:
        """A participant is in one session at a time: joining another one leaves the current one first."""
        current = self.registry.session_key_of(participant)
        if current is not None and current != key:
            await self._leave_current(participant)

        actor = self.registry.get_or_create(key, self._create_actor)
        self.registry.associate(participant, key)
        await actor.submit(participant, lambda s: s.join(participant))

    async def move(self, participant: str, message: MoveMessage) -> None:
        source = Square.from_algebraic(message.source)
        target = Square.from_algebraic(message.target)
        piece = Piece.from_code(message.piece)
        await self._submit_to_current(
            participant,
            lambda s: s.propose_move(
                participant, source, target, piece, message.new_position
            ),
        )

    # -- INTERNAL HELPERS --
    def _create_actor(self, key: str) -> SessionActor:
        session = GameSession(
            key,
            clock=self._clock,
            trust_client_position=self.settings.trust_client_position,
        )
        return SessionActor(session, self._deliver, self._forget)

    def _forget(self, actor: SessionActor) -> None:
        self.registry.remove(actor.key, actor)

    def _current_actor(self, participant: str) -> SessionActor:
        key = self.registry.session_key_of(participant)
        actor = self.registry.get(key) if key is not None else None
        if actor is None or actor.closed:
            raise UnknownSessionError("Join a game first.")
        return actor

    async def _submit_to_current(self, participant: str, command: Command) -> None:
        actor = self._current_actor(participant)
        await actor.submit(participant, command)

    async def _leave_current(self, participant: str) -> None:
        key = self.registry.dissociate(participant)
        actor = self.registry.get(key) if key is not None else None
        if actor is None or actor.closed:
            return
        await actor.submit(participant, lambda s: s.leave(participant))

    async def _deliver(self, session: GameSession, events: list[SessionEvent]) -> None:
        """Events go out in order; the recipients of one event are sent to concurrently."""
        for event in events:
            message = to_message(event)
            recipients = (
                session.participants if event.is_broadcast else [event.recipient]
            )
            await asyncio.gather(
                *(self._send(recipient, message) for recipient in recipients),
                return_exceptions=True,
            )

    async def _send(self, participant: Optional[str], message: Message) -> None:
        connection = self._connections.get(participant) if participant else None
        if connection is None:
            return
        try:
            await connection.send_json(to_wire(message))
        except Exception:
            # the receive loop of that connection will notice and disconnect it
            logger.warning("could not deliver %s to %s", message.type, participant)

    async def _reply_rejection(
        self, participant: str, message: Optional[InboundMessage], exc: GameError
    ) -> None:
        if not isinstance(message, MoveMessage):
            await self._send(participant, ErrorMessage(reason=str(exc)))
            return

        key = self.registry.session_key_of(participant)
        actor = self.registry.get(key) if key is not None else None
        position = actor.session.board.to_wire() if actor is not None else None
        await self._send(
            participant,
            MoveRejected(
                source=message.source,
                target=message.target,
                piece=message.piece,
                reason=str(exc),
                position=position,
            ),
        )


def _kind(message: Optional[InboundMessage]) -> str:
    return message.type if message is not None else "message"
