"""
Process-wide registry of live sessions, and of which session each participant is currently in.

Starts out empty. Sessions are added on the first join to an unknown key and removed once nobody is left in them.
Only the sync service touches it.
"""

import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionRegistry(Generic[T]):
    def __init__(self) -> None:
        self._sessions: dict[str, T] = {}
        self._participant_sessions: dict[str, str] = {}

    def get(self, key: str) -> Optional[T]:
        return self._sessions.get(key)

    def get_or_create(self, key: str, factory: Callable[[str], T]) -> T:
        """Find the session for the key, creating it if this is the first anyone has heard of it."""
        session = self._sessions.get(key)
        if session is None:
            session = factory(key)
            self._sessions[key] = session
            logger.info("session %s created", key)
        return session

    def remove(self, key: str, session: T) -> None:
        """Forget the session, unless the key has meanwhile been taken by a newer session"""
        if self._sessions.get(key) is session:
            del self._sessions[key]
            logger.info("session %s destroyed", key)

    # --- PARTICIPANTS ---
    def session_key_of(self, participant: str) -> Optional[str]:
        return self._participant_sessions.get(participant)

    def associate(self, participant: str, key: str) -> None:
        self._participant_sessions[participant] = key

    def dissociate(self, participant: str) -> Optional[str]:
        """Returns the key the participant was associated with (None if it was not in any session)"""
        return self._participant_sessions.pop(participant, None)

    def sessions(self) -> list[T]:
        return list(self._sessions.values())

    def __contains__(self, key: str) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
