# File: shell_agent/tools/shell/session_registry.py
# Purpose: Thread-safe mapping from session id to live background session
import threading
from typing import Optional

from shell_agent.tools.shell.session import BashSession


class SessionRegistry:
    """
    Owns the background sessions that can still be addressed by id.

    Ids are matched case-insensitively. The lock only guards the mapping;
    no process I/O happens while it is held.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, BashSession] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(session_id: str) -> str:
        return session_id.strip().casefold()

    def add(self, session: BashSession) -> None:
        key = self._key(session.id)
        with self._lock:
            if key in self._sessions:
                raise ValueError(f"Session id already registered: {session.id}")
            self._sessions[key] = session

    def get(self, session_id: str) -> Optional[BashSession]:
        with self._lock:
            return self._sessions.get(self._key(session_id))

    def remove(self, session_id: str) -> Optional[BashSession]:
        with self._lock:
            return self._sessions.pop(self._key(session_id), None)

    def remove_all(self) -> list[BashSession]:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        return sessions

    def __contains__(self, session_id: object) -> bool:
        if not isinstance(session_id, str):
            return False
        with self._lock:
            return self._key(session_id) in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
