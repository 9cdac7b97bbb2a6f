"""In-memory registry of analysis sessions.

Sessions are volatile: nothing survives a process restart.
"""

import logging

from analysis_hub.errors import SessionNotFoundError
from analysis_hub.session.state import AnalysisSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Maps session ids to live AnalysisSession objects."""

    def __init__(self) -> None:
        self._sessions: dict[str, AnalysisSession] = {}

    def create(self) -> AnalysisSession:
        session = AnalysisSession()
        self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id}")
        return session

    def get(self, session_id: str) -> AnalysisSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError() from None

    def __len__(self) -> int:
        return len(self._sessions)


_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get or create the global session store."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
