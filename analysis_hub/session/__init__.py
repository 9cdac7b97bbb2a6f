"""Session state and orchestration.

Responsibilities:
    - Transcript reducer (user turns, placeholders, fragments, failures)
    - Session phase machine (idle, summarizing, answering)
    - Staleness tracking across document reloads
    - In-memory session registry

Contains no HTTP or rendering concerns.
"""

from analysis_hub.session.controller import AnswerStream, SessionController
from analysis_hub.session.state import AnalysisSession
from analysis_hub.session.store import SessionStore, get_session_store
from analysis_hub.session.transcript import (
    AnswerFailed,
    Conversation,
    FragmentReceived,
    PlaceholderOpened,
    UserAsked,
    reduce_transcript,
)

__all__ = [
    "AnalysisSession",
    "AnswerFailed",
    "AnswerStream",
    "Conversation",
    "FragmentReceived",
    "PlaceholderOpened",
    "SessionController",
    "SessionStore",
    "UserAsked",
    "get_session_store",
    "reduce_transcript",
]
