"""Per-user analysis session state.

Holds the loaded document, its summary, the transcript and the phase of
the operation currently running. ``document_version`` is bumped on every
load and serves as the staleness token for in-flight requests.
"""

import logging
import uuid

from analysis_hub.errors import OperationInProgressError, StaleResultError
from analysis_hub.models import ChatMessage, Document, Role, Summary
from analysis_hub.models.schemas import SessionPhase, SessionSnapshot
from analysis_hub.session.transcript import Conversation, Transcript

logger = logging.getLogger(__name__)


class AnalysisSession:
    """Manages document, summary and chat state for one user."""

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id: str = session_id or str(uuid.uuid4())
        self.document: Document | None = None
        self.summary: Summary | None = None
        self.conversation = Conversation()
        self.phase: SessionPhase = SessionPhase.IDLE
        self.error: str | None = None
        self.document_version: int = 0

    @property
    def transcript(self) -> Transcript:
        return self.conversation.messages

    def load_document(self, document: Document) -> None:
        """Replace the document and reset everything derived from it.

        Any request still running for the previous document becomes stale.
        """
        self.document = document
        self.summary = None
        self.conversation = Conversation()
        self.error = None
        self.document_version += 1
        if self.phase is not SessionPhase.IDLE:
            logger.info(
                f"Session {self.session_id}: document replaced during {self.phase.value}"
            )
        self.phase = SessionPhase.IDLE

    def begin(self, phase: SessionPhase) -> int:
        """Move from IDLE into ``phase``.

        Returns:
            The document version the operation belongs to.

        Raises:
            OperationInProgressError: If another operation is running.
        """
        if self.phase is not SessionPhase.IDLE:
            raise OperationInProgressError()
        self.phase = phase
        self.error = None
        return self.document_version

    def is_current(self, version: int) -> bool:
        return version == self.document_version

    def finish(self, version: int) -> None:
        """Return to IDLE unless a newer document already reset the session."""
        if self.is_current(version):
            self.phase = SessionPhase.IDLE

    def apply_summary(self, version: int, summary: Summary, greeting: str) -> None:
        """Store a summary and seed the transcript with the assistant greeting.

        Raises:
            StaleResultError: If the document changed since ``version``.
        """
        if not self.is_current(version):
            logger.info(f"Session {self.session_id}: discarded stale summary")
            raise StaleResultError()
        self.summary = summary
        self.conversation = Conversation([ChatMessage(role=Role.MODEL, content=greeting)])

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            document_name=self.document.name if self.document else None,
            summary=self.summary,
            transcript=list(self.transcript),
            phase=self.phase,
            error=self.error,
        )
