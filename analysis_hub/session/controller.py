"""Orchestration of upload, summarize and ask for one session.

The controller is the boundary where loader and LLM errors are turned into
session state: the error banner is recorded, the phase returns to IDLE, and
the error is re-raised for the HTTP layer to report.
"""

import logging
from collections.abc import AsyncIterator

from analysis_hub.agent.analysis_agent import AnalysisService, get_analysis_service
from analysis_hub.agent.prompts import SUMMARY_GREETING
from analysis_hub.errors import DocumentAnalysisError, NoDocumentError, StreamingAnswerError
from analysis_hub.models import Document, Summary
from analysis_hub.models.schemas import SessionPhase
from analysis_hub.parsing.text_loader import load_text_document
from analysis_hub.session.state import AnalysisSession

logger = logging.getLogger(__name__)


class AnswerStream:
    """Answer fragments for one admitted question.

    Each fragment is applied to the transcript before it is returned. The
    session leaves ANSWERING exactly once: when the fragments run out, when
    they fail, or when the stream is closed, even if iteration never
    started. An answer that did not run to completion is replaced by the
    failure message, so the transcript never ends with a truncated answer.
    A stream whose document was replaced stops without touching the new
    transcript.
    """

    def __init__(
        self,
        session: AnalysisSession,
        version: int,
        fragments: AsyncIterator[str],
    ) -> None:
        self._session = session
        self._version = version
        self._fragments = fragments
        self._settled = False

    @property
    def settled(self) -> bool:
        return self._settled

    def __aiter__(self) -> "AnswerStream":
        return self

    async def __anext__(self) -> str:
        if self._settled:
            raise StopAsyncIteration
        if not self._session.is_current(self._version):
            await self._drop_stale()

        try:
            fragment = await self._fragments.__anext__()
        except StopAsyncIteration:
            self._settle(completed=True)
            raise
        except DocumentAnalysisError as e:
            self._settle(completed=False, message=e.user_message)
            raise
        except BaseException:
            self._settle(completed=False)
            raise

        if not self._session.is_current(self._version):
            await self._drop_stale()

        self._session.conversation.append_fragment_to_last_assistant_turn(fragment)
        return fragment

    async def aclose(self) -> None:
        """Stop consuming fragments and settle the session."""
        try:
            await self._fragments.aclose()
        finally:
            self._settle(completed=False)

    async def _drop_stale(self) -> None:
        logger.info(f"Session {self._session.session_id}: dropped stale answer stream")
        await self.aclose()
        raise StopAsyncIteration

    def _settle(self, completed: bool, message: str | None = None) -> None:
        if self._settled:
            return
        self._settled = True

        session = self._session
        if not session.is_current(self._version):
            return
        if not completed:
            message = message or StreamingAnswerError.default_message
            logger.warning(f"Session {session.session_id}: answer did not complete")
            session.conversation.replace_last_assistant_turn(message)
            session.error = message
        session.finish(self._version)


class SessionController:
    """Runs user actions against a session and an analysis service."""

    def __init__(
        self,
        session: AnalysisSession,
        service: AnalysisService | None = None,
    ) -> None:
        self._session = session
        self._service = service

    @property
    def session(self) -> AnalysisSession:
        return self._session

    @property
    def service(self) -> AnalysisService:
        if self._service is None:
            self._service = get_analysis_service()
        return self._service

    def load_document(
        self,
        filename: str | None,
        content_type: str | None,
        data: bytes,
    ) -> Document:
        """Load an uploaded file as the session's document.

        On failure the current document, summary and transcript are kept and
        only the error banner changes.

        Raises:
            UnsupportedFileTypeError: If the file is not plain text.
            DocumentReadError: If the file cannot be decoded.
        """
        try:
            document = load_text_document(filename, content_type, data)
        except DocumentAnalysisError as e:
            self._session.error = e.user_message
            raise

        self._session.load_document(document)
        return document

    async def summarize(self) -> Summary:
        """Summarize the loaded document and seed the transcript.

        Raises:
            NoDocumentError: If no document is loaded.
            OperationInProgressError: If another operation is running.
            SummaryGenerationError: If the LLM request fails.
            MalformedSummaryError: If the LLM response is invalid.
            StaleResultError: If a new document was loaded meanwhile.
        """
        session = self._session
        document = session.document
        if document is None:
            error = NoDocumentError()
            session.error = error.user_message
            raise error

        service = self.service
        version = session.begin(SessionPhase.SUMMARIZING)
        session.summary = None
        try:
            summary = await service.summarize(document.text)
        except DocumentAnalysisError as e:
            if session.is_current(version):
                session.error = e.user_message
            raise
        finally:
            session.finish(version)

        session.apply_summary(version, summary, SUMMARY_GREETING)
        return summary

    def ask(self, question: str) -> AnswerStream:
        """Admit a question and return the stream of answer fragments.

        Admission happens immediately: the user turn and an empty assistant
        placeholder are appended before this method returns. The caller
        must either exhaust the returned stream or close it.

        Raises:
            ValueError: If the question is blank.
            NoDocumentError: If no document is loaded.
            OperationInProgressError: If another operation is running.
        """
        session = self._session
        question = question.strip()
        if not question:
            raise ValueError("Question must not be empty")

        document = session.document
        if document is None:
            error = NoDocumentError("No document loaded to answer questions about.")
            session.error = error.user_message
            raise error

        service = self.service
        prior_turns = session.transcript
        version = session.begin(SessionPhase.ANSWERING)
        session.conversation.append_user_turn(question)
        session.conversation.append_placeholder_assistant_turn()

        fragments = service.answer_stream(document.text, question, prior_turns)
        return AnswerStream(session, version, fragments)
