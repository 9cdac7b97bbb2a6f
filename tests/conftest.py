"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - sample_summary: Summary matching the "Alice met Bob" document
    - fake_service: Scripted stand-in for AnalysisService
    - session / controller: Fresh session wired to the fake service
    - async_client: HTTPX client for API testing against a fresh store
"""

from collections.abc import AsyncIterator, Sequence

import pytest
from httpx import ASGITransport, AsyncClient

from analysis_hub.api.app import create_app
from analysis_hub.api.dependencies import get_service
from analysis_hub.errors import DocumentAnalysisError
from analysis_hub.models import ChatMessage, Entity, Summary
from analysis_hub.session.controller import SessionController
from analysis_hub.session.state import AnalysisSession
from analysis_hub.session.store import SessionStore, get_session_store

SAMPLE_TEXT = "Alice met Bob in Paris on May 1."


class FakeAnalysisService:
    """Scripted analysis service recording every call.

    Attributes:
        summary: Summary returned by ``summarize``.
        summary_error: Error raised by ``summarize`` instead, if set.
        fragments: Fragments yielded by ``answer_stream``.
        stream_error: Error raised after all fragments, if set.
    """

    def __init__(self, summary: Summary | None = None) -> None:
        self.summary = summary
        self.summary_error: Exception | None = None
        self.fragments: list[str] = []
        self.stream_error: Exception | None = None
        self.summary_calls: list[str] = []
        self.answer_calls: list[tuple[str, str, tuple[ChatMessage, ...]]] = []

    async def summarize(self, document_text: str) -> Summary:
        self.summary_calls.append(document_text)
        if self.summary_error is not None:
            raise self.summary_error
        return self.summary

    async def answer_stream(
        self,
        document_text: str,
        question: str,
        prior_turns: Sequence[ChatMessage],
    ) -> AsyncIterator[str]:
        self.answer_calls.append((document_text, question, tuple(prior_turns)))
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error


async def drain(fragments: AsyncIterator[str]) -> list[str]:
    """Collect fragments, stopping at the first analysis error."""
    collected: list[str] = []
    try:
        async for fragment in fragments:
            collected.append(fragment)
    except DocumentAnalysisError:
        pass
    return collected


@pytest.fixture
def sample_summary() -> Summary:
    return Summary(
        tldr="Alice and Bob met in Paris.",
        bullets=["Alice met Bob.", "The meeting was in Paris on May 1."],
        entities=[
            Entity(name="Alice", type="PERSON", context="Alice met Bob in Paris on May 1."),
            Entity(name="Bob", type="PERSON", context="Alice met Bob in Paris on May 1."),
            Entity(name="Paris", type="LOC", context="Alice met Bob in Paris on May 1."),
            Entity(name="May 1", type="DATE", context="Alice met Bob in Paris on May 1."),
        ],
    )


@pytest.fixture
def fake_service(sample_summary: Summary) -> FakeAnalysisService:
    return FakeAnalysisService(summary=sample_summary)


@pytest.fixture
def session() -> AnalysisSession:
    return AnalysisSession(session_id="test-session-12345")


@pytest.fixture
def controller(
    session: AnalysisSession, fake_service: FakeAnalysisService
) -> SessionController:
    return SessionController(session, fake_service)


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore()


@pytest.fixture
async def async_client(
    fake_service: FakeAnalysisService, session_store: SessionStore
) -> AsyncIterator[AsyncClient]:
    """Create async HTTP client wired to the fake service.

    Yields:
        Configured AsyncClient for making test requests.
    """
    app = create_app()
    app.dependency_overrides[get_service] = lambda: fake_service
    app.dependency_overrides[get_session_store] = lambda: session_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
