"""HTTP client used by the UI to talk to the analysis API."""

import os
from collections.abc import Callable

import httpx

from analysis_hub.errors import StreamingAnswerError
from analysis_hub.models.schemas import (
    DocumentUploadResponse,
    SessionSnapshot,
    StreamChunk,
    SummaryResponse,
)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

_SSE_PREFIX = "data: "


class ApiError(Exception):
    """Raised when the API answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, str) and detail:
        return detail
    return f"HTTP {response.status_code}"


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_error:
        raise ApiError(_error_detail(response), response.status_code)


class AnalysisClient:
    """Thin async wrapper over the analysis API endpoints."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 120.0,
    ) -> None:
        self._base_url = base_url
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            transport=self._transport,
            timeout=self._timeout,
        )

    async def create_session(self) -> str:
        async with self._client() as client:
            response = await client.post("/sessions")
        _raise_for_error(response)
        return response.json()["session_id"]

    async def get_snapshot(self, session_id: str) -> SessionSnapshot:
        async with self._client() as client:
            response = await client.get(f"/sessions/{session_id}")
        _raise_for_error(response)
        return SessionSnapshot.model_validate(response.json())

    async def upload_document(
        self,
        session_id: str,
        filename: str,
        content_type: str | None,
        data: bytes,
    ) -> DocumentUploadResponse:
        files = {"file": (filename, data, content_type or "application/octet-stream")}
        async with self._client() as client:
            response = await client.post(f"/sessions/{session_id}/document", files=files)
        _raise_for_error(response)
        return DocumentUploadResponse.model_validate(response.json())

    async def summarize(self, session_id: str) -> SummaryResponse:
        async with self._client() as client:
            response = await client.post(f"/sessions/{session_id}/summary")
        _raise_for_error(response)
        return SummaryResponse.model_validate(response.json())

    async def stream_answer(
        self,
        session_id: str,
        question: str,
        on_chunk: Callable[[str], None],
        on_complete: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        """Consume the SSE stream from the answer endpoint.

        Exactly one of ``on_complete`` or ``on_error`` is called. A stream
        that ends without its final chunk counts as an error.
        """
        async with self._client() as client:
            try:
                async with client.stream(
                    "POST",
                    f"/sessions/{session_id}/chat/stream",
                    json={"question": question},
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    if response.is_error:
                        await response.aread()
                        on_error(_error_detail(response))
                        return
                    async for line in response.aiter_lines():
                        if not line.startswith(_SSE_PREFIX):
                            continue
                        chunk = StreamChunk.model_validate_json(line[len(_SSE_PREFIX):])
                        if chunk.error:
                            on_error(chunk.error)
                            return
                        if chunk.done:
                            on_complete()
                            return
                        if chunk.content:
                            on_chunk(chunk.content)
                on_error(StreamingAnswerError.default_message)
            except httpx.RequestError as e:
                on_error(f"Connection failed: {e}")
