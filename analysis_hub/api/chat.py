"""Server-Sent Events endpoint for grounded answers.

Each event is a ``data:`` line holding a serialized StreamChunk. The stream
ends with a chunk whose ``done`` flag is set, carrying either the
``complete`` or the ``error`` status.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from analysis_hub.api.dependencies import ControllerDep
from analysis_hub.errors import DocumentAnalysisError
from analysis_hub.models.schemas import AskRequest, StreamChunk, StreamStatus
from analysis_hub.session.controller import AnswerStream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["chat"])


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


async def _event_stream(answer: AnswerStream) -> AsyncIterator[str]:
    """Wrap answer fragments into SSE events.

    The answer is closed when this generator is, so a client that goes
    away mid-answer still returns the session to IDLE.
    """
    async with aclosing(answer):
        yield _sse(StreamChunk(content="", done=False, status=StreamStatus.GENERATING))

        try:
            async for fragment in answer:
                yield _sse(
                    StreamChunk(content=fragment, done=False, status=StreamStatus.GENERATING)
                )
        except DocumentAnalysisError as e:
            logger.warning(f"Answer stream ended with error: {e.user_message}")
            yield _sse(
                StreamChunk(content="", done=True, status=StreamStatus.ERROR, error=e.user_message)
            )
            return

        yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))


@router.post("/{session_id}/chat/stream")
async def stream_answer(request: AskRequest, controller: ControllerDep) -> StreamingResponse:
    """Stream an answer to a question about the session's document.

    Admission errors (no document, another operation running) are returned
    as regular HTTP errors before the stream opens. The background task
    closes the answer even if the body was never iterated.

    Raises:
        400: No document loaded.
        404: Unknown session.
        409: Another operation is running.
        422: Empty question.
    """
    answer = controller.ask(request.question)

    return StreamingResponse(
        _event_stream(answer),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        background=BackgroundTask(answer.aclose),
    )
