"""Session, document upload and summary endpoints.

Handles session creation, plain-text upload and summary generation.
"""

import logging

from fastapi import APIRouter, UploadFile, status

from analysis_hub.api.dependencies import ControllerDep, SessionDep, StoreDep
from analysis_hub.errors import DocumentReadError
from analysis_hub.models.schemas import (
    DocumentUploadResponse,
    SessionInfo,
    SessionSnapshot,
    SummaryResponse,
)
from analysis_hub.session.controller import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


async def _read_upload(file: UploadFile, controller: SessionController) -> bytes:
    """Read the full upload into memory.

    Raises:
        DocumentReadError: If the upload stream cannot be read.
    """
    try:
        return await file.read()
    except OSError as e:
        logger.warning(f"Failed to read upload {file.filename!r}: {e}")
        error = DocumentReadError("Error reading file.")
        controller.session.error = error.user_message
        raise error from e


@router.post("", response_model=SessionInfo, status_code=status.HTTP_201_CREATED)
async def create_session(store: StoreDep) -> SessionInfo:
    """Start a new analysis session."""
    session = store.create()
    return SessionInfo(session_id=session.session_id)


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session_snapshot(session: SessionDep) -> SessionSnapshot:
    """Return document name, summary, transcript, phase and error banner."""
    return session.snapshot()


@router.post("/{session_id}/document", response_model=DocumentUploadResponse)
async def upload_document(session: SessionDep, file: UploadFile) -> DocumentUploadResponse:
    """Upload a plain-text document into the session.

    Replaces any previous document and clears its summary and transcript.

    Args:
        file: The uploaded text file (multipart/form-data).

    Returns:
        DocumentUploadResponse with filename and character count.

    Raises:
        400: File content could not be read.
        404: Unknown session.
        415: File is not plain text.
    """
    controller = SessionController(session)
    content = await _read_upload(file, controller)
    document = controller.load_document(file.filename, file.content_type, content)

    return DocumentUploadResponse(
        filename=document.name,
        characters=len(document.text),
        success=True,
    )


@router.post("/{session_id}/summary", response_model=SummaryResponse)
async def summarize_document(controller: ControllerDep) -> SummaryResponse:
    """Generate a structured summary of the session's document.

    Returns:
        SummaryResponse with the summary and the freshly seeded transcript.

    Raises:
        400: No document loaded.
        409: Another operation is running, or the document changed meanwhile.
        502: The AI service failed or returned a malformed summary.
    """
    summary = await controller.summarize()
    return SummaryResponse(
        summary=summary,
        transcript=list(controller.session.transcript),
    )
