from enum import Enum

from pydantic import BaseModel, Field, field_validator

from analysis_hub.models import ChatMessage, Summary


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class SessionPhase(str, Enum):
    """Which operation, if any, currently owns the session."""

    IDLE = "idle"
    SUMMARIZING = "summarizing"
    ANSWERING = "answering"


class AskRequest(BaseModel):
    """Request payload for the answer streaming endpoint.

    Attributes:
        question: User's question about the loaded document.
    """

    question: str = Field(..., min_length=1)

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v: str) -> str:
        """Strip whitespace from question before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class StreamChunk(BaseModel):
    """A chunk of streamed answer data.

    Attributes:
        content: The text fragment carried by this chunk.
        done: Whether this is the final chunk.
        status: Current processing status (generating, complete, error).
        error: Error message if the answer failed.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None


class SessionInfo(BaseModel):
    """Identifier of a newly created analysis session."""

    session_id: str


class DocumentUploadResponse(BaseModel):
    """Response after a document upload.

    Attributes:
        filename: Display name of the loaded document.
        characters: Length of the decoded text.
        success: Whether the document was loaded.
    """

    filename: str
    characters: int = Field(ge=0)
    success: bool


class SummaryResponse(BaseModel):
    """Summary plus the transcript seeded with the assistant greeting."""

    summary: Summary
    transcript: list[ChatMessage]


class SessionSnapshot(BaseModel):
    """Full view of a session for rendering.

    Attributes:
        session_id: Session identifier.
        document_name: Name of the loaded document, if any.
        summary: Current summary, if any.
        transcript: Conversation so far.
        phase: Operation currently running.
        error: Last error banner message, if any.
    """

    session_id: str
    document_name: str | None = None
    summary: Summary | None = None
    transcript: list[ChatMessage] = Field(default_factory=list)
    phase: SessionPhase = SessionPhase.IDLE
    error: str | None = None
