"""Error types shared by the loader, the LLM services and the HTTP layer.

Every error carries a human-readable ``user_message`` for the error banner
and the HTTP status the API answers with.
"""

from fastapi import status


class DocumentAnalysisError(Exception):
    """Base class for all errors surfaced to the user."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class UnsupportedFileTypeError(DocumentAnalysisError):
    """Raised when an uploaded file is not plain text."""

    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_message = "Invalid file type. Please upload a plain-text (.txt) file."


class DocumentReadError(DocumentAnalysisError):
    """Raised when the uploaded bytes cannot be read as text."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Could not read file content."


class NoDocumentError(DocumentAnalysisError):
    """Raised when an operation needs document text and none is loaded."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No document text available to summarize."


class MalformedSummaryError(DocumentAnalysisError):
    """Raised when the LLM returns a summary that does not match the schema."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Invalid summary format received from the AI service."


class SummaryGenerationError(DocumentAnalysisError):
    """Raised when the summary request itself fails."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to generate summary. Please try again."


class StreamingAnswerError(DocumentAnalysisError):
    """Raised when an answer stream cannot be opened or breaks mid-way."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Sorry, I encountered an error trying to answer. Please try again."


class OperationInProgressError(DocumentAnalysisError):
    """Raised when a summary or answer is requested while another is running."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Another request is still in progress. Please wait for it to finish."


class StaleResultError(DocumentAnalysisError):
    """Raised when a result arrives for a document that has since been replaced."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "The document changed while the request was running. The result was discarded."


class SessionNotFoundError(DocumentAnalysisError):
    """Raised when a session id is unknown."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Session not found."
