"""Plain-text document loading.

Validates the declared media type of an upload and decodes its bytes.
"""

import logging
import mimetypes

from analysis_hub.errors import DocumentReadError, UnsupportedFileTypeError
from analysis_hub.models import Document

logger = logging.getLogger(__name__)

# Constants
PLAIN_TEXT_TYPE = "text/plain"
GENERIC_BINARY_TYPE = "application/octet-stream"
DEFAULT_DOCUMENT_NAME = "document.txt"


def _resolve_media_type(filename: str, content_type: str | None) -> str | None:
    """Return the effective media type of an upload.

    Parameters such as ``charset`` are dropped. Missing or generic binary
    types fall back to a guess from the filename.

    Args:
        filename: The uploaded filename.
        content_type: The declared Content-Type, if any.

    Returns:
        Lower-cased media type, or None if it cannot be determined.
    """
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type and media_type != GENERIC_BINARY_TYPE:
        return media_type

    guessed, _ = mimetypes.guess_type(filename)
    return guessed.lower() if guessed else None


def _decode_text(data: bytes) -> str:
    """Decode upload bytes as UTF-8 text.

    Raises:
        DocumentReadError: If the bytes are not valid UTF-8 or hold no text.
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentReadError("Error reading file. It is not valid UTF-8 text.") from e

    if not text:
        raise DocumentReadError("Could not read file content.")

    return text


def load_text_document(
    filename: str | None,
    content_type: str | None,
    data: bytes,
) -> Document:
    """Validate and decode an uploaded plain-text file.

    Args:
        filename: Original filename, used as the display name.
        content_type: Declared media type of the upload.
        data: Raw file bytes.

    Returns:
        Document with display name and full text.

    Raises:
        UnsupportedFileTypeError: If the file is not ``text/plain``.
        DocumentReadError: If the content cannot be decoded or is empty.
    """
    name = filename or DEFAULT_DOCUMENT_NAME

    media_type = _resolve_media_type(name, content_type)
    if media_type != PLAIN_TEXT_TYPE:
        logger.warning(f"Rejected upload {name!r} with media type {media_type!r}")
        raise UnsupportedFileTypeError()

    text = _decode_text(data)
    logger.info(f"Loaded document {name!r} ({len(text)} characters)")

    return Document(name=name, text=text)
