"""Pydantic domain models for documents, summaries and conversations.

Provides type safety and validation for everything that flows between the
loader, the LLM services and the session state.

Models:
    - Document: Loaded plain-text document
    - Entity: Named entity extracted from a document
    - Summary: Structured summary (tldr, bullets, entities)
    - ChatMessage: Individual message in the transcript
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker of a transcript message."""

    USER = "user"
    MODEL = "model"


class Document(BaseModel):
    """A loaded plain-text document.

    Attributes:
        name: Display name (the uploaded filename).
        text: Full decoded text content.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name of the document")
    text: str = Field(..., description="Full text content of the document")


class Entity(BaseModel):
    """A named entity found in the document.

    Attributes:
        name: The entity itself (person, organization, location, date...).
        type: Classification such as PERSON, ORG, LOC or DATE.
        context: Short snippet from the text where the entity appears.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ..., description="The named entity (e.g., person, organization, location, date)."
    )
    type: str = Field(
        ..., description="The type of the entity (e.g., PERSON, ORG, LOC, DATE)."
    )
    context: str = Field(
        ...,
        description="A brief sentence from the text showing the context where the entity was found.",
    )


class Summary(BaseModel):
    """Structured summary of a document.

    Attributes:
        tldr: One or two sentence synopsis.
        bullets: Key points in document order.
        entities: Extracted entities in extraction order.
    """

    model_config = ConfigDict(frozen=True)

    tldr: str = Field(
        ...,
        min_length=1,
        description="A very short, one or two sentence summary of the entire document.",
    )
    bullets: list[str] = Field(
        ...,
        description=(
            "A bulleted list of the most important points, findings, or takeaways "
            "from the document. Maximum 5-7 points."
        ),
    )
    entities: list[Entity] = Field(
        ..., description="A list of key named entities found in the document."
    )


class ChatMessage(BaseModel):
    """A single message in the transcript.

    Attributes:
        role: Who wrote the message (user or model).
        content: The message text.
    """

    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="Message role: 'user' or 'model'")
    content: str = Field(..., description="The message content")


__all__ = ["ChatMessage", "Document", "Entity", "Role", "Summary"]
