"""Agno-backed document analysis: structured summaries and grounded answers.

Core module for everything that talks to the LLM service.

Architecture Decisions:

1. **One agent per request** - The grounding instruction embeds the full
   document, so the Q&A agent is built for each question. Agents are cheap
   to construct; the model client carries no conversation state of its own.

2. **Stateless history** - No Agno storage is attached. The caller owns the
   transcript and passes prior turns explicitly, which keeps the session
   layer the single source of truth and lets a new upload discard history.

3. **JSON mode without parsing** - The summary agent asks the provider for a
   JSON object matching the ``Summary`` schema but returns the raw text.
   Validation happens here so malformed output maps to one error type and a
   partial summary is never accepted.

4. **Streaming Generator** - Agno yields run events with metadata. We keep
   only content events and turn error events or exceptions into
   ``StreamingAnswerError`` so the consumer sees one failure mode.

5. **Singleton Pattern** - The service holds validated configuration and is
   shared across requests via ``get_analysis_service``.
"""

import json
import logging
import re
from collections.abc import AsyncIterator, Sequence

from agno.agent import Agent
from agno.models.message import Message
from agno.models.openai import OpenAIChat
from pydantic import BaseModel, ValidationError

from analysis_hub.agent.config import AgentConfig, get_agent_config
from analysis_hub.agent.prompts import (
    SUMMARY_DESCRIPTION,
    SUMMARY_INSTRUCTIONS,
    grounding_instruction,
    summary_prompt,
)
from analysis_hub.errors import (
    MalformedSummaryError,
    NoDocumentError,
    StreamingAnswerError,
    SummaryGenerationError,
)
from analysis_hub.models import ChatMessage, Role, Summary

logger = logging.getLogger(__name__)

# Agno run event names
_CONTENT_EVENT = "RunContent"
_ERROR_EVENT = "RunError"

_VENDOR_ROLES = {Role.USER: "user", Role.MODEL: "assistant"}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_summary(raw: object) -> Summary:
    """Validate a summary payload returned by the LLM.

    Accepts raw JSON text (optionally wrapped in a Markdown code fence),
    an already decoded mapping, or a pydantic model.

    Args:
        raw: Response content from the summary agent.

    Returns:
        A fully validated Summary.

    Raises:
        MalformedSummaryError: If the payload is not JSON or does not match
            the schema (missing or empty tldr, non-list bullets/entities,
            incomplete entity records).
    """
    if isinstance(raw, Summary):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()

    if isinstance(raw, str):
        text = raw.strip()
        fenced = _CODE_FENCE.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Summary response is not valid JSON: {e}")
            raise MalformedSummaryError() from e

    if not isinstance(raw, dict):
        logger.warning(f"Summary response has unexpected type: {type(raw).__name__}")
        raise MalformedSummaryError()

    try:
        return Summary.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Summary response failed validation: {e.error_count()} errors")
        raise MalformedSummaryError() from e


def build_conversation(prior_turns: Sequence[ChatMessage], question: str) -> list[Message]:
    """Translate transcript turns plus a new question into Agno messages.

    Empty turns (such as a pending placeholder) are skipped.
    """
    messages = [
        Message(role=_VENDOR_ROLES[turn.role], content=turn.content)
        for turn in prior_turns
        if turn.content
    ]
    messages.append(Message(role="user", content=question))
    return messages


def _is_error_status(response: object) -> bool:
    status = getattr(response, "status", None)
    return str(getattr(status, "value", status)).lower() == "error"


class AnalysisService:
    """Service for summarizing documents and answering questions about them.

    Wraps Agno's Agent with:
    - Per-request agents built from shared configuration
    - Strict summary validation
    - Clean streaming interface for SSE endpoints
    - Centralized error handling
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the analysis service.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()

    def _create_model(self):
        """Create the model client for the configured provider.

        Returns:
            Agno model instance.
        """
        if self._config.provider == "gemini":
            # Optional dependency: pip install "analysis-hub[gemini]"
            from agno.models.google import Gemini

            return Gemini(
                id=self._config.model_name,
                api_key=self._config.api_key,
                temperature=self._config.temperature,
                max_output_tokens=self._config.max_tokens,
            )

        return OpenAIChat(
            id=self._config.model_name,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    def _create_summary_agent(self) -> Agent:
        """Create an agent that returns the summary as raw JSON text."""
        return Agent(
            model=self._create_model(),
            description=SUMMARY_DESCRIPTION,
            instructions=SUMMARY_INSTRUCTIONS,
            output_schema=Summary,
            use_json_mode=True,
            parse_response=False,
            markdown=False,
        )

    def _create_answer_agent(self, document_text: str) -> Agent:
        """Create an agent whose system message grounds it in the document."""
        return Agent(
            model=self._create_model(),
            system_message=grounding_instruction(document_text),
        )

    async def summarize(self, document_text: str) -> Summary:
        """Generate a structured summary of a document.

        Args:
            document_text: Full text of the document.

        Returns:
            Validated Summary.

        Raises:
            NoDocumentError: If the text is empty (no request is made).
            SummaryGenerationError: If the LLM request fails.
            MalformedSummaryError: If the response does not match the schema.
        """
        if not document_text or not document_text.strip():
            raise NoDocumentError()

        agent = self._create_summary_agent()
        try:
            response = await agent.arun(summary_prompt(document_text))
        except Exception as e:
            logger.error(f"Summary request failed: {e}")
            raise SummaryGenerationError() from e

        if _is_error_status(response):
            logger.error(f"Summary run ended with error: {getattr(response, 'content', None)}")
            raise SummaryGenerationError()

        summary = parse_summary(getattr(response, "content", None))
        logger.info(
            f"Generated summary with {len(summary.bullets)} bullets "
            f"and {len(summary.entities)} entities"
        )
        return summary

    async def answer_stream(
        self,
        document_text: str,
        question: str,
        prior_turns: Sequence[ChatMessage],
    ) -> AsyncIterator[str]:
        """Stream an answer grounded in the document.

        Yields response fragments as they arrive. Fragments already yielded
        stay valid if the stream later fails.

        Args:
            document_text: Full text of the document.
            question: The user's question.
            prior_turns: Conversation so far, oldest first.

        Yields:
            Response text fragments in arrival order.

        Raises:
            NoDocumentError: If the document text is empty.
            ValueError: If the question is blank.
            StreamingAnswerError: If the stream cannot be opened or fails.
        """
        if not document_text or not document_text.strip():
            raise NoDocumentError("No document loaded to answer questions about.")
        if not question or not question.strip():
            raise ValueError("Question must not be empty")

        agent = self._create_answer_agent(document_text)
        messages = build_conversation(prior_turns, question.strip())

        try:
            response_stream = agent.arun(messages, stream=True)

            async for chunk in response_stream:
                event = getattr(chunk, "event", _CONTENT_EVENT)
                if event == _ERROR_EVENT:
                    raise StreamingAnswerError()
                if event != _CONTENT_EVENT:
                    continue
                content = getattr(chunk, "content", None)
                if isinstance(content, str) and content:
                    yield content

        except StreamingAnswerError:
            logger.error("Answer stream reported an error event")
            raise
        except Exception as e:
            logger.error(f"Answer stream failed: {e}")
            raise StreamingAnswerError() from e


# Module-level singleton instance
_analysis_service: AnalysisService | None = None


def get_analysis_service() -> AnalysisService:
    """Get or create the global analysis service.

    Uses singleton pattern for resource efficiency.

    Returns:
        The AnalysisService instance.
    """
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = AnalysisService()
    return _analysis_service
