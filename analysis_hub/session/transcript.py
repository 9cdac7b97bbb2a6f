"""Transcript state transitions.

The transcript is an immutable tuple of ChatMessage. All changes go through
``reduce_transcript``, which maps a transcript and an event to the next
transcript without touching the input.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from analysis_hub.models import ChatMessage, Role

logger = logging.getLogger(__name__)

Transcript = tuple[ChatMessage, ...]


@dataclass(frozen=True)
class UserAsked:
    """The user submitted a question."""

    text: str


@dataclass(frozen=True)
class PlaceholderOpened:
    """An empty assistant turn was opened for a pending answer."""


@dataclass(frozen=True)
class FragmentReceived:
    """A streamed fragment arrived for the pending answer."""

    text: str


@dataclass(frozen=True)
class AnswerFailed:
    """The pending answer failed and is replaced by an error message."""

    message: str


TranscriptEvent = UserAsked | PlaceholderOpened | FragmentReceived | AnswerFailed


def _ends_with_model_turn(transcript: Transcript) -> bool:
    return bool(transcript) and transcript[-1].role == Role.MODEL


def reduce_transcript(transcript: Transcript, event: TranscriptEvent) -> Transcript:
    """Apply one event to a transcript.

    Args:
        transcript: Current transcript.
        event: Event to apply.

    Returns:
        The next transcript. The input is never modified.
    """
    if isinstance(event, UserAsked):
        return (*transcript, ChatMessage(role=Role.USER, content=event.text))

    if isinstance(event, PlaceholderOpened):
        return (*transcript, ChatMessage(role=Role.MODEL, content=""))

    if isinstance(event, FragmentReceived):
        if not _ends_with_model_turn(transcript):
            logger.warning("Dropped fragment: transcript does not end with an assistant turn")
            return transcript
        last = transcript[-1]
        grown = ChatMessage(role=Role.MODEL, content=last.content + event.text)
        return (*transcript[:-1], grown)

    if isinstance(event, AnswerFailed):
        failed = ChatMessage(role=Role.MODEL, content=event.message)
        if _ends_with_model_turn(transcript):
            return (*transcript[:-1], failed)
        return (*transcript, failed)

    raise TypeError(f"Unknown transcript event: {event!r}")


class Conversation:
    """Ordered user/assistant transcript with append-only updates.

    Each operation dispatches an event through ``reduce_transcript`` and
    keeps the resulting tuple.
    """

    def __init__(self, messages: Iterable[ChatMessage] = ()) -> None:
        self._transcript: Transcript = tuple(messages)

    @property
    def messages(self) -> Transcript:
        return self._transcript

    def __len__(self) -> int:
        return len(self._transcript)

    def apply(self, event: TranscriptEvent) -> Transcript:
        self._transcript = reduce_transcript(self._transcript, event)
        return self._transcript

    def append_user_turn(self, text: str) -> Transcript:
        return self.apply(UserAsked(text))

    def append_placeholder_assistant_turn(self) -> Transcript:
        return self.apply(PlaceholderOpened())

    def append_fragment_to_last_assistant_turn(self, fragment: str) -> Transcript:
        return self.apply(FragmentReceived(fragment))

    def replace_last_assistant_turn(self, text: str) -> Transcript:
        return self.apply(AnswerFailed(text))
