"""Unit tests for AnalysisService, summary validation and answer streaming."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_check as check

from analysis_hub.agent.analysis_agent import (
    AnalysisService,
    build_conversation,
    parse_summary,
)
from analysis_hub.agent.config import AgentConfig
from analysis_hub.errors import (
    MalformedSummaryError,
    NoDocumentError,
    StreamingAnswerError,
    SummaryGenerationError,
)
from analysis_hub.models import ChatMessage, Role, Summary

DOCUMENT = "Alice met Bob in Paris on May 1."

VALID_PAYLOAD = {
    "tldr": "Alice and Bob met in Paris.",
    "bullets": ["Alice met Bob.", "They met on May 1."],
    "entities": [
        {"name": "Alice", "type": "PERSON", "context": "Alice met Bob in Paris on May 1."},
        {"name": "Bob", "type": "PERSON", "context": "Alice met Bob in Paris on May 1."},
        {"name": "Paris", "type": "LOC", "context": "Alice met Bob in Paris on May 1."},
        {"name": "May 1", "type": "DATE", "context": "Alice met Bob in Paris on May 1."},
    ],
}


def make_config(**overrides: object) -> AgentConfig:
    values = {
        "provider": "openai",
        "api_key": "sk-test-key",
        "base_url": None,
        "model_name": "gpt-4o-mini",
        "temperature": 0.7,
        "max_tokens": 2048,
    }
    values.update(overrides)
    return AgentConfig(**values)


def content_event(text: str) -> SimpleNamespace:
    return SimpleNamespace(event="RunContent", content=text)


def stream_of(*events: object, error: Exception | None = None):
    """Build an async iterator like ``Agent.arun(..., stream=True)`` returns."""

    async def generator():
        for event in events:
            yield event
        if error is not None:
            raise error

    return generator()


async def collect(service: AnalysisService, *args: object) -> list[str]:
    return [fragment async for fragment in service.answer_stream(*args)]


class TestParseSummary:
    """Tests for strict summary validation."""

    def test_accepts_valid_json_text(self) -> None:
        summary = parse_summary(json.dumps(VALID_PAYLOAD))

        check.equal(summary.tldr, VALID_PAYLOAD["tldr"])
        check.equal(summary.bullets, VALID_PAYLOAD["bullets"])
        check.equal([e.name for e in summary.entities], ["Alice", "Bob", "Paris", "May 1"])

    def test_entities_for_alice_document(self) -> None:
        """Mocked output for the Alice/Bob document passes validation."""
        summary = parse_summary(json.dumps(VALID_PAYLOAD))
        pairs = {(e.name, e.type) for e in summary.entities}

        assert ("Alice", "PERSON") in pairs
        assert ("Paris", "LOC") in pairs

    def test_accepts_fenced_json(self) -> None:
        raw = "```json\n" + json.dumps(VALID_PAYLOAD) + "\n```"

        assert parse_summary(raw).tldr == VALID_PAYLOAD["tldr"]

    def test_accepts_mapping_and_model(self) -> None:
        summary = parse_summary(VALID_PAYLOAD)

        assert parse_summary(summary) is summary
        assert parse_summary(dict(VALID_PAYLOAD)) == summary

    def test_accepts_empty_lists(self) -> None:
        summary = parse_summary({"tldr": "Short.", "bullets": [], "entities": []})

        assert summary.bullets == []
        assert summary.entities == []

    @pytest.mark.parametrize("missing", ["tldr", "bullets", "entities"])
    def test_rejects_missing_field(self, missing: str) -> None:
        payload = {k: v for k, v in VALID_PAYLOAD.items() if k != missing}

        with pytest.raises(MalformedSummaryError):
            parse_summary(json.dumps(payload))

    @pytest.mark.parametrize("field", ["bullets", "entities"])
    @pytest.mark.parametrize("value", ["not a list", {"a": 1}, 5, None])
    def test_rejects_non_list_sequences(self, field: str, value: object) -> None:
        payload = {**VALID_PAYLOAD, field: value}

        with pytest.raises(MalformedSummaryError):
            parse_summary(json.dumps(payload))

    @pytest.mark.parametrize("missing", ["name", "type", "context"])
    def test_rejects_incomplete_entity(self, missing: str) -> None:
        entity = {k: v for k, v in VALID_PAYLOAD["entities"][0].items() if k != missing}
        payload = {**VALID_PAYLOAD, "entities": [entity]}

        with pytest.raises(MalformedSummaryError):
            parse_summary(json.dumps(payload))

    @pytest.mark.parametrize("tldr", ["", None, 42])
    def test_rejects_bad_tldr(self, tldr: object) -> None:
        with pytest.raises(MalformedSummaryError):
            parse_summary(json.dumps({**VALID_PAYLOAD, "tldr": tldr}))

    @pytest.mark.parametrize("raw", ["not json at all", "[1, 2, 3]", "", None])
    def test_rejects_non_object_payloads(self, raw: object) -> None:
        with pytest.raises(MalformedSummaryError):
            parse_summary(raw)


class TestBuildConversation:
    """Tests for history translation."""

    def test_maps_roles_and_appends_question(self) -> None:
        turns = [
            ChatMessage(role=Role.MODEL, content="I've summarized the document."),
            ChatMessage(role=Role.USER, content="Who is Alice?"),
            ChatMessage(role=Role.MODEL, content="Alice met Bob."),
        ]

        messages = build_conversation(turns, "Where did they meet?")

        assert [m.role for m in messages] == ["assistant", "user", "assistant", "user"]
        assert messages[-1].content == "Where did they meet?"
        assert messages[1].content == "Who is Alice?"

    def test_skips_empty_turns(self) -> None:
        turns = [
            ChatMessage(role=Role.USER, content="Q"),
            ChatMessage(role=Role.MODEL, content=""),
        ]

        messages = build_conversation(turns, "Next?")

        assert [m.content for m in messages] == ["Q", "Next?"]


@patch("analysis_hub.agent.analysis_agent.OpenAIChat")
@patch("analysis_hub.agent.analysis_agent.Agent")
class TestSummarize:
    """Tests for AnalysisService.summarize."""

    async def test_returns_validated_summary(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        agent = mock_agent_class.return_value
        agent.arun = AsyncMock(
            return_value=SimpleNamespace(content=json.dumps(VALID_PAYLOAD), status="COMPLETED")
        )

        summary = await AnalysisService(config=make_config()).summarize(DOCUMENT)

        assert isinstance(summary, Summary)
        assert summary.entities[0].name == "Alice"

    async def test_builds_json_mode_agent(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        agent = mock_agent_class.return_value
        agent.arun = AsyncMock(return_value=SimpleNamespace(content=json.dumps(VALID_PAYLOAD)))

        await AnalysisService(config=make_config(temperature=0.2)).summarize(DOCUMENT)

        mock_openai_chat.assert_called_once_with(
            id="gpt-4o-mini",
            api_key="sk-test-key",
            base_url=None,
            temperature=0.2,
            max_tokens=2048,
        )
        kwargs = mock_agent_class.call_args.kwargs
        check.is_(kwargs["output_schema"], Summary)
        check.is_true(kwargs["use_json_mode"])
        check.is_false(kwargs["parse_response"])

        prompt = agent.arun.call_args.args[0]
        check.is_in(DOCUMENT, prompt)
        check.is_in('"tldr"', prompt)

    async def test_empty_document_fails_before_request(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        with pytest.raises(NoDocumentError):
            await AnalysisService(config=make_config()).summarize("   ")

        mock_agent_class.assert_not_called()

    async def test_transport_failure_raises_generation_error(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = AsyncMock(side_effect=ConnectionError("down"))

        with pytest.raises(SummaryGenerationError):
            await AnalysisService(config=make_config()).summarize(DOCUMENT)

    async def test_error_status_raises_generation_error(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = AsyncMock(
            return_value=SimpleNamespace(content="rate limited", status="ERROR")
        )

        with pytest.raises(SummaryGenerationError):
            await AnalysisService(config=make_config()).summarize(DOCUMENT)

    async def test_malformed_response_raises(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = AsyncMock(
            return_value=SimpleNamespace(content='{"tldr": "Only a synopsis"}')
        )

        with pytest.raises(MalformedSummaryError):
            await AnalysisService(config=make_config()).summarize(DOCUMENT)


@patch("analysis_hub.agent.analysis_agent.OpenAIChat")
@patch("analysis_hub.agent.analysis_agent.Agent")
class TestAnswerStream:
    """Tests for AnalysisService.answer_stream."""

    async def test_yields_fragments_in_order(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = MagicMock(
            return_value=stream_of(
                content_event("The "), content_event("answer "), content_event("is 42.")
            )
        )

        fragments = await collect(
            AnalysisService(config=make_config()), DOCUMENT, "What is it?", []
        )

        assert fragments == ["The ", "answer ", "is 42."]

    async def test_skips_other_events_and_empty_content(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = MagicMock(
            return_value=stream_of(
                SimpleNamespace(event="RunStarted", content=None),
                content_event(""),
                content_event("Paris."),
                SimpleNamespace(event="RunCompleted", content="Paris."),
            )
        )

        fragments = await collect(
            AnalysisService(config=make_config()), DOCUMENT, "Where?", []
        )

        assert fragments == ["Paris."]

    async def test_grounding_instruction_and_history(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        agent = mock_agent_class.return_value
        agent.arun = MagicMock(return_value=stream_of(content_event("Bob.")))
        prior = [
            ChatMessage(role=Role.MODEL, content="Ask me anything."),
            ChatMessage(role=Role.USER, content="Who is Alice?"),
            ChatMessage(role=Role.MODEL, content="Someone who met Bob."),
        ]

        await collect(AnalysisService(config=make_config()), DOCUMENT, "  Who did she meet? ", prior)

        system_message = mock_agent_class.call_args.kwargs["system_message"]
        check.is_in(DOCUMENT, system_message)
        check.is_in("only", system_message)
        check.is_in("external knowledge", system_message)

        messages = agent.arun.call_args.args[0]
        check.equal(len(messages), 4)
        check.equal(messages[-1].content, "Who did she meet?")
        check.is_true(agent.arun.call_args.kwargs["stream"])

    async def test_mid_stream_failure_keeps_yielded_fragments(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = MagicMock(
            return_value=stream_of(content_event("Partial"), error=ConnectionError("reset"))
        )
        received: list[str] = []

        with pytest.raises(StreamingAnswerError):
            async for fragment in AnalysisService(config=make_config()).answer_stream(
                DOCUMENT, "Q?", []
            ):
                received.append(fragment)

        assert received == ["Partial"]

    async def test_error_event_raises(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = MagicMock(
            return_value=stream_of(SimpleNamespace(event="RunError", content="quota exceeded"))
        )

        with pytest.raises(StreamingAnswerError):
            await collect(AnalysisService(config=make_config()), DOCUMENT, "Q?", [])

    async def test_open_failure_raises(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        mock_agent_class.return_value.arun = MagicMock(side_effect=RuntimeError("bad request"))

        with pytest.raises(StreamingAnswerError):
            await collect(AnalysisService(config=make_config()), DOCUMENT, "Q?", [])

    async def test_blank_question_rejected(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        with pytest.raises(ValueError):
            await collect(AnalysisService(config=make_config()), DOCUMENT, "   ", [])

        mock_agent_class.assert_not_called()

    async def test_empty_document_rejected(
        self, mock_agent_class: MagicMock, mock_openai_chat: MagicMock
    ) -> None:
        with pytest.raises(NoDocumentError):
            await collect(AnalysisService(config=make_config()), "", "Q?", [])


class TestGeminiProvider:
    """Tests for the optional Gemini backend."""

    def test_creates_gemini_model(self) -> None:
        pytest.importorskip("google.genai")

        with patch("agno.models.google.Gemini") as mock_gemini:
            service = AnalysisService(
                config=make_config(provider="gemini", model_name="gemini-2.5-flash")
            )
            service._create_model()

        mock_gemini.assert_called_once_with(
            id="gemini-2.5-flash",
            api_key="sk-test-key",
            temperature=0.7,
            max_output_tokens=2048,
        )


class TestGetAnalysisService:
    """Tests for get_analysis_service singleton function."""

    def test_singleton_returns_same_instance(self) -> None:
        import analysis_hub.agent.analysis_agent as analysis_module

        analysis_module._analysis_service = None

        with patch.object(analysis_module, "AnalysisService") as mock_service:
            mock_service.return_value = MagicMock()

            first = analysis_module.get_analysis_service()
            second = analysis_module.get_analysis_service()

            assert first is second
            mock_service.assert_called_once()

        analysis_module._analysis_service = None
