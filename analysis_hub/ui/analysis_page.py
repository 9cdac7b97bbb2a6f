"""NiceGUI document analysis page with SSE answer streaming."""

import logging
import os

import httpx
from nicegui import events, ui

from analysis_hub.models import ChatMessage, Role, Summary
from analysis_hub.session.transcript import Conversation
from analysis_hub.ui.client import AnalysisClient, ApiError

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #0f172a; min-height: 100vh; }

    .panel {
        background: rgba(30, 41, 59, 0.6);
        border-radius: 12px;
    }

    .header { background: linear-gradient(135deg, #4f46e5 0%, #7c3aed 100%); }

    .message-user {
        background: #334155;
        color: #e2e8f0;
        border-radius: 12px 12px 4px 12px;
    }

    .message-assistant {
        background: rgba(51, 65, 85, 0.5);
        color: #cbd5e1;
        border-radius: 12px 12px 12px 4px;
    }

    .typing-dot {
        width: 8px; height: 8px;
        background: #818cf8;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .entity-chip { background: #334155; border-radius: 9999px; }
</style>
"""


class PageState:
    """Client-side mirror of the server session."""

    def __init__(self) -> None:
        self.session_id: str | None = None
        self.document_name: str | None = None
        self.summary: Summary | None = None
        self.conversation = Conversation()
        self.is_summarizing: bool = False
        self.is_answering: bool = False
        self.error: str | None = None


@ui.page("/")
async def analysis_page() -> None:
    """Main document analysis page."""
    ui.add_head_html(CUSTOM_CSS)
    client = AnalysisClient()
    state = PageState()

    error_container: ui.column
    file_row: ui.row
    summary_container: ui.column
    messages_container: ui.column
    pending_answer: ui.markdown | None = None
    question_field: ui.input
    send_btn: ui.button

    def refresh_error() -> None:
        error_container.clear()
        if not state.error:
            return
        with error_container, ui.row().classes(
            "w-full bg-red-900/50 border border-red-700 rounded-lg p-3"
        ):
            ui.label(f"Error: {state.error}").classes("text-red-300 text-sm")

    def show_error(message: str) -> None:
        state.error = message
        refresh_error()
        ui.notify(message, type="negative")

    def refresh_file_row() -> None:
        file_row.clear()
        if not state.document_name:
            return
        with file_row:
            ui.label(f"File: {state.document_name}").classes("text-slate-300 truncate")
            label = "Analyzing..." if state.is_summarizing else "Analyze Document"
            button = ui.button(label, on_click=summarize).props("unelevated color=indigo")
            if state.is_summarizing:
                button.disable()

    def render_summary(summary: Summary) -> None:
        ui.label("Document Summary").classes("text-lg font-bold text-slate-100")
        with ui.tabs().classes("w-full text-slate-300") as tabs:
            tldr_tab = ui.tab("TL;DR")
            bullets_tab = ui.tab("Key Points")
            entities_tab = ui.tab("Entities")
        with ui.tab_panels(tabs, value=tldr_tab).classes("w-full bg-transparent"):
            with ui.tab_panel(tldr_tab):
                ui.label(summary.tldr).classes("text-slate-300 text-sm")
            with ui.tab_panel(bullets_tab), ui.column().classes("gap-2"):
                for bullet in summary.bullets:
                    with ui.row().classes("items-start gap-3 no-wrap"):
                        ui.label("◆").classes("text-indigo-400")
                        ui.label(bullet).classes("text-slate-300 text-sm")
            with ui.tab_panel(entities_tab), ui.row().classes("gap-2"):
                for entity in summary.entities:
                    with ui.row().classes("entity-chip px-3 py-1 gap-1 items-center"):
                        ui.label(entity.name).classes("text-slate-200 text-sm font-medium")
                        ui.label(entity.type).classes("text-indigo-400 text-sm")
                        ui.tooltip(entity.context)

    def refresh_summary() -> None:
        summary_container.clear()
        with summary_container:
            if state.is_summarizing:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.spinner(size="lg", color="indigo")
                    ui.label("Generating intelligent summary...").classes("text-slate-400")
            elif state.summary:
                render_summary(state.summary)
            else:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("smart_toy").classes("text-6xl text-slate-500")
                    ui.label("Document Analysis Hub").classes(
                        "text-xl font-semibold text-slate-300"
                    )
                    ui.label(
                        'Upload a document and click "Analyze" to generate a summary '
                        "and start a Q&A session."
                    ).classes("text-slate-500 text-center")

    def render_typing_indicator() -> None:
        with ui.row().classes("gap-1 py-1"):
            for _ in range(3):
                ui.element("div").classes("typing-dot")

    def render_message(msg: ChatMessage, is_last: bool) -> None:
        nonlocal pending_answer
        is_user = msg.role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align} gap-3 items-start"):
            if not is_user:
                ui.icon("smart_toy").classes("text-indigo-400 text-2xl")
            with ui.element("div").classes(f"max-w-[75%] px-4 py-3 {bubble}"):
                if is_user:
                    ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                elif state.is_answering and is_last:
                    if not msg.content:
                        render_typing_indicator()
                    pending_answer = ui.markdown(msg.content).classes("text-sm")
                else:
                    ui.markdown(msg.content).classes("text-sm")
            if is_user:
                ui.icon("person").classes("text-slate-400 text-2xl")

    def refresh_messages() -> None:
        nonlocal pending_answer
        pending_answer = None
        messages_container.clear()
        with messages_container:
            if state.summary is None:
                return
            ui.label("Q&A Assistant").classes("text-lg font-bold text-slate-100")
            messages = state.conversation.messages
            for index, msg in enumerate(messages):
                render_message(msg, is_last=index == len(messages) - 1)

    def refresh_all() -> None:
        refresh_error()
        refresh_file_row()
        refresh_summary()
        refresh_messages()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        data = await e.file.read()
        try:
            result = await client.upload_document(
                state.session_id, e.file.name, e.file.content_type, data
            )
        except ApiError as err:
            show_error(err.message)
            return
        except httpx.RequestError as err:
            show_error(f"Connection failed: {err}")
            return
        finally:
            uploader.reset()

        state.document_name = result.filename
        state.summary = None
        state.conversation = Conversation()
        state.error = None
        refresh_all()

    async def summarize() -> None:
        if state.is_summarizing or not state.document_name:
            return
        state.is_summarizing = True
        state.error = None
        state.summary = None
        refresh_all()

        try:
            result = await client.summarize(state.session_id)
        except ApiError as err:
            state.error = err.message
            ui.notify(err.message, type="negative")
        except httpx.RequestError as err:
            state.error = f"Connection failed: {err}"
        else:
            state.summary = result.summary
            state.conversation = Conversation(result.transcript)
        finally:
            state.is_summarizing = False
            refresh_all()

    async def send_question() -> None:
        question = (question_field.value or "").strip()
        if not question or state.is_answering or state.summary is None:
            return

        question_field.value = ""
        state.is_answering = True
        state.error = None
        send_btn.disable()

        state.conversation.append_user_turn(question)
        state.conversation.append_placeholder_assistant_turn()
        refresh_messages()
        refresh_error()

        def on_chunk(content: str) -> None:
            first = not state.conversation.messages[-1].content
            state.conversation.append_fragment_to_last_assistant_turn(content)
            if first or pending_answer is None:
                refresh_messages()
            else:
                pending_answer.set_content(state.conversation.messages[-1].content)

        def finish_answer() -> None:
            state.is_answering = False
            send_btn.enable()
            refresh_messages()

        def on_error(message: str) -> None:
            state.conversation.replace_last_assistant_turn(message)
            show_error(message)
            finish_answer()

        try:
            await client.stream_answer(
                state.session_id, question, on_chunk, finish_answer, on_error
            )
        finally:
            if state.is_answering:
                finish_answer()

        try:
            snapshot = await client.get_snapshot(state.session_id)
        except (ApiError, httpx.RequestError) as err:
            logger.warning(f"Could not resync transcript for session {state.session_id}: {err}")
            return
        state.conversation = Conversation(snapshot.transcript)
        refresh_messages()

    # === UI Layout ===
    with ui.column().classes("w-full min-h-screen gap-0"):
        with ui.row().classes("w-full header px-6 py-4 items-center gap-3"):
            ui.icon("description").classes("text-white text-3xl")
            ui.label("Document Analysis Hub").classes("text-lg font-semibold text-white")

        with ui.grid(columns=2).classes("w-full max-w-7xl mx-auto p-6 gap-8"):
            with ui.column().classes("w-full gap-6"):
                uploader = (
                    ui.upload(
                        label="Click to upload or drag and drop (TXT files only)",
                        on_upload=handle_upload,
                        auto_upload=True,
                        max_files=1,
                    )
                    .props('accept=".txt,text/plain" flat bordered')
                    .classes("w-full")
                )
                file_row = ui.row().classes(
                    "w-full panel p-4 items-center justify-between no-wrap"
                )
                error_container = ui.column().classes("w-full")

            with ui.column().classes("w-full panel p-4 gap-4"):
                summary_container = ui.column().classes("w-full")
                with ui.scroll_area().classes("w-full h-96"):
                    messages_container = ui.column().classes("w-full gap-4")
                with ui.row().classes("w-full items-center gap-2 no-wrap"):
                    question_field = (
                        ui.input(placeholder="Ask a question about the document...")
                        .props("dark outlined dense")
                        .classes("flex-grow")
                        .on("keydown.enter", send_question)
                    )
                    send_btn = ui.button(icon="send", on_click=send_question).props(
                        "unelevated color=indigo"
                    )

    try:
        state.session_id = await client.create_session()
    except (ApiError, httpx.RequestError) as err:
        state.error = f"Could not start a session: {err}"

    refresh_all()


def main() -> None:
    ui.run(
        title="Document Analysis Hub",
        port=int(os.getenv("UI_PORT", "8080")),
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "analysis-hub-secret"),
    )


if __name__ == "__main__":
    main()
