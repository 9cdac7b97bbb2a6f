"""Document Analysis Hub - LLM-backed summaries and grounded Q&A for text documents.

Combines FastAPI for HTTP streaming, Agno for LLM orchestration,
NiceGUI for visualization, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and streaming responses
    - agent: Summary generation and grounded answer streaming
    - parsing: Plain-text document loading
    - session: Transcript reducer, session state machine and orchestration
    - ui: Web interface for upload, summary and chat
    - models: Domain models and request/response schemas
"""

__version__ = "0.1.0"
