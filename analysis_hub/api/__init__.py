"""FastAPI endpoints for the document analysis hub.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time answer streaming.

Endpoints:
    - GET /health: Service health status
    - POST /sessions: Create an analysis session
    - GET /sessions/{id}: Session snapshot (document, summary, transcript)
    - POST /sessions/{id}/document: Plain-text document upload
    - POST /sessions/{id}/summary: Structured summary generation
    - POST /sessions/{id}/chat/stream: Grounded answer streaming
"""

from analysis_hub.api.app import app, create_app

__all__ = ["app", "create_app"]
